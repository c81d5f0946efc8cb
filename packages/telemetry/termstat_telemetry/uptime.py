"""System uptime reader over /proc/uptime."""

from __future__ import annotations

from pathlib import Path

from .errors import ParseFailure
from .models import UptimeSample
from .sources import PseudoFile, parse_float


class UptimeReader:
    def __init__(self, proc_root: Path | str = "/proc") -> None:
        self.path = Path(proc_root) / "uptime"
        self._file = PseudoFile(self.path)

    def open(self) -> "UptimeReader":
        self._file.open()
        return self

    def sample(self) -> UptimeSample:
        text = self._file.read()
        uptime = parse_float(text, str(self.path))
        if uptime < 0:
            raise ParseFailure(f"negative uptime {uptime} in {self.path}", source=str(self.path))
        return UptimeSample(uptime_s=uptime)

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "UptimeReader":
        return self.open()

    def __exit__(self, *_exc) -> None:
        self.close()
