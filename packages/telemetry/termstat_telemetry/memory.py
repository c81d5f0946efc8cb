"""Memory reader over /proc/meminfo."""

from __future__ import annotations

from pathlib import Path

from .errors import ParseFailure
from .models import MemorySample
from .sources import PseudoFile

_REQUIRED_KEYS = ("MemTotal", "MemAvailable")


def parse_meminfo(text: str, source: str = "meminfo") -> MemorySample:
    """Pull MemTotal and MemAvailable (kB) out of a meminfo block."""
    found: dict[str, int] = {}
    for line in text.splitlines():
        key, sep, rest = line.partition(":")
        if not sep or key not in _REQUIRED_KEYS:
            continue
        fields = rest.split()
        if not fields:
            raise ParseFailure(f"{key} has no value in {source}", source=f"{source}:{key}")
        if len(fields) > 1 and fields[1] != "kB":
            raise ParseFailure(f"{key} has unexpected unit {fields[1]!r} in {source}", source=f"{source}:{key}")
        try:
            found[key] = int(fields[0])
        except ValueError as exc:
            raise ParseFailure(f"{key} value {fields[0]!r} is not an integer in {source}", source=f"{source}:{key}") from exc
        if len(found) == len(_REQUIRED_KEYS):
            break

    missing = [key for key in _REQUIRED_KEYS if key not in found]
    if missing:
        raise ParseFailure(f"missing {', '.join(missing)} in {source}", source=source)
    return MemorySample(total_kb=found["MemTotal"], available_kb=found["MemAvailable"])


class MemoryReader:
    """Reads the whole meminfo block in one call so the kernel cannot update it mid-parse."""

    def __init__(self, proc_root: Path | str = "/proc") -> None:
        self.path = Path(proc_root) / "meminfo"
        self._file = PseudoFile(self.path)

    def open(self) -> "MemoryReader":
        self._file.open()
        return self

    def sample(self) -> MemorySample:
        return parse_meminfo(self._file.read(), str(self.path))

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "MemoryReader":
        return self.open()

    def __exit__(self, *_exc) -> None:
        self.close()
