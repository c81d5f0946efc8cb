"""Terminal output sink that replaces the previous frame in one write."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, TextIO

CLEAR_HOME = "\x1b[H\x1b[2J"


@dataclass
class SinkStats:
    frames: int = 0
    bytes_written: int = 0


class TerminalSink:
    """Writes clear+home and the whole report as a single payload, then flushes.

    With `clear=False` frames are appended plainly, for pipes and one-shot runs.
    """

    def __init__(self, stream: TextIO | None = None, clear: bool = True, encoding: str = "utf-8") -> None:
        self._stream = stream if stream is not None else sys.stdout
        self.clear = clear
        self.encoding = encoding
        self.stats = SinkStats()

    @property
    def is_tty(self) -> bool:
        isatty = getattr(self._stream, "isatty", None)
        return bool(isatty and isatty())

    def compose(self, buffer: str) -> str:
        return (CLEAR_HOME + buffer) if self.clear else buffer

    def write(self, buffer: str) -> int:
        frame = self.compose(buffer)
        raw: Any = getattr(self._stream, "buffer", None)
        if raw is not None:
            # Skip the text layer so the frame is not split at its line boundaries.
            self._stream.flush()
            payload = frame.encode(self.encoding, errors="replace")
            raw.write(payload)
            raw.flush()
            written = len(payload)
        else:
            self._stream.write(frame)
            self._stream.flush()
            written = len(frame.encode(self.encoding, errors="replace"))

        self.stats.frames += 1
        self.stats.bytes_written += written
        return written
