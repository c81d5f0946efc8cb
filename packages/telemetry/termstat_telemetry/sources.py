"""Sampling primitives shared by the counter readers.

Two streaming idioms live here and both look the same from the outside, a
fresh value per call:

* `PseudoFile` keeps one descriptor open and rereads from offset 0, because
  procfs/sysfs present the current value at the start of the file on every read.
* `DeltaCounter` wraps a cumulative counter so each `take()` reports only what
  accumulated since the previous `take()`, i.e. reset-on-read.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from .errors import ParseFailure, ReadFailure, ResourceUnavailable


class PseudoFile:
    """A kernel pseudo-file opened once and reread many times."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._handle = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def open(self) -> "PseudoFile":
        if self._handle is not None:
            return self
        try:
            self._handle = open(self.path, "rb", buffering=0)
        except OSError as exc:
            raise ResourceUnavailable(f"cannot open {self.path}: {exc.strerror or exc}", source=str(self.path)) from exc
        return self

    def read(self) -> str:
        if self._handle is None:
            raise ReadFailure(f"{self.path} read before open", source=str(self.path))
        try:
            self._handle.seek(0)
            data = self._handle.read()
        except OSError as exc:
            raise ReadFailure(f"cannot read {self.path}: {exc.strerror or exc}", source=str(self.path)) from exc
        return data.decode("ascii", errors="replace")

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "PseudoFile":
        return self.open()

    def __exit__(self, *_exc) -> None:
        self.close()


def read_once(path: Path | str, *, required: bool = True) -> str | None:
    """One-shot read for values that do not change or are not worth a persistent handle."""
    path = Path(path)
    try:
        return path.read_text(encoding="ascii", errors="replace")
    except FileNotFoundError as exc:
        if not required:
            return None
        raise ResourceUnavailable(f"missing {path}", source=str(path)) from exc
    except OSError as exc:
        raise ReadFailure(f"cannot read {path}: {exc.strerror or exc}", source=str(path)) from exc


def first_token(text: str, source: str) -> str:
    parts = text.split()
    if not parts:
        raise ParseFailure(f"empty content in {source}", source=source)
    return parts[0]


def parse_int(text: str, source: str) -> int:
    token = first_token(text, source)
    try:
        return int(token)
    except ValueError as exc:
        raise ParseFailure(f"expected integer in {source}, got {token!r}", source=source) from exc


def parse_float(text: str, source: str) -> float:
    token = first_token(text, source)
    try:
        return float(token)
    except ValueError as exc:
        raise ParseFailure(f"expected number in {source}, got {token!r}", source=source) from exc


class DeltaCounter:
    """Reset-on-read view over a monotonically increasing counter.

    `take()` returns the increase since the previous `take()` (or since `prime()`).
    A counter that goes backwards, e.g. after CPU hotplug, is treated as freshly
    reset and reports its current raw value.
    """

    def __init__(self, read: Callable[[], float], name: str = "counter") -> None:
        self._read = read
        self.name = name
        self._last: float | None = None

    def prime(self) -> None:
        self._last = self._read()

    def take(self) -> float:
        current = self._read()
        previous = self._last
        self._last = current
        if previous is None:
            return 0.0
        if current < previous:
            return current
        return current - previous
