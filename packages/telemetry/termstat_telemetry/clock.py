"""Wall-clock, TAI and monotonic time reader."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable

from .models import ClockSample


def _tai_now() -> float:
    clock_id = getattr(time, "CLOCK_TAI", None)
    if clock_id is None:  # pragma: no cover - non-Linux
        return time.time()
    try:
        return time.clock_gettime(clock_id)
    except OSError:  # pragma: no cover - kernel without TAI support
        return time.time()


class ClockReader:
    """Pure function of "now"; there is nothing to open."""

    def __init__(
        self,
        wall: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
        tai: Callable[[], float] = _tai_now,
    ) -> None:
        self._wall = wall
        self._monotonic = monotonic
        self._tai = tai

    def open(self) -> "ClockReader":
        return self

    def sample(self) -> ClockSample:
        unix_s = self._wall()
        utc = datetime.fromtimestamp(unix_s, tz=timezone.utc)
        return ClockSample(
            utc=utc,
            local=utc.astimezone(),
            unix_s=unix_s,
            tai_s=self._tai(),
            monotonic_s=self._monotonic(),
        )

    def close(self) -> None:
        return None
