"""Fixed-period refresh loop with drift-free targets and at-most-one refresh in flight."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger("termstat.scheduler")

RefreshFn = Callable[[float | None], Any]


class SchedulerState(str, Enum):
    IDLE = "Idle"
    RUNNING = "Running"
    SLEEPING = "Sleeping"
    STOPPED = "Stopped"
    FAILED = "Failed"


@dataclass
class SchedulerStatus:
    state: SchedulerState = SchedulerState.IDLE
    cycles: int = 0
    skipped: int = 0
    last_elapsed_s: float | None = None
    last_duration_s: float = 0.0
    mean_interval_s: float = 0.0
    last_error: str | None = None


class RefreshScheduler:
    """Calls `refresh(elapsed_s)` every `period_s` seconds.

    Targets advance as `previous_target + period`, so per-cycle processing time
    never accumulates into drift. A refresh that runs past one or more targets
    does not cause catch-up firing; the loop moves on to the next boundary after
    `now` and counts the missed ones in `status.skipped`.

    `elapsed_s` is the measured monotonic time between the previous and the
    current cycle start, or None for the first cycle. A period of 0 or None
    runs exactly one cycle. `stop()` is honoured at cycle boundaries only.
    """

    def __init__(
        self,
        period_s: float | None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] | None = None,
        max_cycles: int | None = None,
    ) -> None:
        if period_s is not None and period_s < 0:
            raise ValueError(f"refresh period must not be negative, got {period_s}")
        self.period_s = period_s or 0.0
        self.max_cycles = max_cycles
        self._clock = clock
        self._stop = threading.Event()
        self._sleep = sleep or self._stop.wait
        self._status = SchedulerStatus()
        self._events: list[dict[str, Any]] = []

    @property
    def status(self) -> SchedulerStatus:
        return self._status

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        self._stop.set()

    def recent_events(self, limit: int = 200) -> list[dict[str, Any]]:
        return self._events[-limit:]

    def _log_event(self, event: str, **fields: Any) -> None:
        row = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "event": event,
            "state": self._status.state.value,
        }
        row.update(fields)
        self._events.append(row)
        if len(self._events) > 1000:
            self._events = self._events[-1000:]

    def _cycle(self, refresh: RefreshFn, elapsed: float | None) -> float:
        status = self._status
        status.state = SchedulerState.RUNNING
        start = self._clock()
        try:
            refresh(elapsed)
        except BaseException as exc:
            status.state = SchedulerState.FAILED
            status.last_error = str(exc) or type(exc).__name__
            self._log_event("refresh_error", error=status.last_error)
            raise
        end = self._clock()

        status.cycles += 1
        status.last_elapsed_s = elapsed
        status.last_duration_s = end - start
        if elapsed is not None:
            # Running mean over intervals; the first cycle has none.
            intervals = status.cycles - 1
            status.mean_interval_s += (elapsed - status.mean_interval_s) / intervals
        return end

    def run(self, refresh: RefreshFn) -> SchedulerStatus:
        status = self._status
        self._log_event("run_start", period_s=self.period_s)

        if self.period_s <= 0:
            self._cycle(refresh, None)
            status.state = SchedulerState.STOPPED
            self._log_event("run_once_done")
            return status

        period = self.period_s
        target = self._clock()
        last_start: float | None = None

        while not self._stop.is_set():
            now = self._clock()
            if now < target:
                status.state = SchedulerState.SLEEPING
                self._sleep(target - now)
                if self._stop.is_set():
                    break

            start = self._clock()
            elapsed = None if last_start is None else start - last_start
            last_start = start
            end = self._cycle(refresh, elapsed)

            if self.max_cycles is not None and status.cycles >= self.max_cycles:
                break

            target += period
            if end > target:
                behind = math.ceil((end - target) / period)
                target += behind * period
                status.skipped += behind
                self._log_event("overrun", skipped=behind, duration_s=status.last_duration_s)
                logger.debug(
                    "refresh overran by %d period(s)",
                    behind,
                    extra={"event": "refresh_overrun", "skipped": behind},
                )

        status.state = SchedulerState.STOPPED
        self._log_event("run_stop", cycles=status.cycles, skipped=status.skipped)
        return status
