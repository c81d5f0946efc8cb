"""Refresh cycle wiring: readers -> calculator -> renderer -> terminal."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from termstat_renderer import ReportRenderer, get_glyph_set
from termstat_telemetry import MetricSnapshot, TelemetryProvider
from termstat_terminal import TerminalSink

from .config import AppConfig
from .scheduler import RefreshScheduler, SchedulerStatus

logger = logging.getLogger("termstat.monitor")


class Monitor:
    def __init__(
        self,
        provider: TelemetryProvider,
        renderer: ReportRenderer,
        sink: TerminalSink,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self.provider = provider
        self.renderer = renderer
        self.sink = sink
        self._clock = clock
        self._sleep = sleep
        self.scheduler: RefreshScheduler | None = None
        self.last_snapshot: MetricSnapshot | None = None

    @classmethod
    def from_config(cls, cfg: AppConfig, sink: TerminalSink | None = None) -> "Monitor":
        glyphs = get_glyph_set(cfg.display.glyphs)
        if sink is None:
            sink = TerminalSink()
            # Redirected output gets plain frames, not escape sequences.
            sink.clear = cfg.display.clear_screen and sink.is_tty
        provider = TelemetryProvider(
            proc_root=cfg.sources.proc_root,
            sys_root=cfg.sources.sys_root,
            levels=glyphs.levels,
            include_load=cfg.sources.include_load,
            on_error=cfg.errors.policy,
        )
        return cls(
            provider=provider,
            renderer=ReportRenderer(glyphs),
            sink=sink,
        )

    def refresh(self, elapsed_s: float | None = None) -> MetricSnapshot:
        snapshot = self.provider.poll(elapsed_s)
        self.sink.write(self.renderer.render(snapshot))
        self.last_snapshot = snapshot
        return snapshot

    def run(self, period_s: float | None, max_cycles: int | None = None) -> SchedulerStatus:
        """Open the readers, loop until stopped (or once for period 0), close the readers."""
        self.scheduler = RefreshScheduler(period_s, clock=self._clock, sleep=self._sleep, max_cycles=max_cycles)
        with self.provider:
            logger.info(
                "refresh loop starting period_s=%s",
                period_s,
                extra={"event": "loop_start", "elapsed_s": period_s},
            )
            try:
                status = self.scheduler.run(self.refresh)
            finally:
                logger.info(
                    "refresh loop finished cycles=%d skipped=%d",
                    self.scheduler.status.cycles,
                    self.scheduler.status.skipped,
                    extra={"event": "loop_stop", "skipped": self.scheduler.status.skipped},
                )
        return status

    def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()
