"""Single polling provider: all readers, then all derivations, once per cycle."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from .clock import ClockReader
from .cpu import CpuFrequencyReader, CpuLoadReader
from .errors import TelemetryError
from .memory import MemoryReader
from .models import MetricSnapshot
from .power import PowerReader
from .rates import derive_clock, derive_cpu, derive_memory, derive_power, derive_uptime
from .uptime import UptimeReader

logger = logging.getLogger("termstat.telemetry")

ERROR_POLICIES = ("fail_fast", "skip")

FAMILIES = ("clock", "uptime", "cpu", "memory", "power")


class TelemetryProvider:
    """Owns one reader per metric family and turns their samples into a snapshot.

    `open()` acquires every persistent handle and reads fixed bounds; a failure
    there is fatal. Failures inside `poll()` follow `on_error`: `fail_fast`
    re-raises, `skip` drops the family for that cycle and records the message.
    """

    def __init__(
        self,
        proc_root: Path | str = "/proc",
        sys_root: Path | str = "/sys",
        levels: int = 3,
        include_load: bool = True,
        on_error: str = "fail_fast",
        clock: ClockReader | None = None,
        uptime: UptimeReader | None = None,
        cpu_frequency: CpuFrequencyReader | None = None,
        cpu_load: CpuLoadReader | None = None,
        memory: MemoryReader | None = None,
        power: PowerReader | None = None,
    ) -> None:
        if on_error not in ERROR_POLICIES:
            raise ValueError(f"unknown error policy {on_error!r}, expected one of {ERROR_POLICIES}")
        if levels < 1:
            raise ValueError(f"levels must be positive, got {levels}")
        self.levels = levels
        self.on_error = on_error

        self.clock = clock or ClockReader()
        self.uptime = uptime or UptimeReader(proc_root)
        self.cpu_frequency = cpu_frequency or CpuFrequencyReader(sys_root)
        self.cpu_load = (cpu_load or CpuLoadReader(sys_root=sys_root)) if include_load else None
        self.memory = memory or MemoryReader(proc_root)
        self.power = power or PowerReader(sys_root)
        self._opened = False

    def _readers(self) -> list[Any]:
        readers: list[Any] = [self.clock, self.uptime, self.cpu_frequency, self.memory, self.power]
        if self.cpu_load is not None:
            readers.insert(3, self.cpu_load)
        return readers

    def open(self) -> "TelemetryProvider":
        if self._opened:
            return self
        opened: list[Any] = []
        try:
            for reader in self._readers():
                reader.open()
                opened.append(reader)
        except TelemetryError:
            for reader in opened:
                reader.close()
            raise
        self._opened = True
        logger.info("telemetry readers opened", extra={"event": "readers_opened"})
        return self

    def close(self) -> None:
        for reader in self._readers():
            reader.close()
        self._opened = False

    def __enter__(self) -> "TelemetryProvider":
        return self.open()

    def __exit__(self, *_exc) -> None:
        self.close()

    def _guard(self, family: str, errors: dict[str, str], fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except TelemetryError as exc:
            if self.on_error == "fail_fast":
                raise
            errors.setdefault(family, str(exc))
            logger.warning(
                "skipping %s for this cycle: %s",
                family,
                exc,
                extra={"event": "family_skipped", "family": family, "kind": exc.kind},
            )
            return None

    def poll(self, elapsed_s: float | None = None) -> MetricSnapshot:
        """Sample every family, then derive. `elapsed_s` is the measured interval since the previous cycle."""
        if not self._opened:
            self.open()

        # Every read finishes before any derivation runs.
        errors: dict[str, str] = {}
        clock_raw = self._guard("clock", errors, self.clock.sample)
        uptime_raw = self._guard("uptime", errors, self.uptime.sample)
        # Idle counters reset on every read, so load is sampled even when frequency fails.
        frequencies = self._guard("cpu", errors, self.cpu_frequency.sample)
        idle = self._guard("cpu", errors, self.cpu_load.sample) if self.cpu_load is not None else None
        memory_raw = self._guard("memory", errors, self.memory.sample)
        power_raw = self._guard("power", errors, self.power.sample)

        clock = derive_clock(clock_raw) if clock_raw is not None else None
        uptime = derive_uptime(uptime_raw) if uptime_raw is not None else None
        cpu = None
        if "cpu" not in errors:
            cpu = derive_cpu(self.cpu_frequency.bounds, frequencies, idle, elapsed_s, self.levels)
        memory = derive_memory(memory_raw) if memory_raw is not None else None
        power = derive_power(power_raw) if power_raw is not None else None

        return MetricSnapshot(
            clock=clock,
            uptime=uptime,
            cpu=cpu,
            memory=memory,
            power=power,
            timestamp=clock.utc if clock is not None else datetime.now(timezone.utc),
            errors=errors,
        )
