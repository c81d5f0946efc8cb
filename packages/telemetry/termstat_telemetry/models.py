"""Typed telemetry models.

Samples carry raw kernel units; metrics carry display units.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


# Raw samples


@dataclass(frozen=True)
class ClockSample:
    utc: datetime
    local: datetime
    unix_s: float
    tai_s: float
    monotonic_s: float


@dataclass(frozen=True)
class UptimeSample:
    uptime_s: float


@dataclass(frozen=True)
class CpuBounds:
    index: int
    min_khz: int
    max_khz: int


@dataclass(frozen=True)
class CpuFrequencySample:
    index: int
    current_khz: int


@dataclass(frozen=True)
class CpuIdleSample:
    index: int
    idle_delta_s: float


@dataclass(frozen=True)
class MemorySample:
    total_kb: int
    available_kb: int


@dataclass(frozen=True)
class ChargerSample:
    name: str
    kind: str
    online: bool


@dataclass(frozen=True)
class BatterySample:
    name: str
    index: int | None
    status: str | None
    energy_now_uwh: int | None
    energy_full_uwh: int | None
    energy_full_design_uwh: int | None
    power_now_uw: int | None
    voltage_now_uv: int | None


@dataclass(frozen=True)
class PowerSample:
    chargers: tuple[ChargerSample, ...]
    batteries: tuple[BatterySample, ...]


# Derived metrics


@dataclass(frozen=True)
class DerivedMetric:
    value: float | None
    unit: str
    level: int | None = None


@dataclass(frozen=True)
class ClockMetrics:
    utc: datetime
    local_time: datetime
    unix_s: float
    tai_s: float
    monotonic_s: float


@dataclass(frozen=True)
class UptimeMetrics:
    seconds: float
    days: float


@dataclass(frozen=True)
class CoreMetrics:
    index: int
    frequency: DerivedMetric
    load: DerivedMetric | None


@dataclass(frozen=True)
class CpuMetrics:
    cores: tuple[CoreMetrics, ...]
    elapsed_s: float | None


@dataclass(frozen=True)
class MemoryMetrics:
    total_bytes: int
    available_bytes: int
    used_bytes: int
    used_gb: float
    total_gb: float
    percent: float


@dataclass(frozen=True)
class BatteryMetrics:
    name: str
    index: int | None
    status: str | None
    percent: float | None
    health_percent: float | None
    energy_now_wh: float | None
    energy_full_wh: float | None
    power_w: float | None
    voltage_v: float | None
    current_a: float | None
    remaining_s: float | None


@dataclass(frozen=True)
class PowerMetrics:
    ac_online: bool
    chargers: tuple[ChargerSample, ...]
    batteries: tuple[BatteryMetrics, ...]


@dataclass(frozen=True)
class MetricSnapshot:
    clock: ClockMetrics | None
    uptime: UptimeMetrics | None
    cpu: CpuMetrics | None
    memory: MemoryMetrics | None
    power: PowerMetrics | None
    timestamp: datetime
    errors: dict[str, str] = field(default_factory=dict)
