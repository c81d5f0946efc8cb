"""Unit conversions, level bucketing and derived metrics."""

from __future__ import annotations

import math
from typing import Iterable

from .models import (
    BatteryMetrics,
    BatterySample,
    ClockMetrics,
    ClockSample,
    CoreMetrics,
    CpuBounds,
    CpuFrequencySample,
    CpuIdleSample,
    CpuMetrics,
    DerivedMetric,
    MemoryMetrics,
    MemorySample,
    PowerMetrics,
    PowerSample,
    UptimeMetrics,
    UptimeSample,
)

MICRO = 1_000_000
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400


def micro_to_base(value: float) -> float:
    return value / MICRO


def base_to_micro(value: float) -> float:
    return value * MICRO


def khz_to_ghz(khz: float) -> float:
    return khz / 1e6


def kib_to_bytes(kib: int) -> int:
    return kib * 1024


def bytes_to_gb(n: float) -> float:
    return n / 1e9


def wh_to_joules(wh: float) -> float:
    return wh * SECONDS_PER_HOUR


def level(minimum: float, maximum: float, value: float, count: int) -> int:
    """Bucket `value` into one of `count` equal slices of [minimum, maximum].

    Monotonic in `value` and clamped: anything at or below `minimum` is 0,
    anything at or above `maximum` is `count - 1`.
    """
    if count < 1:
        raise ValueError(f"level count must be positive, got {count}")
    if math.isnan(value):
        return 0
    if maximum <= minimum:
        return 0 if value < maximum else count - 1
    index = math.floor((value - minimum) * count / (maximum - minimum))
    return max(0, min(count - 1, index))


def busy_fraction(idle_delta_s: float, elapsed_s: float | None) -> float | None:
    """1 - idle/elapsed over the actual interval, clamped to [0, 1]."""
    if elapsed_s is None or elapsed_s <= 0:
        return None
    fraction = 1.0 - idle_delta_s / elapsed_s
    return max(0.0, min(1.0, fraction))


def derive_clock(sample: ClockSample) -> ClockMetrics:
    return ClockMetrics(
        utc=sample.utc,
        local_time=sample.local,
        unix_s=sample.unix_s,
        tai_s=sample.tai_s,
        monotonic_s=sample.monotonic_s,
    )


def derive_uptime(sample: UptimeSample) -> UptimeMetrics:
    return UptimeMetrics(seconds=sample.uptime_s, days=sample.uptime_s / SECONDS_PER_DAY)


def derive_cpu(
    bounds: Iterable[CpuBounds],
    frequencies: Iterable[CpuFrequencySample],
    idle: Iterable[CpuIdleSample] | None,
    elapsed_s: float | None,
    levels: int,
) -> CpuMetrics:
    bounds_by_index = {b.index: b for b in bounds}
    idle_by_index = {s.index: s for s in (idle or ())}

    cores: list[CoreMetrics] = []
    for freq in frequencies:
        bound = bounds_by_index.get(freq.index)
        freq_level = level(bound.min_khz, bound.max_khz, freq.current_khz, levels) if bound else None
        frequency = DerivedMetric(value=khz_to_ghz(freq.current_khz), unit="GHz", level=freq_level)

        load: DerivedMetric | None = None
        idle_sample = idle_by_index.get(freq.index)
        if idle is not None:
            fraction = busy_fraction(idle_sample.idle_delta_s, elapsed_s) if idle_sample else None
            if fraction is None:
                load = DerivedMetric(value=None, unit="%")
            else:
                load = DerivedMetric(value=fraction * 100.0, unit="%", level=level(0.0, 1.0, fraction, levels))
        cores.append(CoreMetrics(index=freq.index, frequency=frequency, load=load))

    return CpuMetrics(cores=tuple(cores), elapsed_s=elapsed_s)


def derive_memory(sample: MemorySample) -> MemoryMetrics:
    total = kib_to_bytes(sample.total_kb)
    available = kib_to_bytes(sample.available_kb)
    used = total - available
    return MemoryMetrics(
        total_bytes=total,
        available_bytes=available,
        used_bytes=used,
        used_gb=bytes_to_gb(used),
        total_gb=bytes_to_gb(total),
        percent=(used * 100.0 / total) if total else 0.0,
    )


def _wh(raw: int | None) -> float | None:
    return micro_to_base(raw) if raw is not None else None


def derive_battery(sample: BatterySample, ac_online: bool) -> BatteryMetrics:
    energy_now = _wh(sample.energy_now_uwh)
    energy_full = _wh(sample.energy_full_uwh)
    energy_design = _wh(sample.energy_full_design_uwh)
    power = micro_to_base(sample.power_now_uw) if sample.power_now_uw is not None else None
    voltage = micro_to_base(sample.voltage_now_uv) if sample.voltage_now_uv is not None else None

    current = power / voltage if power is not None and voltage else None
    percent = 100.0 * energy_now / energy_full if energy_now is not None and energy_full else None
    health = 100.0 * energy_full / energy_design if energy_full is not None and energy_design else None

    remaining: float | None = None
    if not ac_online and power is not None and power > 0 and energy_now is not None:
        remaining = wh_to_joules(energy_now) / power

    return BatteryMetrics(
        name=sample.name,
        index=sample.index,
        status=sample.status,
        percent=percent,
        health_percent=health,
        energy_now_wh=energy_now,
        energy_full_wh=energy_full,
        power_w=power,
        voltage_v=voltage,
        current_a=current,
        remaining_s=remaining,
    )


def derive_power(sample: PowerSample) -> PowerMetrics:
    ac_online = any(c.online for c in sample.chargers)
    return PowerMetrics(
        ac_online=ac_online,
        chargers=sample.chargers,
        batteries=tuple(derive_battery(b, ac_online) for b in sample.batteries),
    )
