"""Linux counter readers and derived metrics for termstat."""

from .errors import ParseFailure, ReadFailure, ResourceUnavailable, TelemetryError
from .models import (
    BatteryMetrics,
    ClockMetrics,
    CoreMetrics,
    CpuMetrics,
    DerivedMetric,
    MemoryMetrics,
    MetricSnapshot,
    PowerMetrics,
    UptimeMetrics,
)
from .provider import ERROR_POLICIES, FAMILIES, TelemetryProvider
from .rates import busy_fraction, level

__all__ = [
    "BatteryMetrics",
    "ClockMetrics",
    "CoreMetrics",
    "CpuMetrics",
    "DerivedMetric",
    "ERROR_POLICIES",
    "FAMILIES",
    "MemoryMetrics",
    "MetricSnapshot",
    "ParseFailure",
    "PowerMetrics",
    "ReadFailure",
    "ResourceUnavailable",
    "TelemetryError",
    "TelemetryProvider",
    "UptimeMetrics",
    "busy_fraction",
    "level",
]
