"""Text report composer: one buffer per refresh."""

from __future__ import annotations

from termstat_telemetry.models import (
    BatteryMetrics,
    ClockMetrics,
    CpuMetrics,
    MemoryMetrics,
    MetricSnapshot,
    PowerMetrics,
    UptimeMetrics,
)

from .glyphs import get_glyph_set
from .models import GlyphSet, ReportSection

SECTION_ORDER = ("clock", "uptime", "cpu", "memory", "power")

_TITLES = {
    "clock": "Time",
    "uptime": "Uptime",
    "cpu": "CPU",
    "memory": "Memory",
    "power": "Battery",
}


def format_duration(seconds: float) -> str:
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class ReportRenderer:
    """Formats a snapshot into fixed-width sections joined by blank lines.

    Numeric columns are zero-padded so digits stay in place between refreshes.
    """

    def __init__(self, glyphs: GlyphSet | str | None = None) -> None:
        self.glyphs = glyphs if isinstance(glyphs, GlyphSet) else get_glyph_set(glyphs)

    def render(self, snapshot: MetricSnapshot) -> str:
        return "\n\n".join(section.text() for section in self.sections(snapshot)) + "\n"

    def sections(self, snapshot: MetricSnapshot) -> list[ReportSection]:
        builders = {
            "clock": self._clock_section,
            "uptime": self._uptime_section,
            "cpu": self._cpu_section,
            "memory": self._memory_section,
            "power": self._power_section,
        }
        out: list[ReportSection] = []
        for family in SECTION_ORDER:
            value = getattr(snapshot, family)
            if value is None:
                reason = snapshot.errors.get(family, "no data")
                out.append(ReportSection(_TITLES[family], [f"{_TITLES[family]}: unavailable: {reason}"]))
                continue
            out.append(builders[family](value))
        return out

    def _clock_section(self, clock: ClockMetrics) -> ReportSection:
        local = clock.local_time
        millis = local.microsecond // 1000
        return ReportSection(
            "Time",
            [
                f"TAI:  {clock.tai_s:017.6f}s",
                f"UNIX: {clock.unix_s:017.6f}s",
                f"MONO: {clock.monotonic_s:017.6f}s",
                f"{local:%Y-%m-%d %b %a %H:%M:%S}.{millis:03d} {local:%Z}".rstrip(),
            ],
        )

    def _uptime_section(self, uptime: UptimeMetrics) -> ReportSection:
        return ReportSection("Uptime", [f"Uptime: {uptime.seconds:08.0f}s ({uptime.days:011.5f}d)"])

    def _cpu_section(self, cpu: CpuMetrics) -> ReportSection:
        lines = [f"CPUs: {self.glyphs.bar([c.frequency.level for c in cpu.cores])}"]
        has_load = any(c.load is not None for c in cpu.cores)
        if has_load:
            lines.append(f"Load: {self.glyphs.bar([c.load.level if c.load else None for c in cpu.cores])}")

        width = max(2, len(str(max((c.index for c in cpu.cores), default=0))))
        for core in cpu.cores:
            row = f"cpu{core.index:0{width}d} {core.frequency.value:05.3f}GHz"
            if core.load is not None:
                row += " " + (f"{core.load.value:05.1f}%" if core.load.value is not None else "---.-%")
            lines.append(row)
        return ReportSection("CPU", lines)

    def _memory_section(self, memory: MemoryMetrics) -> ReportSection:
        return ReportSection(
            "Memory",
            [f"Memory: {memory.used_gb:06.3f}/{memory.total_gb:04.1f}GB {memory.percent:05.1f}%"],
        )

    def _power_section(self, power: PowerMetrics) -> ReportSection:
        if power.chargers:
            ac = "online" if power.ac_online else "offline"
        else:
            ac = "none"
        lines = [f"AC: {ac}"]
        if not power.batteries:
            lines.append("Battery: none")
        for battery in power.batteries:
            lines.append(self._battery_line(battery))
        return ReportSection("Battery", lines)

    @staticmethod
    def _num(value: float | None, spec: str, unit: str) -> str:
        if value is None:
            return "--" + unit
        return f"{value:{spec}}{unit}"

    def _battery_line(self, b: BatteryMetrics) -> str:
        parts = [
            f"{b.name}:",
            self._num(b.percent, "05.1f", "%"),
            self._num(b.power_w, "05.2f", "W"),
            self._num(b.voltage_v, "05.2f", "V"),
        ]
        if b.current_a is not None:
            parts.append(f"{b.current_a:05.3f}A")
        if b.status:
            parts.append(b.status)
        if b.remaining_s is not None:
            parts.append(f"{format_duration(b.remaining_s)} left")
        if b.health_percent is not None:
            parts.append(f"health {b.health_percent:05.1f}%")
        return " ".join(parts)
