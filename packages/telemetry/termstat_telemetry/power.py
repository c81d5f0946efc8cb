"""Battery and charger reader over /sys/class/power_supply.

Supplies are hot-pluggable, so the directory is listed again on every sample.
All attribute files hold micro-units: uWh, uAh, uW, uA, uV.
"""

from __future__ import annotations

import errno
import logging
import re
from pathlib import Path

from .errors import ReadFailure
from .models import BatterySample, ChargerSample, PowerSample
from .sources import parse_int

logger = logging.getLogger("termstat.telemetry.power")

_INDEX_RE = re.compile(r"(\d+)$")

# Attribute files that some drivers list but refuse to read.
_ABSENT_ERRNOS = {errno.ENODATA, errno.ENODEV, errno.EINVAL}


def battery_index(name: str) -> int | None:
    match = _INDEX_RE.search(name)
    return int(match.group(1)) if match else None


def _read_attr(path: Path) -> str | None:
    try:
        text = path.read_text(encoding="ascii", errors="replace")
    except FileNotFoundError:
        return None
    except OSError as exc:
        if exc.errno in _ABSENT_ERRNOS:
            return None
        raise ReadFailure(f"cannot read {path}: {exc.strerror or exc}", source=str(path)) from exc
    text = text.strip()
    return text or None


def _read_int_attr(path: Path) -> int | None:
    text = _read_attr(path)
    if text is None:
        return None
    return parse_int(text, str(path))


def _scaled(charge_ua: int | None, voltage_uv: int | None) -> int | None:
    if charge_ua is None or voltage_uv is None:
        return None
    return abs(charge_ua) * voltage_uv // 1_000_000


class PowerReader:
    def __init__(self, sys_root: Path | str = "/sys") -> None:
        self.directory = Path(sys_root) / "class" / "power_supply"

    def open(self) -> "PowerReader":
        return self

    def entries(self) -> list[Path]:
        """Current supply directories. A missing registry means zero supplies."""
        try:
            return sorted(p for p in self.directory.iterdir() if p.is_dir())
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise ReadFailure(f"cannot list {self.directory}: {exc.strerror or exc}", source=str(self.directory)) from exc

    def sample(self) -> PowerSample:
        chargers: list[ChargerSample] = []
        batteries: dict[str, BatterySample] = {}

        for entry in self.entries():
            kind = _read_attr(entry / "type")
            if kind is None:
                # Unplugged between listing and reading.
                logger.debug("power supply %s vanished or has no type", entry)
                continue

            if kind == "Battery":
                batteries[entry.name] = self._read_battery(entry)
                continue

            online = _read_int_attr(entry / "online")
            if online is None:
                continue
            chargers.append(ChargerSample(name=entry.name, kind=kind, online=online > 0))

        ordered = sorted(
            batteries.values(),
            key=lambda b: (b.index is None, b.index if b.index is not None else 0, b.name),
        )
        return PowerSample(chargers=tuple(chargers), batteries=tuple(ordered))

    def _read_battery(self, entry: Path) -> BatterySample:
        voltage = _read_int_attr(entry / "voltage_now")

        energy_now = _read_int_attr(entry / "energy_now")
        energy_full = _read_int_attr(entry / "energy_full")
        energy_design = _read_int_attr(entry / "energy_full_design")
        if energy_now is None:
            # Charge-reporting batteries: uAh x V gives uWh.
            design_voltage = _read_int_attr(entry / "voltage_min_design") or voltage
            energy_now = _scaled(_read_int_attr(entry / "charge_now"), voltage)
            energy_full = _scaled(_read_int_attr(entry / "charge_full"), design_voltage)
            energy_design = _scaled(_read_int_attr(entry / "charge_full_design"), design_voltage)

        power = _read_int_attr(entry / "power_now")
        if power is None:
            power = _scaled(_read_int_attr(entry / "current_now"), voltage)
        elif power < 0:
            power = -power

        return BatterySample(
            name=entry.name,
            index=battery_index(entry.name),
            status=_read_attr(entry / "status"),
            energy_now_uwh=energy_now,
            energy_full_uwh=energy_full,
            energy_full_design_uwh=energy_design,
            power_now_uw=power,
            voltage_now_uv=voltage,
        )

    def close(self) -> None:
        return None
