"""Doctor payload: probe every counter source and report what works."""

from __future__ import annotations

import platform
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from termstat_telemetry.clock import ClockReader
from termstat_telemetry.cpu import CpuFrequencyReader, CpuLoadReader
from termstat_telemetry.errors import TelemetryError
from termstat_telemetry.memory import MemoryReader
from termstat_telemetry.power import PowerReader
from termstat_telemetry.uptime import UptimeReader

from .config import AppConfig, config_path
from .logging_setup import log_dir


def _jsonable(value: Any) -> Any:
    if is_dataclass(value):
        return asdict(value)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def probe(name: str, reader: Any) -> dict[str, Any]:
    """Open, sample once and close; never raises for telemetry failures."""
    row: dict[str, Any] = {"source": name, "ok": True}
    try:
        reader.open()
        try:
            row["sample"] = reader.sample()
            bounds = getattr(reader, "bounds", None)
            if bounds:
                row["bounds"] = bounds
        finally:
            reader.close()
    except TelemetryError as exc:
        row.update(ok=False, kind=exc.kind, error=str(exc), path=exc.source)
    return row


def build_doctor_payload(cfg: AppConfig) -> dict[str, Any]:
    proc_root = cfg.sources.proc_root
    sys_root = cfg.sources.sys_root
    readers: list[tuple[str, Any]] = [
        ("clock", ClockReader()),
        ("uptime", UptimeReader(proc_root)),
        ("cpu_frequency", CpuFrequencyReader(sys_root)),
        ("cpu_load", CpuLoadReader(sys_root=sys_root)),
        ("memory", MemoryReader(proc_root)),
        ("power", PowerReader(sys_root)),
    ]
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "config_path": str(config_path()),
        "log_dir": str(log_dir()),
        "config": asdict(cfg),
        "sources": [probe(name, reader) for name, reader in readers],
    }


def to_json_ready(payload: Any) -> Any:
    if isinstance(payload, dict):
        return {k: to_json_ready(v) for k, v in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [to_json_ready(v) for v in payload]
    converted = _jsonable(payload)
    if converted is not payload:
        return to_json_ready(converted)
    return payload
