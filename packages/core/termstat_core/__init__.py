"""Core services: settings, logging, the refresh scheduler and cycle wiring."""

from .config import AppConfig, load_config, save_config
from .diagnostics import build_doctor_payload
from .monitor import Monitor
from .scheduler import RefreshScheduler, SchedulerState, SchedulerStatus

__all__ = [
    "AppConfig",
    "Monitor",
    "RefreshScheduler",
    "SchedulerState",
    "SchedulerStatus",
    "build_doctor_payload",
    "load_config",
    "save_config",
]
