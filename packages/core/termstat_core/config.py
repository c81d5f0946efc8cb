"""Persistent settings schema and load/save helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from termstat_renderer.glyphs import DEFAULT_GLYPH_SET_NAME, GLYPH_SETS
from termstat_telemetry.provider import ERROR_POLICIES

CONFIG_VERSION = 1

logger = logging.getLogger("termstat.config")


@dataclass
class RefreshConfig:
    # 0 runs a single cycle.
    interval_s: float = 0.0


@dataclass
class DisplayConfig:
    glyphs: str = DEFAULT_GLYPH_SET_NAME
    clear_screen: bool = True


@dataclass
class SourcesConfig:
    proc_root: str = "/proc"
    sys_root: str = "/sys"
    include_load: bool = True


@dataclass
class ErrorsConfig:
    policy: str = "fail_fast"


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7
    console_log: bool = False


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    errors: ErrorsConfig = field(default_factory=ErrorsConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


DEFAULT_CONFIG = AppConfig()


def config_root() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    return (Path(base) if base else Path.home() / ".config") / "termstat"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_refresh(cfg: AppConfig) -> None:
    try:
        interval = float(cfg.refresh.interval_s)
    except (TypeError, ValueError):
        interval = 0.0
    cfg.refresh.interval_s = max(0.0, interval)


def _normalize_display(cfg: AppConfig) -> None:
    if cfg.display.glyphs not in GLYPH_SETS:
        cfg.display.glyphs = DEFAULT_GLYPH_SET_NAME
    cfg.display.clear_screen = bool(cfg.display.clear_screen)


def _normalize_errors(cfg: AppConfig) -> None:
    policy = str(cfg.errors.policy).replace("-", "_")
    cfg.errors.policy = policy if policy in ERROR_POLICIES else "fail_fast"


def _normalize_diagnostics(cfg: AppConfig) -> None:
    cfg.diagnostics.keep_log_files = max(2, int(cfg.diagnostics.keep_log_files))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", path, exc, extra={"event": "config_unreadable"})
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=int(raw.get("config_version", CONFIG_VERSION)),
        refresh=_merge(RefreshConfig, raw.get("refresh", {})),
        display=_merge(DisplayConfig, raw.get("display", {})),
        sources=_merge(SourcesConfig, raw.get("sources", {})),
        errors=_merge(ErrorsConfig, raw.get("errors", {})),
        diagnostics=_merge(DiagnosticsConfig, raw.get("diagnostics", {})),
    )

    _normalize_refresh(cfg)
    _normalize_display(cfg)
    _normalize_errors(cfg)
    _normalize_diagnostics(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
