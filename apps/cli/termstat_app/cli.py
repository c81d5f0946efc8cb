"""CLI entrypoints for the termstat display and its source probe."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
from pathlib import Path

from termstat_core import Monitor, build_doctor_payload, load_config
from termstat_core.config import AppConfig
from termstat_core.diagnostics import to_json_ready
from termstat_core.logging_setup import configure_logging, install_crash_hooks
from termstat_renderer import list_glyph_sets
from termstat_telemetry import TelemetryError

logger = logging.getLogger("termstat.cli")


def _print_json(data: object) -> None:
    print(json.dumps(to_json_ready(data), indent=2, sort_keys=True, default=str))


def _non_negative_float(label: str):
    def parse(text: str) -> float:
        try:
            value = float(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"error parsing {label} {text!r}: is it a number?") from None
        if value != value or value < 0:
            raise argparse.ArgumentTypeError(f"{label} must be a non-negative number, got {text!r}")
        return value

    return parse


def _positive_float(label: str):
    base = _non_negative_float(label)

    def parse(text: str) -> float:
        value = base(text)
        if value == 0:
            raise argparse.ArgumentTypeError(f"{label} must be greater than zero, got {text!r}")
        return value

    return parse


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"error parsing cycle count {text!r}: is it a whole number?") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"cycle count must be at least 1, got {text!r}")
    return value


def resolve_period(args: argparse.Namespace, cfg: AppConfig) -> float:
    """Refresh period in seconds; interval and frequency are two spellings of the same thing."""
    if getattr(args, "interval_ms", None) is not None:
        return args.interval_ms / 1000.0
    if getattr(args, "frequency_hz", None) is not None:
        return 1.0 / args.frequency_hz
    return cfg.refresh.interval_s


def apply_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    if getattr(args, "glyphs", None):
        cfg.display.glyphs = args.glyphs
    if getattr(args, "no_clear", False):
        cfg.display.clear_screen = False
    if getattr(args, "no_load", False):
        cfg.sources.include_load = False
    if getattr(args, "on_error", None):
        cfg.errors.policy = args.on_error.replace("-", "_")
    if getattr(args, "proc_root", None):
        cfg.sources.proc_root = args.proc_root
    if getattr(args, "sys_root", None):
        cfg.sources.sys_root = args.sys_root
    cfg.refresh.interval_s = resolve_period(args, cfg)
    return cfg


def _config_file(args: argparse.Namespace) -> Path | None:
    return Path(args.config).expanduser() if getattr(args, "config", None) else None


def _load(args: argparse.Namespace) -> AppConfig:
    return apply_overrides(load_config(_config_file(args)), args)


def cmd_run(args: argparse.Namespace) -> int:
    cfg = _load(args)
    monitor = Monitor.from_config(cfg)

    previous = signal.signal(signal.SIGTERM, lambda _sig, _frame: monitor.stop())
    try:
        monitor.run(cfg.refresh.interval_s, max_cycles=args.cycles)
    except TelemetryError as exc:
        logger.error("refresh aborted: %s", exc, extra={"event": "refresh_aborted", "kind": exc.kind})
        print(f"termstat: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return 0
    finally:
        signal.signal(signal.SIGTERM, previous)
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    cfg = _load(args)
    payload = build_doctor_payload(cfg)
    _print_json(payload)
    return 0 if all(row["ok"] for row in payload["sources"]) else 1


def _add_source_args(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--config", default=None, help="Path to config.json (default: ~/.config/termstat/config.json)")
    cmd.add_argument("--proc-root", default=None, help="procfs mount point")
    cmd.add_argument("--sys-root", default=None, help="sysfs mount point")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="termstat", description="Refreshing terminal report of Linux system counters")
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run", help="Render the report once, or repeatedly with -i/-f")
    period = run_cmd.add_mutually_exclusive_group()
    period.add_argument(
        "-i",
        "--interval",
        dest="interval_ms",
        metavar="REFRESH_INTERVAL_MS",
        type=_non_negative_float("refresh interval"),
        default=None,
        help="Milliseconds between refreshes; 0 renders once",
    )
    period.add_argument(
        "-f",
        "--frequency",
        dest="frequency_hz",
        metavar="REFRESH_FREQUENCY_HZ",
        type=_positive_float("refresh frequency"),
        default=None,
        help="Refreshes per second",
    )
    run_cmd.add_argument("--glyphs", choices=list_glyph_sets(), default=None, help="Level bar glyph set")
    run_cmd.add_argument(
        "--on-error",
        choices=["fail-fast", "skip"],
        default=None,
        help="Abort on the first read error, or skip the failing section for that refresh",
    )
    run_cmd.add_argument("--no-clear", action="store_true", help="Append frames instead of redrawing in place")
    run_cmd.add_argument("--no-load", action="store_true", help="Do not sample per-cpu idle time")
    run_cmd.add_argument("--cycles", type=_positive_int, default=None, help="Stop after this many refreshes")
    _add_source_args(run_cmd)
    run_cmd.set_defaults(func=cmd_run)

    doctor_cmd = sub.add_parser("doctor", help="Probe every counter source and print JSON")
    _add_source_args(doctor_cmd)
    doctor_cmd.set_defaults(func=cmd_doctor)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    diagnostics = load_config(_config_file(args)).diagnostics
    configure_logging(keep_files=diagnostics.keep_log_files, console=diagnostics.console_log)
    install_crash_hooks()
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
