from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "unit"))

from fake_tree import build_system

from termstat_app import cli


def _isolate(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setattr(cli, "install_crash_hooks", lambda: None)


def test_run_once_against_synthetic_tree(monkeypatch, tmp_path, capsys) -> None:
    _isolate(monkeypatch, tmp_path)
    proc, sys_root = build_system(tmp_path)
    monkeypatch.setattr("termstat_telemetry.cpu.online_cpu_count", lambda: 2)

    rc = cli.main(["run", "--no-clear", "--no-load", "--proc-root", str(proc), "--sys-root", str(sys_root)])

    out = capsys.readouterr().out
    assert rc == 0
    assert "Uptime: 00012346s" in out
    assert "CPUs: [--]" in out


def test_setup_failure_exits_nonzero(monkeypatch, tmp_path, capsys) -> None:
    _isolate(monkeypatch, tmp_path)

    rc = cli.main(["run", "--proc-root", str(tmp_path / "missing"), "--sys-root", str(tmp_path / "missing")])

    err = capsys.readouterr().err
    assert rc == 1
    assert "termstat:" in err
    assert str(tmp_path / "missing" / "uptime") in err
