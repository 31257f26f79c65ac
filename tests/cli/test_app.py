import json
import logging
import subprocess
import textwrap
from pathlib import Path

import pytest
from typer.testing import CliRunner

from sqlconverge.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    # reconcile installs run handlers on the package logger
    logger = logging.getLogger("sqlconverge")
    for h in list(logger.handlers):
        h.close()
    logger.handlers.clear()
    logger.propagate = True


def _write(tmp_path: Path, features_installed):
    cfg = tmp_path / "instance.yaml"
    cfg.write_text(textwrap.dedent("""
        instance_name: MSSQLSERVER
        product_major_version: 14
        features: [SQLENGINE, FULLTEXT]
        setup_user: CORP\\installer
    """))
    inv = tmp_path / "state.yaml"
    _write_state(inv, features_installed)
    return cfg, inv


def _write_state(path: Path, features):
    if features is None:
        path.write_text("instances: {}\n")
    else:
        path.write_text(f"instances:\n  MSSQLSERVER:\n    features: {json.dumps(features)}\n")


def test_test_command_exit_codes(tmp_path: Path):
    cfg, inv = _write(tmp_path, ["SQLENGINE", "FULLTEXT"])
    assert runner.invoke(app, ["test", str(cfg), "--inventory", str(inv)]).exit_code == 0

    _write_state(inv, ["SQLENGINE"])
    result = runner.invoke(app, ["test", str(cfg), "--inventory", str(inv)])
    assert result.exit_code == 1
    assert "not in desired state" in result.output


def test_inspect_prints_state(tmp_path: Path):
    cfg, inv = _write(tmp_path, ["SQLENGINE"])
    result = runner.invoke(app, ["inspect", str(cfg), "--inventory", str(inv)])
    assert result.exit_code == 0
    assert '"SQLENGINE"' in result.output


def test_reconcile_runs_setup_and_verifies(tmp_path: Path, monkeypatch):
    cfg, inv = _write(tmp_path, None)
    calls = []

    def fake_run(cmd, **kw):
        calls.append(cmd)
        # setup "installs" the features
        _write_state(inv, ["SQLENGINE", "FULLTEXT"])
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(subprocess, "run", fake_run)

    result = runner.invoke(app, [
        "reconcile", str(cfg),
        "--inventory", str(inv),
        "--log-dir", str(tmp_path / "logs"),
        "--events-file", str(tmp_path / "events.jsonl"),
    ])
    assert result.exit_code == 0, result.output
    assert "CONVERGED" in result.output
    assert calls[0][0] == "setup.exe"
    assert "/FEATURES=FULLTEXT,SQLENGINE" in calls[0]
    assert (tmp_path / "events.jsonl").exists()


def test_reconcile_failure_exit_code(tmp_path: Path, monkeypatch):
    cfg, inv = _write(tmp_path, None)
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: subprocess.CompletedProcess(cmd, 1603, "", "boom"))

    result = runner.invoke(app, ["reconcile", str(cfg), "--inventory", str(inv), "--log-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "FAILED" in result.output


def test_invalid_config_exits_with_one_line_message(tmp_path: Path):
    cfg, inv = _write(tmp_path, ["SQLENGINE"])
    cfg.write_text(cfg.read_text() + "security_mode: SQL\n")

    for extra in (["inspect"], ["test"], ["reconcile", "--log-dir", str(tmp_path)]):
        command = extra[0]
        result = runner.invoke(app, [command, str(cfg), "--inventory", str(inv), *extra[1:]])
        assert result.exit_code == 1, command
        assert "sa_password" in result.output
        assert "Traceback" not in result.output


def test_missing_config_file_exits_failed(tmp_path: Path):
    inv = tmp_path / "state.yaml"
    _write_state(inv, None)
    result = runner.invoke(app, ["test", str(tmp_path / "nope.yaml"), "--inventory", str(inv)])
    assert result.exit_code == 1
    assert "cannot read" in result.output


def test_missing_snapshot_exits_failed(tmp_path: Path):
    cfg, _ = _write(tmp_path, None)
    missing = tmp_path / "absent.yaml"

    result = runner.invoke(app, ["inspect", str(cfg), "--inventory", str(missing)])
    assert result.exit_code == 1
    assert "Snapshot file not found" in result.output

    result = runner.invoke(app, ["reconcile", str(cfg), "--inventory", str(missing), "--log-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "Snapshot file not found" in result.output


def test_reconcile_log_file_names_the_instance(tmp_path: Path):
    cfg, inv = _write(tmp_path, ["SQLENGINE", "FULLTEXT"])
    result = runner.invoke(app, ["reconcile", str(cfg), "--inventory", str(inv), "--log-dir", str(tmp_path / "logs")])
    assert result.exit_code == 0, result.output

    logs = list((tmp_path / "logs").glob("sqlconverge-MSSQLSERVER-*.log"))
    assert len(logs) == 1
    assert "instance=MSSQLSERVER action=Install" in logs[0].read_text()
