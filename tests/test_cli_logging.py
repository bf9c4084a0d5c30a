from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from probebench.cli import app


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    app.configure_logging()


def test_json_formatter_with_exc_and_stack() -> None:
    formatter = app.JsonFormatter()
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.getLogger("test").makeRecord(
            "test", logging.ERROR, __file__, 0, "failure", (), sys.exc_info(), func="func"
        )
    record.stack_info = "trace info"
    payload = json.loads(formatter.format(record))
    assert payload["level"] == "ERROR"
    assert payload["msg"] == "failure"
    assert "exc_info" in payload
    assert payload["stack"]


def test_configure_logging_json_and_file(tmp_path: Path) -> None:
    log_file = tmp_path / "app.log"
    app.configure_logging(use_json=True, log_file=str(log_file))
    logger = logging.getLogger("probebench")
    logger.error("error message")
    assert any(isinstance(handler, RotatingFileHandler) for handler in logger.handlers)
    line = log_file.read_text(encoding="utf-8").splitlines()[-1]
    assert json.loads(line)["msg"] == "error message"


def test_configure_logging_replaces_handlers() -> None:
    app.configure_logging()
    app.configure_logging()
    logger = logging.getLogger("probebench")
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_emit_success_json(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(app, "OUTPUT_JSON", True)
    app.emit_success("demo", text="done", data={"value": 5})
    out = capsys.readouterr().out.strip()
    payload = json.loads(out)
    assert payload["ok"] is True
    assert payload["command"] == "demo"
    assert payload["value"] == 5
    assert payload["result"] == "done"


def test_emit_success_text(capsys: pytest.CaptureFixture[str]) -> None:
    app.emit_success("demo", text="plain")
    assert capsys.readouterr().out == "plain\n"


def test_main_writes_log_file_and_debug_level(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("PROBEBENCH_MIN_RANGE", "100")
    monkeypatch.setenv("PROBEBENCH_MAX_RANGE", "200")
    log_file = tmp_path / "run.log"
    code = app.main(["--log-json", "--log-file", str(log_file), "run", "1", "0.5", "2"])
    assert code == 0
    messages = [json.loads(line)["msg"] for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert any("Table size (twin prime): 103" in msg for msg in messages)
    assert any("inserted" in msg and "with" in msg and "probes" in msg for msg in messages)
    assert "Found a twin prime table capacity: 103" in capsys.readouterr().out


def test_main_logs_loaded_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "probebench.toml"
    cfg.write_text("[capacity]\nmin_range = 10\nmax_range = 20\n", encoding="utf-8")
    log_file = tmp_path / "cfg.log"
    code = app.main(["--config", str(cfg), "--log-file", str(log_file), "twin-prime"])
    assert code == 0
    assert capsys.readouterr().out.strip() == "13"
    assert f"Loaded config from {cfg}" in log_file.read_text(encoding="utf-8")
    assert app.APP_CONFIG.capacity.max_range == 20
