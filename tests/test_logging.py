"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest

from habittrack.config import BaseConfig
from habittrack.logging_config import (
    SESSION_BUFFER_LIMIT,
    JSONFormatter,
    SessionBufferHandler,
    get_logger,
    session_lines,
    session_log_path,
    setup_logging,
)


@pytest.fixture
def log_config(monkeypatch, tmp_path, reset_package_logger):
    monkeypatch.setenv("HABITTRACK_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("HABITTRACK_WEEK_START", raising=False)
    monkeypatch.delenv("HABITTRACK_STORAGE_KEY", raising=False)
    monkeypatch.delenv("HABITTRACK_DEV_MODE", raising=False)
    return BaseConfig()


def _record(**kwargs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=kwargs.pop("level", logging.INFO),
        pathname="test.py",
        lineno=42,
        msg=kwargs.pop("msg", "Test message"),
        args=(),
        exc_info=kwargs.pop("exc_info", None),
    )
    record.module = "test_module"
    record.funcName = "test_function"
    for key, value in kwargs.items():
        setattr(record, key, value)
    return record


def test_json_formatter():
    """JSONFormatter emits the standard fields."""
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_exception():
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(
        JSONFormatter().format(_record(level=logging.ERROR, msg="Error occurred", exc_info=exc_info))
    )

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"]


def test_json_formatter_includes_extra_fields():
    log_data = json.loads(JSONFormatter().format(_record(habit_id="habit_1", date="2026-01-10")))

    assert log_data["extra"] == {"habit_id": "habit_1", "date": "2026-01-10"}


def test_setup_logging(log_config, tmp_path):
    """Setup writes JSON lines to the rotating log file."""
    logger = setup_logging(log_config)

    assert logger.name == "habittrack"
    assert logger.level == logging.DEBUG

    kinds = {type(handler) for handler in logger.handlers}
    assert kinds == {
        logging.StreamHandler,
        logging.handlers.RotatingFileHandler,
        SessionBufferHandler,
    }

    log_file = tmp_path / "logs" / "habittrack.log"
    get_logger("services.store").warning("Storage nearly full", extra={"habits": 3})
    for handler in logger.handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines() if line]
    assert lines[0]["message"] == "Logging initialized"
    assert lines[-1]["logger"] == "habittrack.services.store"
    assert lines[-1]["extra"] == {"habits": 3}
    assert session_log_path().parent == log_config.DATA_DIR / "logs"


def test_setup_logging_is_idempotent(log_config):
    setup_logging(log_config)
    logger = setup_logging(log_config)

    assert len(logger.handlers) == 3


def test_get_logger():
    """Loggers are namespaced under the package logger."""
    assert get_logger("module1").name == "habittrack.module1"
    assert get_logger("habittrack.services.store").name == "habittrack.services.store"
    assert get_logger("module1") is not get_logger("module2")


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(log_config, dev_mode):
    """Console level and package level follow dev mode."""
    log_config.DEV_MODE = dev_mode

    logger = setup_logging(log_config)

    console_handler = next(
        handler for handler in logger.handlers if type(handler) is logging.StreamHandler
    )
    assert console_handler.level == (logging.INFO if dev_mode else logging.WARNING)
    assert logger.level == (logging.DEBUG if dev_mode else logging.INFO)


def test_session_buffer_keeps_only_recent_lines():
    """The session transcript is bounded to the most recent lines."""
    handler = SessionBufferHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))

    for index in range(SESSION_BUFFER_LIMIT + 25):
        handler.emit(_record(msg=f"line {index}"))

    lines = session_lines()
    assert len(lines) == SESSION_BUFFER_LIMIT
    assert lines[-1] == f"line {SESSION_BUFFER_LIMIT + 24}"
    assert "line 24" not in lines
