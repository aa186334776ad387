"""Structured logging: console output, a rotating JSON log and a session transcript."""

from __future__ import annotations

import atexit
import json
import logging
import logging.handlers
import sys
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Deque

from .config import BaseConfig

LOGGER_NAME = "habittrack"
LOG_FILENAME = "habittrack.log"

# Only the most recent lines survive into the session transcript
SESSION_BUFFER_LIMIT = 5000

_session_lines: Deque[str] = deque(maxlen=SESSION_BUFFER_LIMIT)
_session_started = datetime.now()
_session_path: Path | None = None
_flush_registered = False

# Attributes every LogRecord carries; anything else arrived through ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class SessionBufferHandler(logging.Handler):
    """Keeps the formatted lines of the current run, written out at exit."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            _session_lines.append(self.format(record))
        except Exception:  # pragma: no cover
            self.handleError(record)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` fields grouped separately."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, default=str)


def _write_session_log() -> None:  # pragma: no cover - runs at interpreter exit
    if not _session_lines or _session_path is None:
        return
    try:
        _session_path.parent.mkdir(parents=True, exist_ok=True)
        header = (
            f"# HabitTrack session log\n"
            f"# Started: {_session_started.isoformat()}\n"
            f"# Entries: {len(_session_lines)}\n\n"
        )
        _session_path.write_text(header + "\n".join(_session_lines) + "\n", encoding="utf-8")
    except OSError as exc:
        sys.stderr.write(f"Failed to flush session log: {exc}\n")


def _console_formatter(dev_mode: bool) -> logging.Formatter:
    if dev_mode:
        return logging.Formatter(
            "[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s",
            datefmt="%H:%M:%S",
        )
    return logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(config: BaseConfig) -> logging.Logger:
    """Attach console, JSON file and session handlers to the package logger.

    Safe to call again: earlier handlers are closed and replaced.

    Args:
        config: Application configuration with DATA_DIR and DEV_MODE

    Returns:
        The ``habittrack`` logger
    """
    global _session_path, _flush_registered  # noqa: PLW0603

    logs_dir = Path(config.DATA_DIR) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(logging.DEBUG if config.DEV_MODE else logging.INFO)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console_formatter = _console_formatter(config.DEV_MODE)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if config.DEV_MODE else logging.WARNING)
    console_handler.setFormatter(console_formatter)

    log_file = logs_dir / LOG_FILENAME
    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(JSONFormatter())

    session_handler = SessionBufferHandler(level=logging.DEBUG)
    session_handler.setFormatter(console_formatter)

    for handler in (console_handler, file_handler, session_handler):
        package_logger.addHandler(handler)

    _session_path = logs_dir / _session_started.strftime("session_%Y%m%d_%H%M%S.log")
    if not _flush_registered:
        atexit.register(_write_session_log)
        _flush_registered = True

    package_logger.info(
        "Logging initialized",
        extra={"dev_mode": config.DEV_MODE, "log_file": str(log_file)},
    )
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the package namespace; ``habittrack.*`` names pass through."""
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def session_log_path() -> Path | None:
    """Where the session transcript is written at exit, once logging is set up."""
    return _session_path


def session_lines() -> list[str]:
    """Lines buffered for the session transcript so far."""
    return list(_session_lines)
