"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

WEEK_START_CHOICES = ("monday", "sunday")


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitTrack"
    DB_FILENAME = "habittrack.db"
    DEFAULT_STORAGE_KEY = "habitTracker2026"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITTRACK_DEV_MODE", default=True)
        self.STORAGE_KEY = os.getenv("HABITTRACK_STORAGE_KEY", self.DEFAULT_STORAGE_KEY)
        self.DATABASE_URL = os.getenv("HABITTRACK_DATABASE_URL", self._build_sqlite_url())
        self.EXPORT_DIR = Path(
            os.getenv("HABITTRACK_EXPORT_DIR", str(self.DATA_DIR / "exports"))
        ).expanduser()
        self.WEEK_START = os.getenv("HABITTRACK_WEEK_START", "monday").strip().lower()
        if self.WEEK_START not in WEEK_START_CHOICES:
            raise ValueError(
                f"HABITTRACK_WEEK_START must be one of {WEEK_START_CHOICES}, got {self.WEEK_START!r}."
            )
        if not self.STORAGE_KEY:
            raise ValueError("HABITTRACK_STORAGE_KEY must not be empty.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITTRACK_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations block writes; fall back to user-local storage.
            local_app_data = os.getenv("LOCALAPPDATA") or (Path.home() / "AppData" / "Local")
            fallback_path = Path(local_app_data).expanduser() / self.APP_NAME
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}
