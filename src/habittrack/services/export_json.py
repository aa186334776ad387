"""JSON export helpers for HabitTrack."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from ..logging_config import get_logger
from .dates import format_date
from .store import HabitStore

logger = get_logger(__name__)


def export_state(store: HabitStore) -> str:
    """Pretty-printed JSON of the full state, exactly as persisted."""

    return store.to_json(indent=2)


def export_filename(*, today: date | None = None) -> str:
    return f"habit-tracker-{format_date(today or date.today())}.json"


def export_state_json(store: HabitStore, output_dir: Path, *, today: date | None = None) -> Path:
    """Write the state to ``output_dir/habit-tracker-YYYY-MM-DD.json``.

    Returns the path written; an export from the same day overwrites the
    previous file.
    """

    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / export_filename(today=today)
    output_path.write_text(export_state(store), encoding="utf-8")
    logger.info("State exported", extra={"path": str(output_path), "habits": len(store)})
    return output_path


__all__ = ["export_filename", "export_state", "export_state_json"]
