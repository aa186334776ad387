"""Habit store: the single owner of habits, notes and settings.

Every command validates first, mutates in memory, then writes the full
state document through the storage collaborator. Storage failures are
reported, never raised: the in-memory state stays authoritative for the
rest of the session.
"""

from __future__ import annotations

import json
import random
import string
import time
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ..domain.repositories.state import StateRepository
from ..logging_config import get_logger
from ..models.habit import GoalType, Habit, Priority
from ..models.settings import AppSettings
from .dates import DateLike, format_date, is_date_in_range, is_future_date, parse_date

logger = get_logger(__name__)

# Legacy camelCase field names, accepted alongside snake_case
_FIELD_ALIASES = {
    "startDate": "start_date",
    "endDate": "end_date",
    "goalType": "goal_type",
    "goalValue": "goal_value",
    "reminderEnabled": "reminder_enabled",
    "createdAt": "created_at",
    "weekStart": "week_start",
    "viewMode": "view_mode",
}

_EDITABLE_FIELDS = (
    "name",
    "description",
    "category",
    "priority",
    "color",
    "icon",
    "start_date",
    "end_date",
    "goal_type",
    "goal_value",
    "reminder_enabled",
)

# Opaque sections of the state document, carried through load/save untouched.
_PASSTHROUGH_SECTIONS = (
    "user",
    "color_theme",
    "badges",
    "timer",
    "study_time",
    "goal_achievements",
)

_ID_ALPHABET = string.digits + string.ascii_lowercase


class ToggleResult(str, Enum):
    """Outcome of the last toggle request."""

    TOGGLED = "toggled"
    NOT_FOUND = "habit not found"
    FUTURE_DATE = "future date"
    OUT_OF_RANGE = "out of range"


@dataclass(frozen=True)
class LastAction:
    """Inspectable record of the most recent habit command."""

    type: str
    habit_id: str
    date: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    old_value: Optional[bool] = None


def generate_habit_id() -> str:
    """Return an id of the form ``habit_<epoch ms>_<9 base36 chars>``."""

    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"habit_{int(time.time() * 1000)}_{suffix}"


def _normalize_keys(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {_FIELD_ALIASES.get(key, key): value for key, value in fields.items()}


def _clean_completions(habit_id: str, completions: Mapping[str, bool]) -> dict[str, bool]:
    """Keep true marks whose key is a calendar date, in canonical form."""

    clean: dict[str, bool] = {}
    for key, done in completions.items():
        if not done:
            continue
        try:
            clean[format_date(key)] = True
        except ValueError:
            logger.warning(
                "Dropping completion with invalid date",
                extra={"habit_id": habit_id, "date": key},
            )
    return clean


def _coerce_optional(fields: dict[str, Any]) -> dict[str, Any]:
    """Default malformed optional fields instead of rejecting them."""

    clean = {key: fields[key] for key in _EDITABLE_FIELDS if key in fields}

    for key in ("description", "category", "color", "icon"):
        if key in clean and not isinstance(clean[key], str):
            clean[key] = "" if clean[key] is None else str(clean[key])

    if "priority" in clean:
        try:
            clean["priority"] = Priority(clean["priority"])
        except ValueError:
            clean["priority"] = Priority.MEDIUM

    if "goal_type" in clean:
        try:
            clean["goal_type"] = GoalType(clean["goal_type"])
        except ValueError:
            clean["goal_type"] = GoalType.DAILY

    if "goal_value" in clean:
        try:
            value = int(clean["goal_value"])
        except (TypeError, ValueError):
            value = 0
        clean["goal_value"] = value if value > 0 else None

    if "end_date" in clean:
        raw = clean["end_date"]
        try:
            clean["end_date"] = parse_date(raw) if raw else None
        except (TypeError, ValueError):
            clean["end_date"] = None

    if "reminder_enabled" in clean:
        clean["reminder_enabled"] = bool(clean["reminder_enabled"])

    return clean


class HabitStore:
    """In-memory habit state with write-through persistence."""

    def __init__(
        self,
        storage: StateRepository,
        *,
        storage_key: str = "habitTracker2026",
        settings: Optional[AppSettings] = None,
        on_persist_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self.storage = storage
        self.storage_key = storage_key
        self.on_persist_error = on_persist_error
        self._default_settings = settings or AppSettings()
        self._habits: dict[str, Habit] = {}
        self._settings = self._default_settings.model_copy()
        self._notes: dict[str, str] = {}
        self._extras: dict[str, Any] = {}
        self.last_action: Optional[LastAction] = None
        self.last_toggle_result: Optional[ToggleResult] = None
        self.last_persist_error: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def snapshot(self) -> dict[str, Any]:
        """Full state as plain JSON-compatible data."""

        state: dict[str, Any] = {
            "habits": {
                habit_id: habit.model_dump(mode="json") for habit_id, habit in self._habits.items()
            },
            "settings": self._settings.model_dump(mode="json"),
            "daily_notes": dict(self._notes),
        }
        state.update(self._extras)
        return state

    def to_json(self, *, indent: Optional[int] = None) -> str:
        return json.dumps(self.snapshot(), indent=indent, ensure_ascii=False)

    def save(self) -> bool:
        """Write the whole state document; report failures instead of raising."""

        try:
            self.storage.save(self.storage_key, self.to_json())
        except (SQLAlchemyError, OSError, TypeError, ValueError) as exc:
            self.last_persist_error = exc
            logger.exception("Failed to save state", extra={"storage_key": self.storage_key})
            if self.on_persist_error is not None:
                self.on_persist_error(exc)
            return False
        self.last_persist_error = None
        return True

    def load(self) -> bool:
        """Replace in-memory state with the stored document.

        Returns False and starts empty when nothing is stored or the
        document cannot be decoded.
        """

        self._reset_memory()
        try:
            payload = self.storage.load(self.storage_key)
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("Failed to read stored state", extra={"storage_key": self.storage_key})
            self.last_persist_error = exc
            return False
        if not payload:
            logger.info("No stored state; starting empty", extra={"storage_key": self.storage_key})
            return False

        try:
            self._restore(json.loads(payload))
        except (ValueError, TypeError, AttributeError, ValidationError) as exc:
            logger.warning(
                "Stored state is malformed; starting empty",
                extra={"storage_key": self.storage_key, "error": str(exc)},
            )
            self._reset_memory()
            return False

        logger.info(
            "State loaded",
            extra={"storage_key": self.storage_key, "habits": len(self._habits)},
        )
        return True

    def _restore(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise TypeError("state document must be an object")

        habits: dict[str, Habit] = {}
        for habit_id, raw in (data.get("habits") or {}).items():
            habit = Habit.model_validate(_normalize_keys(raw))
            habit.completions = _clean_completions(habit_id, habit.completions)
            habits[habit_id] = habit

        settings = self._restore_settings(data.get("settings") or {})

        notes = {str(day): str(text) for day, text in (data.get("daily_notes") or {}).items()}
        extras = {key: data[key] for key in _PASSTHROUGH_SECTIONS if key in data}

        self._habits = habits
        self._settings = settings
        self._notes = notes
        self._extras = extras

    def _restore_settings(self, raw: Any) -> AppSettings:
        """Merge stored settings over the defaults one field at a time.

        A field whose stored value does not validate keeps its default.
        """

        merged = self._default_settings.model_dump()
        if not isinstance(raw, Mapping):
            logger.warning("Stored settings are not an object; using defaults")
            return AppSettings.model_validate(merged)

        for key, value in _normalize_keys(raw).items():
            if key not in AppSettings.model_fields:
                continue
            try:
                AppSettings.model_validate({**merged, key: value})
            except ValidationError:
                logger.warning(
                    "Ignoring invalid stored setting",
                    extra={"setting": key, "value": str(value)},
                )
                continue
            merged[key] = value
        return AppSettings.model_validate(merged)

    def _reset_memory(self) -> None:
        self._habits = {}
        self._settings = self._default_settings.model_copy()
        self._notes = {}
        self._extras = {}

    # ------------------------------------------------------------------
    # Habit commands
    # ------------------------------------------------------------------
    def create(self, fields: Mapping[str, Any]) -> Habit:
        """Create and persist a habit; ``name`` and ``start_date`` come pre-validated."""

        raw = _normalize_keys(fields)
        values = _coerce_optional(raw)
        habit_id = generate_habit_id()
        while habit_id in self._habits:
            habit_id = generate_habit_id()

        habit = Habit(id=habit_id, completions={}, **values)
        self._habits[habit_id] = habit
        self.last_action = LastAction(
            type="create", habit_id=habit_id, data=habit.model_dump(mode="json")
        )
        logger.info("Habit created", extra={"habit_id": habit_id, "habit_name": habit.name})
        self.save()
        return habit.model_copy(deep=True)

    def update(self, habit_id: str, fields: Mapping[str, Any]) -> bool:
        """Merge editable fields into a habit. Returns False for unknown ids."""

        current = self._habits.get(habit_id)
        if current is None:
            logger.debug("Update skipped: unknown habit", extra={"habit_id": habit_id})
            return False

        updates = _coerce_optional(_normalize_keys(fields))
        old_data = current.model_dump(mode="json")
        merged = current.model_dump()
        merged.update(updates)
        self._habits[habit_id] = Habit.model_validate(merged)
        self.last_action = LastAction(
            type="update",
            habit_id=habit_id,
            data={"old": old_data, "new": dict(updates)},
        )
        logger.info("Habit updated", extra={"habit_id": habit_id, "fields": sorted(updates)})
        self.save()
        return True

    def delete(self, habit_id: str) -> bool:
        """Remove a habit and its completions. Returns False for unknown ids."""

        habit = self._habits.pop(habit_id, None)
        if habit is None:
            logger.debug("Delete skipped: unknown habit", extra={"habit_id": habit_id})
            return False
        self.last_action = LastAction(
            type="delete", habit_id=habit_id, data=habit.model_dump(mode="json")
        )
        logger.info("Habit deleted", extra={"habit_id": habit_id})
        self.save()
        return True

    def toggle_completion(
        self, habit_id: str, day: DateLike, *, today: date | None = None
    ) -> bool:
        """Flip the completion mark of ``habit_id`` on ``day``.

        Rejects unknown habits, future days and days outside the habit's
        active range without touching its completions.
        """

        habit = self._habits.get(habit_id)
        if habit is None:
            self.last_toggle_result = ToggleResult.NOT_FOUND
            logger.warning("Cannot toggle: habit not found", extra={"habit_id": habit_id})
            return False

        key = format_date(day)
        if is_future_date(key, today=today):
            self.last_toggle_result = ToggleResult.FUTURE_DATE
            logger.warning(
                "Cannot complete future dates", extra={"habit_id": habit_id, "date": key}
            )
            return False

        if not is_date_in_range(key, habit.start_date, habit.end_date):
            self.last_toggle_result = ToggleResult.OUT_OF_RANGE
            return False

        was_completed = habit.is_completed(key)
        if was_completed:
            del habit.completions[key]
        else:
            habit.completions[key] = True

        self.last_toggle_result = ToggleResult.TOGGLED
        self.last_action = LastAction(
            type="toggle", habit_id=habit_id, date=key, old_value=was_completed
        )
        logger.debug(
            "Completion toggled",
            extra={"habit_id": habit_id, "date": key, "completed": not was_completed},
        )
        self.save()
        return True

    def reset(self) -> None:
        """Delete every habit; notes and settings are kept."""

        count = len(self._habits)
        self._habits = {}
        self.last_action = None
        logger.info("All habits reset", extra={"removed": count})
        self.save()

    # ------------------------------------------------------------------
    # Notes and settings
    # ------------------------------------------------------------------
    def save_note(self, day: DateLike, text: str) -> bool:
        """Store the trimmed note for ``day``; empty text deletes it.

        Returns True when a note was stored, False when it was removed.
        """

        key = format_date(day)
        cleaned = (text or "").strip()
        if cleaned:
            self._notes[key] = cleaned
        else:
            self._notes.pop(key, None)
        self.save()
        return bool(cleaned)

    def get_note(self, day: DateLike) -> str:
        return self._notes.get(format_date(day), "")

    def notes(self) -> dict[str, str]:
        return dict(self._notes)

    @property
    def settings(self) -> AppSettings:
        return self._settings.model_copy()

    def update_settings(self, **fields: Any) -> AppSettings:
        """Merge settings fields and persist; invalid values raise ``ValueError``."""

        merged = self._settings.model_dump()
        merged.update(_normalize_keys(fields))
        try:
            self._settings = AppSettings.model_validate(merged)
        except ValidationError as exc:
            raise ValueError(str(exc)) from exc
        self.save()
        return self.settings

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get(self, habit_id: str) -> Optional[Habit]:
        habit = self._habits.get(habit_id)
        return habit.model_copy(deep=True) if habit else None

    def list(self) -> list[Habit]:
        return [habit.model_copy(deep=True) for habit in self._habits.values()]

    def __contains__(self, habit_id: object) -> bool:
        return habit_id in self._habits

    def __len__(self) -> int:
        return len(self._habits)


__all__ = ["HabitStore", "LastAction", "ToggleResult", "generate_habit_id"]
