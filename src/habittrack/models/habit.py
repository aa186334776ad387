"""Habit tracking data structures."""

from __future__ import annotations

import time
from datetime import date
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class Priority(str, Enum):
    """Priority levels; drive list ordering and highlighting."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class GoalType(str, Enum):
    """Formula family used for the progress percentage."""

    DAILY = "daily"
    WEEKLY = "weekly"
    TOTAL = "total"


def _now_ms() -> int:
    return int(time.time() * 1000)


class Habit(SQLModel):
    """A user-defined recurring task tracked over a date range.

    ``completions`` is sparse: a key exists only for completed days and
    always maps to ``True``.
    """

    id: str = Field(min_length=1)
    name: str
    description: str = ""
    category: str = ""
    priority: Priority = Priority.MEDIUM
    color: str = ""
    icon: str = ""
    start_date: date
    end_date: Optional[date] = None
    goal_type: GoalType = GoalType.DAILY
    goal_value: Optional[int] = None
    reminder_enabled: bool = False
    completions: dict[str, bool] = Field(default_factory=dict)
    created_at: int = Field(default_factory=_now_ms)

    def is_completed(self, day: str) -> bool:
        return bool(self.completions.get(day))

    @property
    def total_completions(self) -> int:
        return sum(1 for done in self.completions.values() if done)
