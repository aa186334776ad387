"""Domain models and SQLModel table exports."""

from .habit import GoalType, Habit, Priority
from .settings import AppSettings, Theme, WeekStart
from .state import StateRecord

__all__ = [
    "AppSettings",
    "GoalType",
    "Habit",
    "Priority",
    "StateRecord",
    "Theme",
    "WeekStart",
]
