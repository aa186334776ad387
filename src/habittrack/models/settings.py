"""User-facing settings carried in the persisted state record."""

from __future__ import annotations

from enum import Enum

from sqlmodel import SQLModel


class Theme(str, Enum):
    DARK = "dark"
    LIGHT = "light"


class WeekStart(str, Enum):
    """First column of week-based grids."""

    MONDAY = "monday"
    SUNDAY = "sunday"


class AppSettings(SQLModel):
    """Display preferences; merged over these defaults on load."""

    theme: Theme = Theme.DARK
    week_start: WeekStart = WeekStart.MONDAY
    view_mode: str = "comfortable"
