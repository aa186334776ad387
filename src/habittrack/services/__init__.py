"""Command and query surface consumed by presentation layers."""

from .calendar_grid import (
    CellStatus,
    DayCell,
    build_day_view,
    build_habit_month_grid,
    build_month_grid,
    build_week_view,
    build_year_grid,
)
from .dates import format_date, is_date_in_range, is_future_date, parse_date
from .export_json import export_state, export_state_json
from .habits import (
    HabitStats,
    Streak,
    calculate_progress,
    calculate_streak,
    filter_habits,
    get_habit_stats,
    sort_habits,
)
from .reports import build_analytics, build_dashboard
from .store import HabitStore, LastAction, ToggleResult

__all__ = [
    "CellStatus",
    "DayCell",
    "HabitStats",
    "HabitStore",
    "LastAction",
    "Streak",
    "ToggleResult",
    "build_analytics",
    "build_dashboard",
    "build_day_view",
    "build_habit_month_grid",
    "build_month_grid",
    "build_week_view",
    "build_year_grid",
    "calculate_progress",
    "calculate_streak",
    "export_state",
    "export_state_json",
    "filter_habits",
    "format_date",
    "get_habit_stats",
    "is_date_in_range",
    "is_future_date",
    "parse_date",
    "sort_habits",
]
