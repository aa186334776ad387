"""Calendar grid builder: per-day cell data for month, year, week and day views.

Everything here is read-only and recomputed on each call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Mapping, Optional

from ..models.habit import Habit
from .dates import (
    DateLike,
    add_months,
    days_in_month,
    first_weekday_offset,
    format_date,
    is_date_in_range,
    is_future_date,
    parse_date,
    week_dates,
    week_start_for,
)
from .habits import HabitStats, get_habit_stats

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_DAY_HEADERS = {
    "monday": ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
    "sunday": ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"),
}


class CellStatus(str, Enum):
    """Display classification of a calendar cell."""

    BLANK = "blank"  # padding before the first of the month
    EMPTY = "empty"
    FUTURE = "future"
    COMPLETED = "completed"
    PARTIAL = "partial"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True, slots=True)
class DayCell:
    date: Optional[str]
    day: Optional[int]
    status: CellStatus
    completed_count: int = 0
    total_count: int = 0
    active_habit_ids: tuple[str, ...] = ()

    @property
    def is_blank(self) -> bool:
        return self.status == CellStatus.BLANK

    @property
    def clickable(self) -> bool:
        """Cells that open the day details: active habits and not in the future."""
        return self.total_count > 0 and self.status != CellStatus.FUTURE


@dataclass(frozen=True, slots=True)
class MonthGrid:
    year: int
    month: int
    name: str
    headers: tuple[str, ...]
    cells: list[DayCell] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class HabitDayEntry:
    """One habit as listed in a week column or the day view."""

    habit_id: str
    name: str
    icon: str
    priority: str
    completed: bool
    stats: Optional[HabitStats] = None


@dataclass(frozen=True, slots=True)
class DayDetail:
    date: str
    weekday: str
    completed_count: int
    total_count: int
    is_today: bool
    is_future: bool
    habits: list[HabitDayEntry] = field(default_factory=list)
    note: str = ""

    @property
    def completion_ratio(self) -> float:
        return self.completed_count / self.total_count if self.total_count else 0.0


def _week_start_value(week_start) -> str:
    # Accepts the WeekStart enum as well as its plain string value
    return str(getattr(week_start, "value", week_start))


def day_headers(week_start: str = "monday") -> tuple[str, ...]:
    """Short weekday labels in grid column order."""
    return _DAY_HEADERS[_week_start_value(week_start)]


def active_habits_on(habits: Iterable[Habit], day: DateLike) -> list[Habit]:
    """Habits whose start/end range covers ``day``."""

    key = format_date(day)
    return [h for h in habits if is_date_in_range(key, h.start_date, h.end_date)]


def _blank_cells(year: int, month: int, week_start: str) -> list[DayCell]:
    offset = first_weekday_offset(year, month, week_start)
    return [DayCell(date=None, day=None, status=CellStatus.BLANK) for _ in range(offset)]


def build_month_grid(
    habits: Iterable[Habit],
    year: int,
    month: int,
    week_start: str = "monday",
    *,
    today: date | None = None,
) -> list[DayCell]:
    """Cells for every habit combined; ``month`` is 1-12.

    Status checks run in order: no active habits, future, all done, some
    done, none done.
    """

    today = today or date.today()
    week_start = _week_start_value(week_start)
    habit_list = list(habits)
    cells = _blank_cells(year, month, week_start)

    for day_number in range(1, days_in_month(year, month) + 1):
        key = format_date(date(year, month, day_number))
        active = active_habits_on(habit_list, key)
        completed = sum(1 for h in active if h.is_completed(key))
        total = len(active)

        if total == 0:
            status = CellStatus.EMPTY
        elif is_future_date(key, today=today):
            status = CellStatus.FUTURE
        elif completed == total:
            status = CellStatus.COMPLETED
        elif completed > 0:
            status = CellStatus.PARTIAL
        else:
            status = CellStatus.INCOMPLETE

        cells.append(
            DayCell(
                date=key,
                day=day_number,
                status=status,
                completed_count=completed,
                total_count=total,
                active_habit_ids=tuple(h.id for h in active),
            )
        )
    return cells


def build_habit_month_grid(
    habit: Habit,
    year: int,
    month: int,
    week_start: str = "monday",
    *,
    today: date | None = None,
) -> list[DayCell]:
    """Single-habit month grid used by the habit detail calendar."""

    today = today or date.today()
    week_start = _week_start_value(week_start)
    cells = _blank_cells(year, month, week_start)

    for day_number in range(1, days_in_month(year, month) + 1):
        key = format_date(date(year, month, day_number))
        in_range = is_date_in_range(key, habit.start_date, habit.end_date)
        done = habit.is_completed(key)

        if not in_range:
            status = CellStatus.EMPTY
        elif is_future_date(key, today=today):
            status = CellStatus.FUTURE
        elif done:
            status = CellStatus.COMPLETED
        else:
            status = CellStatus.INCOMPLETE

        cells.append(
            DayCell(
                date=key,
                day=day_number,
                status=status,
                completed_count=int(in_range and done),
                total_count=int(in_range),
                active_habit_ids=(habit.id,) if in_range else (),
            )
        )
    return cells


def build_year_grid(
    habits: Iterable[Habit],
    year: int,
    week_start: str = "monday",
    *,
    today: date | None = None,
) -> list[MonthGrid]:
    habit_list = list(habits)
    week_start = _week_start_value(week_start)
    headers = day_headers(week_start)
    return [
        MonthGrid(
            year=year,
            month=month,
            name=MONTH_NAMES[month - 1],
            headers=headers,
            cells=build_month_grid(habit_list, year, month, week_start, today=today),
        )
        for month in range(1, 13)
    ]


def _day_detail(
    habits: list[Habit],
    day: date,
    *,
    today: date,
    with_stats: bool,
    note: str = "",
) -> DayDetail:
    key = format_date(day)
    active = active_habits_on(habits, key)
    entries = [
        HabitDayEntry(
            habit_id=h.id,
            name=h.name,
            icon=h.icon,
            priority=h.priority.value,
            completed=h.is_completed(key),
            stats=get_habit_stats(h, today=today) if with_stats else None,
        )
        for h in active
    ]
    return DayDetail(
        date=key,
        weekday=day.strftime("%A"),
        completed_count=sum(1 for entry in entries if entry.completed),
        total_count=len(entries),
        is_today=day == today,
        is_future=is_future_date(day, today=today),
        habits=entries,
        note=note,
    )


def build_week_view(
    habits: Iterable[Habit],
    anchor: DateLike,
    week_start: str = "monday",
    *,
    today: date | None = None,
) -> list[DayDetail]:
    """Seven day columns for the week containing ``anchor``, honouring ``week_start``."""

    today = today or date.today()
    habit_list = list(habits)
    start = week_start_for(anchor, _week_start_value(week_start))
    return [
        _day_detail(habit_list, day, today=today, with_stats=False)
        for day in week_dates(start)
    ]


def build_day_view(
    habits: Iterable[Habit],
    day: DateLike,
    *,
    notes: Optional[Mapping[str, str]] = None,
    today: date | None = None,
) -> DayDetail:
    """Habits active on ``day`` with their stats, plus the day's note."""

    today = today or date.today()
    target = parse_date(day)
    note = (notes or {}).get(format_date(target), "")
    return _day_detail(list(habits), target, today=today, with_stats=True, note=note)


def shift_day(value: DateLike, offset: int) -> date:
    return parse_date(value) + timedelta(days=offset)


def shift_week(value: DateLike, offset: int) -> date:
    return parse_date(value) + timedelta(weeks=offset)


def shift_month(value: DateLike, offset: int) -> date:
    return add_months(value, offset)


__all__ = [
    "CellStatus",
    "DayCell",
    "DayDetail",
    "HabitDayEntry",
    "MONTH_NAMES",
    "MonthGrid",
    "active_habits_on",
    "build_day_view",
    "build_habit_month_grid",
    "build_month_grid",
    "build_week_view",
    "build_year_grid",
    "day_headers",
    "shift_day",
    "shift_month",
    "shift_week",
]
