"""Calendar arithmetic shared by the store, analytics and calendar views.

Dates are handled as naive local ``datetime.date`` values; the canonical
string form is ``YYYY-MM-DD``. Every function that depends on "today" takes
an optional ``today`` keyword so callers and tests can pin the clock.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[date, datetime, str]

# Stands in for "no end date" when a habit is open-ended.
TRACKING_HORIZON = date(2026, 12, 31)

WEEK_STARTS = ("monday", "sunday")


def format_date(value: DateLike) -> str:
    """Return the zero-padded ``YYYY-MM-DD`` form of ``value``."""

    day = parse_date(value)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_date(value: DateLike) -> date:
    """Parse ``YYYY-MM-DD`` (or pass a date/datetime through) to a ``date``.

    A ``datetime`` is truncated to its local calendar day, which is the
    same as anchoring it to midnight.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def is_future_date(value: DateLike, *, today: Optional[date] = None) -> bool:
    """True when ``value`` falls strictly after today."""

    reference = today or date.today()
    return parse_date(value) > reference


def range_end(end_date: Optional[DateLike]) -> date:
    """Inclusive end of a habit's active range, falling back to the horizon."""

    return parse_date(end_date) if end_date else TRACKING_HORIZON


def is_date_in_range(value: DateLike, start_date: DateLike, end_date: Optional[DateLike]) -> bool:
    """True when ``start_date <= value <= (end_date or horizon)``."""

    day = parse_date(value)
    return parse_date(start_date) <= day <= range_end(end_date)


def days_between(start: DateLike, end: DateLike) -> int:
    """Inclusive count of calendar days from ``start`` to ``end``.

    Zero or negative when ``end`` precedes ``start``.
    """

    return (parse_date(end) - parse_date(start)).days + 1


def days_in_month(year: int, month: int) -> int:
    """Number of days in ``month`` (1-12) of ``year``."""

    return monthrange(year, month)[1]


def _check_week_start(week_start: str) -> str:
    if week_start not in WEEK_STARTS:
        raise ValueError(f"week_start must be one of {WEEK_STARTS}, got {week_start!r}")
    return week_start


def first_weekday_offset(year: int, month: int, week_start: str = "monday") -> int:
    """Blank cells needed before day 1 of the month in a 7-column grid."""

    _check_week_start(week_start)
    # date.weekday(): Monday=0 .. Sunday=6
    weekday = date(year, month, 1).weekday()
    if week_start == "monday":
        return weekday
    return (weekday + 1) % 7


def week_start_for(value: DateLike, week_start: str = "monday") -> date:
    """First day of the week containing ``value``."""

    _check_week_start(week_start)
    day = parse_date(value)
    if week_start == "monday":
        return day - timedelta(days=day.weekday())
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_dates(anchor: DateLike) -> list[date]:
    """Seven consecutive dates starting at ``anchor``."""

    start = parse_date(anchor)
    return [start + timedelta(days=offset) for offset in range(7)]


def add_months(value: DateLike, months: int) -> date:
    """Shift ``value`` by whole months, clamping the day to the target month."""

    day = parse_date(value)
    index = day.month - 1 + months
    year = day.year + index // 12
    month = index % 12 + 1
    return date(year, month, min(day.day, days_in_month(year, month)))


__all__ = [
    "TRACKING_HORIZON",
    "WEEK_STARTS",
    "add_months",
    "days_between",
    "days_in_month",
    "first_weekday_offset",
    "format_date",
    "is_date_in_range",
    "is_future_date",
    "parse_date",
    "range_end",
    "week_dates",
    "week_start_for",
]
