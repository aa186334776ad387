"""Habit analytics: streaks, goal progress and per-habit statistics."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional

from ..models.habit import GoalType, Habit, Priority
from .dates import days_between, format_date, parse_date, range_end

PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}
SORT_KEYS = ("priority", "progress", "streak", "name")


@dataclass(frozen=True, slots=True)
class Streak:
    current: int
    longest: int


@dataclass(frozen=True, slots=True)
class HabitStats:
    """Derived numbers shown next to a habit in every view."""

    current_streak: int
    longest_streak: int
    total_completions: int
    missed_days: int
    progress: int


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_streaks(completions: Mapping[str, bool], *, today: date | None = None) -> Streak:
    """Return current and longest streaks from a sparse completion map."""

    today = today or date.today()
    days = sorted(parse_date(key) for key, done in completions.items() if done)
    if not days:
        return Streak(current=0, longest=0)

    # Current streak: walk backwards from today until a gap; range bounds are ignored.
    current = 0
    cursor = today
    while completions.get(format_date(cursor)):
        current += 1
        cursor -= timedelta(days=1)

    # Longest streak: sweep sorted days, counting runs of one-day steps.
    longest = 0
    run = 0
    last_day: date | None = None
    for day in days:
        if last_day is not None and (day - last_day).days == 1:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
        last_day = day
    longest = max(longest, run)

    return Streak(current=current, longest=longest)


def calculate_streak(habit: Habit, *, today: date | None = None) -> Streak:
    return compute_streaks(habit.completions, today=today)


def calculate_progress(habit: Habit, *, today: date | None = None) -> int:
    """Goal progress as a whole percentage, capped at 100.

    Days passed run from the start date to the earlier of today and the
    habit's end (or the tracking horizon), inclusive, and never drop below 1.
    """

    today = today or date.today()
    total_days = habit.total_completions
    actual_end = min(range_end(habit.end_date), today)
    days_passed = max(1, days_between(habit.start_date, actual_end))

    percentage = 0.0
    if habit.goal_type == GoalType.DAILY:
        percentage = total_days / days_passed * 100
    elif habit.goal_type == GoalType.WEEKLY and habit.goal_value:
        weeks_passed = math.ceil(days_passed / 7)
        expected = weeks_passed * habit.goal_value
        percentage = total_days / expected * 100
    elif habit.goal_type == GoalType.TOTAL and habit.goal_value:
        percentage = total_days / habit.goal_value * 100

    return min(100, round_half_up(percentage))


def get_habit_stats(habit: Habit, *, today: date | None = None) -> HabitStats:
    """Streaks, totals, missed days and progress for one habit.

    ``missed_days`` counts from the start date through today and does not
    stop at ``end_date``, unlike :func:`calculate_progress`.
    """

    today = today or date.today()
    streak = calculate_streak(habit, today=today)
    total = habit.total_completions
    days_passed = days_between(habit.start_date, today)
    return HabitStats(
        current_streak=streak.current,
        longest_streak=streak.longest,
        total_completions=total,
        missed_days=max(0, days_passed - total),
        progress=calculate_progress(habit, today=today),
    )


def filter_habits(habits: Iterable[Habit], priority: Optional[str] = None) -> list[Habit]:
    """Keep habits of the given priority; ``None`` or ``"all"`` keeps everything."""

    if priority in (None, "all"):
        return list(habits)
    wanted = Priority(priority)
    return [habit for habit in habits if habit.priority == wanted]


def sort_habits(
    habits: Iterable[Habit], sort_by: Optional[str] = None, *, today: date | None = None
) -> list[Habit]:
    """Order habits for the list view. Unknown keys keep the input order."""

    items = list(habits)
    if sort_by not in SORT_KEYS:
        return items
    if sort_by == "priority":
        return sorted(items, key=lambda h: PRIORITY_ORDER[h.priority])
    if sort_by == "progress":
        return sorted(items, key=lambda h: calculate_progress(h, today=today), reverse=True)
    if sort_by == "name":
        return sorted(items, key=lambda h: h.name.casefold())
    return sorted(items, key=lambda h: calculate_streak(h, today=today).current, reverse=True)


__all__ = [
    "HabitStats",
    "PRIORITY_ORDER",
    "SORT_KEYS",
    "Streak",
    "calculate_progress",
    "calculate_streak",
    "compute_streaks",
    "filter_habits",
    "get_habit_stats",
    "round_half_up",
    "sort_habits",
]
