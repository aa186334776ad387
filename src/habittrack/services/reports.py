"""Aggregate statistics for the dashboard and analytics views."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional

from ..models.habit import Habit, Priority
from .dates import format_date, is_date_in_range, week_dates, week_start_for
from .habits import HabitStats, get_habit_stats, round_half_up

# Rough conversion behind the dashboard's study-hours hint
HOURS_PER_COMPLETION = 0.5


@dataclass(frozen=True, slots=True)
class TodaySummary:
    date: str
    completed: int
    total: int

    @property
    def remaining(self) -> int:
        return self.total - self.completed

    @property
    def percentage(self) -> int:
        return round_half_up(self.completed / self.total * 100) if self.total else 0


@dataclass(frozen=True, slots=True)
class HabitWithStats:
    habit: Habit
    stats: HabitStats
    completed_today: bool = False


@dataclass(frozen=True, slots=True)
class CategoryStat:
    count: int
    completions: int


@dataclass(frozen=True, slots=True)
class DashboardSummary:
    today: TodaySummary
    week_completions: int
    estimated_study_hours: int
    active_streaks: int
    total_streak_days: int
    total_completions: int
    best_performer: Optional[HabitWithStats]
    high_priority: list[HabitWithStats] = field(default_factory=list)
    categories: dict[str, CategoryStat] = field(default_factory=dict)
    note: str = ""


@dataclass(frozen=True, slots=True)
class WeekDayStat:
    date: str
    completed: int
    total: int
    percentage: int


@dataclass(frozen=True, slots=True)
class AnalyticsWeek:
    offset: int
    start: str
    end: str
    days: list[WeekDayStat]
    total_completed: int
    total_tasks: int
    average_completion: int
    max_total: int


@dataclass(frozen=True, slots=True)
class AnalyticsSummary:
    week: AnalyticsWeek
    priority_stats: dict[str, int]
    top_performers: list[HabitWithStats]


def today_summary(habits: Iterable[Habit], *, today: date | None = None) -> TodaySummary:
    """Completed versus active habits for today."""

    key = format_date(today or date.today())
    active = [h for h in habits if is_date_in_range(key, h.start_date, h.end_date)]
    return TodaySummary(
        date=key,
        completed=sum(1 for h in active if h.is_completed(key)),
        total=len(active),
    )


def week_completions(
    habits: Iterable[Habit], week_start: str = "monday", *, today: date | None = None
) -> int:
    """Completion marks across all habits in the current week.

    Active ranges are not consulted; any stored mark in the window counts.
    """

    start = week_start_for(today or date.today(), week_start)
    keys = [format_date(day) for day in week_dates(start)]
    habit_list = list(habits)
    return sum(1 for key in keys for h in habit_list if h.is_completed(key))


def category_breakdown(habits: Iterable[Habit]) -> dict[str, CategoryStat]:
    """Habit count and total completions per category."""

    counts: dict[str, int] = {}
    completions: dict[str, int] = {}
    for habit in habits:
        counts[habit.category] = counts.get(habit.category, 0) + 1
        completions[habit.category] = completions.get(habit.category, 0) + habit.total_completions
    return {
        category: CategoryStat(count=counts[category], completions=completions[category])
        for category in counts
    }


def with_stats(habits: Iterable[Habit], *, today: date | None = None) -> list[HabitWithStats]:
    today = today or date.today()
    key = format_date(today)
    return [
        HabitWithStats(
            habit=habit,
            stats=get_habit_stats(habit, today=today),
            completed_today=habit.is_completed(key),
        )
        for habit in habits
    ]


def best_performer(rows: Iterable[HabitWithStats]) -> Optional[HabitWithStats]:
    """Highest progress; the earliest habit wins ties."""

    best: Optional[HabitWithStats] = None
    for row in rows:
        if best is None or row.stats.progress > best.stats.progress:
            best = row
    return best


def build_dashboard(
    habits: Iterable[Habit],
    *,
    week_start: str = "monday",
    notes: Optional[Mapping[str, str]] = None,
    today: date | None = None,
) -> DashboardSummary:
    """Everything the dashboard cards show, computed in one pass."""

    today = today or date.today()
    habit_list = list(habits)
    rows = with_stats(habit_list, today=today)
    week_total = week_completions(habit_list, week_start, today=today)

    return DashboardSummary(
        today=today_summary(habit_list, today=today),
        week_completions=week_total,
        estimated_study_hours=round_half_up(week_total * HOURS_PER_COMPLETION),
        active_streaks=sum(1 for row in rows if row.stats.current_streak > 0),
        total_streak_days=sum(row.stats.current_streak for row in rows),
        total_completions=sum(row.stats.total_completions for row in rows),
        best_performer=best_performer(rows),
        high_priority=[row for row in rows if row.habit.priority == Priority.HIGH],
        categories=category_breakdown(habit_list),
        note=(notes or {}).get(format_date(today), ""),
    )


def analytics_week(
    habits: Iterable[Habit], *, offset: int = 0, today: date | None = None
) -> AnalyticsWeek:
    """Per-day completion for a Monday-based week, ``offset`` weeks back.

    The analytics view always starts weeks on Monday, whatever the user's
    setting. Offsets pointing into the future are clamped to this week.
    """

    today = today or date.today()
    offset = min(0, offset)
    start = week_start_for(today, "monday") + timedelta(weeks=offset)
    habit_list = list(habits)

    days: list[WeekDayStat] = []
    for day in week_dates(start):
        key = format_date(day)
        active = [h for h in habit_list if is_date_in_range(key, h.start_date, h.end_date)]
        completed = sum(1 for h in active if h.is_completed(key))
        total = len(active)
        percentage = round_half_up(completed / total * 100) if total else 0
        days.append(WeekDayStat(date=key, completed=completed, total=total, percentage=percentage))

    total_completed = sum(day.completed for day in days)
    total_tasks = sum(day.total for day in days)
    return AnalyticsWeek(
        offset=offset,
        start=days[0].date,
        end=days[-1].date,
        days=days,
        total_completed=total_completed,
        total_tasks=total_tasks,
        average_completion=round_half_up(total_completed / total_tasks * 100) if total_tasks else 0,
        max_total=max([day.total for day in days] + [1]),
    )


def priority_stats(habits: Iterable[Habit]) -> dict[str, int]:
    """Lifetime completions per priority level; every level is present."""

    stats = {priority.value: 0 for priority in Priority}
    for habit in habits:
        stats[habit.priority.value] += habit.total_completions
    return stats


def top_performers(
    habits: Iterable[Habit], limit: int = 3, *, today: date | None = None
) -> list[HabitWithStats]:
    """Habits ranked by progress, best first."""

    rows = with_stats(habits, today=today)
    rows.sort(key=lambda row: row.stats.progress, reverse=True)
    return rows[:limit]


def build_analytics(
    habits: Iterable[Habit], *, offset: int = 0, today: date | None = None
) -> AnalyticsSummary:
    habit_list = list(habits)
    return AnalyticsSummary(
        week=analytics_week(habit_list, offset=offset, today=today),
        priority_stats=priority_stats(habit_list),
        top_performers=top_performers(habit_list, today=today),
    )


__all__ = [
    "AnalyticsSummary",
    "AnalyticsWeek",
    "CategoryStat",
    "DashboardSummary",
    "HOURS_PER_COMPLETION",
    "HabitWithStats",
    "TodaySummary",
    "WeekDayStat",
    "analytics_week",
    "best_performer",
    "build_analytics",
    "build_dashboard",
    "category_breakdown",
    "priority_stats",
    "today_summary",
    "top_performers",
    "week_completions",
    "with_stats",
]
