"""Comprehensive tests for habit streak calculations.

These tests verify the logic for calculating current and longest streaks,
including edge cases like:
- Consecutive days
- Gaps in habit completion
- Streaks ending today vs in the past
- Empty completion data
- Days outside the habit's active range
"""

from __future__ import annotations

from datetime import date, timedelta

from habittrack.services.habits import calculate_streak, compute_streaks
from tests.conftest import TODAY, days_back


class TestCurrentStreak:
    """Tests for calculating current consecutive day streaks."""

    def test_no_entries_returns_zero_streak(self, habit_factory):
        """Habit with no completions should have zero current streak."""
        habit = habit_factory(name="Exercise")

        assert calculate_streak(habit, today=TODAY).current == 0

    def test_single_entry_today_returns_one(self, habit_factory):
        """Single completion for today should return streak of 1."""
        habit = habit_factory(name="Exercise", completed=[TODAY])

        assert calculate_streak(habit, today=TODAY).current == 1

    def test_consecutive_days_returns_correct_streak(self, habit_factory):
        """Seven consecutive days ending today give a streak of 7."""
        habit = habit_factory(name="Meditation", completed=days_back(7))

        assert calculate_streak(habit, today=TODAY).current == 7

    def test_gap_breaks_streak(self, habit_factory):
        """Gap in completions should break the current streak."""
        completed = [
            TODAY,
            TODAY - timedelta(days=1),
            # day before yesterday missing
            TODAY - timedelta(days=3),
            TODAY - timedelta(days=4),
        ]
        habit = habit_factory(name="Reading", completed=completed)

        assert calculate_streak(habit, today=TODAY).current == 2

    def test_missing_today_returns_zero(self, habit_factory):
        """If today is not completed, the current streak is 0 regardless of history."""
        yesterday = TODAY - timedelta(days=1)
        habit = habit_factory(name="Exercise", completed=days_back(5, end=yesterday))

        streak = calculate_streak(habit, today=TODAY)
        assert streak.current == 0
        assert streak.longest == 5

    def test_walk_ignores_active_range(self, habit_factory):
        """Completions before the start date still extend the walk back from today."""
        habit = habit_factory(
            name="Running",
            start_date=TODAY,
            completed=days_back(3),
        )

        assert calculate_streak(habit, today=TODAY).current == 3

    def test_false_values_do_not_count(self):
        """A stray false entry is treated as a gap."""
        completions = {
            TODAY.isoformat(): True,
            (TODAY - timedelta(days=1)).isoformat(): False,
            (TODAY - timedelta(days=2)).isoformat(): True,
        }

        streak = compute_streaks(completions, today=TODAY)
        assert streak.current == 1
        assert streak.longest == 1


class TestLongestStreak:
    """Tests for calculating the longest historical streak."""

    def test_no_entries_returns_zero(self, habit_factory):
        habit = habit_factory(name="Exercise")

        streak = calculate_streak(habit, today=TODAY)
        assert streak.current == 0
        assert streak.longest == 0

    def test_single_entry_returns_one(self, habit_factory):
        habit = habit_factory(name="Exercise", completed=["2026-01-03"])

        assert calculate_streak(habit, today=TODAY).longest == 1

    def test_multiple_streaks_returns_longest(self, habit_factory):
        """Multiple runs should return the longest one."""
        completed = []
        for start, length in ((date(2025, 1, 1), 3), (date(2025, 1, 10), 7), (date(2025, 1, 20), 4)):
            completed += [start + timedelta(days=i) for i in range(length)]
        habit = habit_factory(name="Reading", start_date=date(2025, 1, 1), completed=completed)

        assert calculate_streak(habit, today=TODAY).longest == 7

    def test_current_streak_can_be_longest(self, habit_factory):
        """The active run ending today can be the longest."""
        completed = ["2025-06-01", "2025-06-02"] + days_back(9)
        habit = habit_factory(name="Yoga", start_date=date(2025, 6, 1), completed=completed)

        streak = calculate_streak(habit, today=TODAY)
        assert streak.longest == 9
        assert streak.current == 9

    def test_gap_scenario_from_first_week(self, habit_factory):
        """01-01..01-03 plus 01-05: longest 3, current 1 when today is 01-05."""
        habit = habit_factory(
            completed=["2026-01-01", "2026-01-02", "2026-01-03", "2026-01-05"],
        )

        streak = calculate_streak(habit, today=date(2026, 1, 5))
        assert streak.longest == 3
        assert streak.current == 1

    def test_unordered_keys_are_sorted(self):
        completions = {key: True for key in ["2026-01-05", "2026-01-03", "2026-01-04", "2026-01-01"]}

        assert compute_streaks(completions, today=TODAY).longest == 3

    def test_runs_cross_month_and_year_boundaries(self):
        completions = {key: True for key in ["2025-12-30", "2025-12-31", "2026-01-01", "2026-01-02"]}

        assert compute_streaks(completions, today=TODAY).longest == 4


class TestStreakInvariants:
    """Longest is never below current."""

    def test_longest_at_least_current(self, habit_factory):
        patterns = [
            days_back(1),
            days_back(4),
            days_back(2) + days_back(3, end=TODAY - timedelta(days=5)),
            days_back(6, end=TODAY - timedelta(days=1)),
            [],
        ]
        for completed in patterns:
            habit = habit_factory(start_date=date(2025, 12, 1), completed=completed)
            streak = calculate_streak(habit, today=TODAY)
            assert streak.longest >= streak.current
