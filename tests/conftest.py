"""Pytest configuration and shared fixtures for HabitTrack tests.

Provides an isolated SQLite database per test, a store wired to it, and
factories for building habits with completions without going through the
toggle guards.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable

import pytest
from sqlmodel import SQLModel, create_engine

from habittrack.infra.database import create_session_factory
from habittrack.infra.repositories import SQLModelStateRepository
from habittrack.logging_config import LOGGER_NAME
from habittrack.models import Habit, StateRecord  # noqa: F401 - registers the table
from habittrack.services.store import HabitStore

# Pinned "today" for deterministic date arithmetic
TODAY = date(2026, 1, 10)


class FailingStateRepository:
    """Storage stub whose writes always fail, like a full quota."""

    def __init__(self, payload: str | None = None, exc: Exception | None = None):
        self.payload = payload
        self.exc = exc or OSError("storage quota exceeded")
        self.save_calls = 0

    def load(self, key: str) -> str | None:
        return self.payload

    def save(self, key: str, payload: str) -> None:
        self.save_calls += 1
        raise self.exc

    def delete(self, key: str) -> None:
        return None


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Transactional session scopes bound to the test database."""
    return create_session_factory(db_engine)


@pytest.fixture
def state_repo(session_factory) -> SQLModelStateRepository:
    return SQLModelStateRepository(session_factory)


@pytest.fixture
def store(state_repo) -> HabitStore:
    """Empty store persisting to the test database."""
    return HabitStore(state_repo, storage_key="test-state")


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def reset_package_logger():
    """Detach whatever setup_logging attached once the test is done."""
    yield logging.getLogger(LOGGER_NAME)

    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)


# =============================================================================
# Test Data Factories
# =============================================================================


def days_back(count: int, *, end: date = TODAY) -> list[str]:
    """ISO keys for ``count`` consecutive days ending at ``end``."""
    return [(end - timedelta(days=offset)).isoformat() for offset in range(count)]


@pytest.fixture
def habit_factory():
    """Factory for building habits with preset completions.

    Returns:
        Callable: Function returning unsaved Habit instances
    """
    counter = {"n": 0}

    def _create_habit(
        name: str = "Test Habit",
        *,
        start_date: date = date(2026, 1, 1),
        end_date: date | None = None,
        completed: Iterable[str | date] = (),
        goal_type: str = "daily",
        goal_value: int | None = None,
        priority: str = "medium",
        category: str = "General",
    ) -> Habit:
        """Create a habit with sensible defaults.

        Args:
            name: Habit name
            start_date: First active day
            end_date: Last active day, or None for open-ended
            completed: Days marked complete (ISO strings or dates)
            goal_type: daily, weekly or total
            goal_value: Target for weekly/total goals

        Returns:
            Habit: In-memory habit instance
        """
        counter["n"] += 1
        return Habit(
            id=f"habit_test_{counter['n']}",
            name=name,
            start_date=start_date,
            end_date=end_date,
            goal_type=goal_type,
            goal_value=goal_value,
            priority=priority,
            category=category,
            completions={
                (d.isoformat() if isinstance(d, date) else d): True for d in completed
            },
        )

    return _create_habit
