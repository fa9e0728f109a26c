"""Pytest configuration and shared fixtures for HabitSage tests.

Provides an isolated SQLite database per test, a pinned clock and factories
for habits with pre-filled ledgers.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

import pytest
from sqlmodel import Session, SQLModel, create_engine

from habitsage.domain.dates import FixedClock
from habitsage.domain.habit import Habit, Ledger
from habitsage.domain.recurrence import Daily, Recurrence
from habitsage.infra.repositories import SQLModelHabitRepository
from habitsage.models import HabitEntry, HabitRecord  # noqa: F401  (register tables)
from habitsage.services.habits import HabitService
from habitsage.services.streaks import rebuild_streak


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep config-created directories out of the working tree."""

    monkeypatch.setenv("HABITSAGE_DATA_DIR", str(tmp_path / "instance"))
    monkeypatch.delenv("HABITSAGE_DATABASE_URL", raising=False)
    monkeypatch.delenv("HABITSAGE_TIMEZONE", raising=False)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create an isolated SQLite database file for each test."""

    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        echo=False,
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Factory returning sessions usable as context managers."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def repository(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to Wednesday 2024-01-10."""

    return FixedClock(date(2024, 1, 10))


@pytest.fixture
def service(repository, clock) -> HabitService:
    return HabitService(repository, clock)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory():
    """Factory for in-memory habits.

    ``completed`` lists the dates with one completion each; streak fields are
    derived from them the same way a removal rebuild does.
    """

    counter = {"n": 0}

    def _create_habit(
        recurrence: Recurrence | None = None,
        created_at: date = date(2024, 1, 1),
        completed: Iterable[date] = (),
        owner_id: str = "user-1",
        name: str = "",
        archived_on: date | None = None,
    ) -> Habit:
        counter["n"] += 1
        rule = recurrence or Daily()
        history = {d: 1 for d in completed}
        streak, last = rebuild_streak(history, rule, created_at)
        return Habit(
            id=f"habit-{counter['n']}",
            owner_id=owner_id,
            recurrence=rule,
            created_at=created_at,
            ledger=Ledger(history, streak, last),
            name=name or f"Habit {counter['n']}",
            archived_on=archived_on,
        )

    return _create_habit
