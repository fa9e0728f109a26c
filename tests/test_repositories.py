"""Tests for the SQLModel habit repository."""

from __future__ import annotations

from datetime import date

import pytest
from sqlmodel import select

from habitsage.domain.habit import Ledger
from habitsage.domain.recurrence import Daily, weekly
from habitsage.errors import NotFoundError
from habitsage.models import HabitEntry


class TestSQLModelHabitRepository:
    def test_add_and_get_round_trip(self, repository, habit_factory):
        habit = habit_factory(weekly({1, 3, 5}), completed=[date(2024, 1, 1), date(2024, 1, 3)], name="Run")
        repository.add(habit)

        loaded = repository.get(habit.id, owner_id=habit.owner_id)
        assert loaded == habit
        assert loaded.ledger.streak == 2
        assert loaded.recurrence == weekly({1, 3, 5})

    def test_get_is_scoped_to_owner(self, repository, habit_factory):
        habit = habit_factory(owner_id="alice")
        repository.add(habit)
        assert repository.get(habit.id, owner_id="bob") is None

    def test_list_excludes_archived_by_default(self, repository, habit_factory):
        active = habit_factory(name="Active")
        archived = habit_factory(name="Old", archived_on=date(2024, 1, 3))
        other_owner = habit_factory(owner_id="someone-else")
        for habit in (active, archived, other_owner):
            repository.add(habit)

        assert [h.id for h in repository.list_for_owner("user-1")] == [active.id]
        assert {h.id for h in repository.list_for_owner("user-1", include_archived=True)} == {
            active.id,
            archived.id,
        }

    def test_save_syncs_entries_with_history(self, repository, habit_factory, session_factory):
        habit = habit_factory(Daily(), completed=[date(2024, 1, 1), date(2024, 1, 2)])
        repository.add(habit)

        ledger = Ledger({date(2024, 1, 2): 4, date(2024, 1, 3): 1}, streak=2, last_completed=date(2024, 1, 3))
        repository.save(habit.with_ledger(ledger))

        with session_factory() as session:
            rows = session.exec(select(HabitEntry).where(HabitEntry.habit_id == habit.id)).all()
            assert {(r.occurred_on, r.count) for r in rows} == {
                (date(2024, 1, 2), 4),
                (date(2024, 1, 3), 1),
            }

        loaded = repository.get(habit.id, owner_id=habit.owner_id)
        assert loaded.ledger == ledger

    def test_save_persists_recurrence_and_archive(self, repository, habit_factory):
        habit = habit_factory(Daily())
        repository.add(habit)
        repository.save(habit.with_recurrence(weekly({0, 6})).archive(date(2024, 2, 1)))

        loaded = repository.get(habit.id, owner_id=habit.owner_id)
        assert loaded.recurrence == weekly({0, 6})
        assert loaded.archived_on == date(2024, 2, 1)

    def test_save_unknown_habit_raises(self, repository, habit_factory):
        with pytest.raises(NotFoundError):
            repository.save(habit_factory())


def test_bootstrap_database_in_memory(habit_factory):
    """The in-memory test database is shared across sessions from one factory."""
    from habitsage.config import TestConfig
    from habitsage.infra.database import bootstrap_database
    from habitsage.infra.repositories import SQLModelHabitRepository

    engine, factory = bootstrap_database(TestConfig())
    repository = SQLModelHabitRepository(factory)
    habit = habit_factory()
    repository.add(habit)

    assert repository.get(habit.id, owner_id=habit.owner_id) == habit
    engine.dispose()
