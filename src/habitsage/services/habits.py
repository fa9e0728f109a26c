"""Habit service: snapshot in, engine call, snapshot out.

This is the calling layer around the pure ledger/streak/stats functions. It
fetches the current habit from the repository, runs the engine, persists the
returned value and serializes writers per habit.
"""

from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional

from ..config import BaseConfig
from ..domain.dates import Clock, DateLike, SystemClock, coerce_local_date
from ..domain.habit import Habit, create_habit
from ..domain.recurrence import Recurrence
from ..domain.repositories import HabitRepository
from ..errors import NotFoundError
from ..infra.database import bootstrap_database
from ..infra.repositories import SQLModelHabitRepository
from ..logging_config import get_logger
from .ledger import record_completion, remove_completion
from .progress import UserStats, user_stats_from_habits
from .stats import StatsPoint, StatsSummary, build_time_series, due_habits, summarize, timeframe_window
from .streaks import StreakEvent

logger = get_logger("services.habits")


class HabitService:
    """Coordinates habit mutations and reports for one repository."""

    def __init__(self, repository: HabitRepository, clock: Clock):
        self.repository = repository
        self.clock = clock
        # Entries go away once no writer holds the lock.
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    @classmethod
    def from_config(cls, config: Optional[BaseConfig] = None) -> "HabitService":
        """Build a service over the configured database and timezone."""

        cfg = config or BaseConfig()
        _, session_factory = bootstrap_database(cfg)
        return cls(SQLModelHabitRepository(session_factory), SystemClock(cfg.TIMEZONE))

    @contextmanager
    def _writer(self, habit_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.get(habit_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[habit_id] = lock
        with lock:
            yield

    def _load(self, habit_id: str, owner_id: str) -> Habit:
        habit = self.repository.get(habit_id, owner_id=owner_id)
        if habit is None:
            raise NotFoundError(f"Habit {habit_id} not found")
        return habit

    def _day(self, day: Optional[DateLike]) -> date:
        return self.clock.today() if day is None else coerce_local_date(day)

    def create_habit(
        self,
        *,
        owner_id: str,
        recurrence: Recurrence,
        name: str = "",
        created_at: Optional[DateLike] = None,
    ) -> Habit:
        habit = create_habit(
            owner_id=owner_id,
            recurrence=recurrence,
            created_at=self._day(created_at),
            name=name,
        )
        self.repository.add(habit)
        logger.info("Habit created", extra={"habit_id": habit.id, "owner_id": owner_id})
        return habit

    def edit_recurrence(self, habit_id: str, *, owner_id: str, recurrence: Recurrence) -> Habit:
        with self._writer(habit_id):
            habit = self._load(habit_id, owner_id).with_recurrence(recurrence)
            return self.repository.save(habit)

    def archive_habit(self, habit_id: str, *, owner_id: str, on: Optional[DateLike] = None) -> Habit:
        with self._writer(habit_id):
            habit = self._load(habit_id, owner_id).archive(self._day(on))
            self.repository.save(habit)
            logger.info("Habit archived", extra={"habit_id": habit_id, "archived_on": habit.archived_on})
            return habit

    def complete(
        self,
        habit_id: str,
        *,
        owner_id: str,
        day: Optional[DateLike] = None,
        count: int = 1,
    ) -> tuple[Habit, Optional[StreakEvent]]:
        """Mark a habit complete; ``day`` defaults to the clock's today."""

        on = self._day(day)
        with self._writer(habit_id):
            habit = self._load(habit_id, owner_id)
            ledger, event = record_completion(
                habit.ledger, habit.recurrence, habit.created_at, on, increment_by=count
            )
            habit = self.repository.save(habit.with_ledger(ledger))
        logger.info(
            "Habit completed",
            extra={
                "habit_id": habit_id,
                "day": on,
                "streak": ledger.streak,
                "streak_event": event.value if event else None,
            },
        )
        return habit, event

    def uncomplete(self, habit_id: str, *, owner_id: str, day: Optional[DateLike] = None) -> Habit:
        """Undo the completion recorded on ``day`` (today by default)."""

        on = self._day(day)
        with self._writer(habit_id):
            habit = self._load(habit_id, owner_id)
            ledger = remove_completion(habit.ledger, habit.recurrence, habit.created_at, on)
            habit = self.repository.save(habit.with_ledger(ledger))
        logger.info("Habit completion removed", extra={"habit_id": habit_id, "day": on, "streak": ledger.streak})
        return habit

    def due_today(self, owner_id: str) -> list[Habit]:
        return due_habits(self.repository.list_for_owner(owner_id), self.clock.today())

    def stats_history(self, owner_id: str, timeframe: str = "week") -> list[StatsPoint]:
        """Daily points for the look-back window ending today.

        Archived habits are included so days before their archive date still
        count them.
        """

        start, end = timeframe_window(self.clock.today(), timeframe)
        habits = self.repository.list_for_owner(owner_id, include_archived=True)
        return build_time_series(habits, start, end)

    def summary(self, owner_id: str, timeframe: str = "week") -> StatsSummary:
        return summarize(self.stats_history(owner_id, timeframe))

    def user_stats(self, owner_id: str) -> UserStats:
        """XP and completion counters replayed from every stored ledger."""

        return user_stats_from_habits(self.repository.list_for_owner(owner_id, include_archived=True))
