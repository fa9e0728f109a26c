"""Habit and ledger value types."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from types import MappingProxyType
from typing import Mapping, Optional

from ..errors import InvalidDateError
from .dates import DateLike, coerce_local_date
from .recurrence import Daily, Recurrence, WeeklyDays, is_scheduled


@dataclass(frozen=True, slots=True)
class Ledger:
    """Completion history of one habit plus its derived streak state.

    ``history`` maps local dates to completion counts and is exposed read-only;
    every change produces a new ``Ledger``.
    """

    history: Mapping[date, int] = field(default_factory=dict)
    streak: int = 0
    last_completed: Optional[date] = None

    def __post_init__(self) -> None:
        cleaned: dict[date, int] = {}
        for key, count in dict(self.history).items():
            day = coerce_local_date(key)
            if count < 0:
                raise ValueError(f"Completion count for {day} must be non-negative")
            cleaned[day] = int(count)
        if self.streak < 0:
            raise ValueError("Streak must be non-negative")
        if (self.streak == 0) != (self.last_completed is None):
            raise ValueError("Streak is zero exactly when there is no last completion")
        if self.last_completed is not None:
            last = coerce_local_date(self.last_completed)
            if cleaned.get(last, 0) <= 0:
                raise ValueError(f"Last completion {last} has no completed entry in history")
            object.__setattr__(self, "last_completed", last)
        object.__setattr__(self, "history", MappingProxyType(cleaned))

    def count_on(self, day: date) -> int:
        return self.history.get(day, 0)

    def is_completed(self, day: date) -> bool:
        return self.count_on(day) > 0

    def completed_dates(self) -> list[date]:
        """Dates with a non-zero count, ascending."""

        return sorted(day for day, count in self.history.items() if count > 0)

    @property
    def total_completions(self) -> int:
        return sum(self.history.values())


@dataclass(frozen=True, slots=True)
class Habit:
    """Snapshot of a user's habit as supplied by the persistence layer."""

    id: str
    owner_id: str
    recurrence: Recurrence
    created_at: date
    ledger: Ledger = field(default_factory=Ledger)
    name: str = ""
    archived_on: Optional[date] = None

    @property
    def is_archived(self) -> bool:
        return self.archived_on is not None

    def is_active_on(self, day: date) -> bool:
        """True when the habit exists and is not archived on ``day``."""

        if day < self.created_at:
            return False
        return self.archived_on is None or day < self.archived_on

    def is_scheduled(self, day: date) -> bool:
        """Due check honouring creation and archive dates."""

        return self.is_active_on(day) and is_scheduled(self.recurrence, day, self.created_at)

    def with_ledger(self, ledger: Ledger) -> "Habit":
        return replace(self, ledger=ledger)

    def with_recurrence(self, recurrence: Recurrence) -> "Habit":
        """Replace the recurrence rule wholesale."""

        _check_recurrence(recurrence)
        return replace(self, recurrence=recurrence)

    def archive(self, on: DateLike) -> "Habit":
        """Soft-delete the habit from ``on`` onwards, keeping its ledger."""

        day = coerce_local_date(on)
        if day < self.created_at:
            raise InvalidDateError(f"Cannot archive before creation date {self.created_at}")
        if self.archived_on is not None:
            return self
        return replace(self, archived_on=day)


def _check_recurrence(recurrence: Recurrence) -> None:
    if not isinstance(recurrence, (Daily, WeeklyDays)):
        raise TypeError(f"Unknown recurrence rule: {recurrence!r}")


def create_habit(
    *,
    owner_id: str,
    recurrence: Recurrence,
    created_at: DateLike,
    name: str = "",
    habit_id: Optional[str] = None,
) -> Habit:
    """Create a new habit with an empty ledger."""

    _check_recurrence(recurrence)
    return Habit(
        id=habit_id or uuid.uuid4().hex,
        owner_id=owner_id,
        recurrence=recurrence,
        created_at=coerce_local_date(created_at),
        name=name.strip(),
    )


__all__ = ["Habit", "Ledger", "create_habit"]
