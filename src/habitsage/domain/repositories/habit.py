"""Habit repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ..habit import Habit


class HabitRepository(Protocol):
    """Loads and stores habit snapshots, ledger included."""

    def get(self, habit_id: str, *, owner_id: str) -> Optional[Habit]:
        """Retrieve a habit owned by ``owner_id``."""
        ...

    def list_for_owner(self, owner_id: str, *, include_archived: bool = False) -> list[Habit]:
        """List a user's habits, optionally including archived ones."""
        ...

    def add(self, habit: Habit) -> Habit:
        """Persist a newly created habit."""
        ...

    def save(self, habit: Habit) -> Habit:
        """Replace the stored state of an existing habit."""
        ...
