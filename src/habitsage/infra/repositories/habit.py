"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...domain.habit import Habit, Ledger
from ...domain.recurrence import Daily, Recurrence, WeeklyDays
from ...errors import NotFoundError
from ...models.habit import HabitEntry, HabitRecord


def _encode_recurrence(recurrence: Recurrence) -> tuple[str, str]:
    if isinstance(recurrence, WeeklyDays):
        return "weekly", ",".join(str(d) for d in sorted(recurrence.days))
    return "daily", ""


def _decode_recurrence(kind: str, days: str) -> Recurrence:
    if kind == "weekly":
        return WeeklyDays(frozenset(int(d) for d in days.split(",") if d.strip()))
    return Daily()


def _to_domain(record: HabitRecord, entries: list[HabitEntry]) -> Habit:
    ledger = Ledger(
        history={e.occurred_on: e.count for e in entries},
        streak=record.streak,
        last_completed=record.last_completed_on,
    )
    return Habit(
        id=record.id,
        owner_id=record.owner_id,
        recurrence=_decode_recurrence(record.recurrence_kind, record.recurrence_days),
        created_at=record.created_on,
        ledger=ledger,
        name=record.name,
        archived_on=record.archived_on,
    )


def _apply(record: HabitRecord, habit: Habit) -> None:
    record.owner_id = habit.owner_id
    record.name = habit.name
    record.recurrence_kind, record.recurrence_days = _encode_recurrence(habit.recurrence)
    record.created_on = habit.created_at
    record.archived_on = habit.archived_on
    record.streak = habit.ledger.streak
    record.last_completed_on = habit.ledger.last_completed


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def _entries(self, session: Session, habit_id: str) -> list[HabitEntry]:
        return list(
            session.exec(
                select(HabitEntry)
                .where(HabitEntry.habit_id == habit_id)
                .order_by(HabitEntry.occurred_on)  # type: ignore
            ).all()
        )

    def get(self, habit_id: str, *, owner_id: str) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            record = session.exec(
                select(HabitRecord).where(
                    HabitRecord.id == habit_id, HabitRecord.owner_id == owner_id
                )
            ).first()
            if record is None:
                return None
            return _to_domain(record, self._entries(session, habit_id))

    def list_for_owner(self, owner_id: str, *, include_archived: bool = False) -> list[Habit]:
        """List a user's habits, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(HabitRecord)
                .where(HabitRecord.owner_id == owner_id)
                .order_by(HabitRecord.created_on, HabitRecord.name)  # type: ignore
            )
            if not include_archived:
                statement = statement.where(HabitRecord.archived_on == None)  # noqa: E711
            records = list(session.exec(statement).all())
            return [_to_domain(r, self._entries(session, r.id)) for r in records]

    def add(self, habit: Habit) -> Habit:
        """Persist a newly created habit."""
        with self.session_factory() as session:
            record = HabitRecord(id=habit.id, owner_id=habit.owner_id, created_on=habit.created_at)
            _apply(record, habit)
            session.add(record)
            for day, count in habit.ledger.history.items():
                session.add(HabitEntry(habit_id=habit.id, occurred_on=day, count=count))
            session.commit()
            return habit

    def save(self, habit: Habit) -> Habit:
        """Write the habit fields and sync its entries with the ledger history."""
        with self.session_factory() as session:
            record = session.get(HabitRecord, habit.id)
            if record is None or record.owner_id != habit.owner_id:
                raise NotFoundError(f"Habit {habit.id} not found")
            _apply(record, habit)
            session.add(record)

            stored = {e.occurred_on: e for e in self._entries(session, habit.id)}
            for day, entry in stored.items():
                if day not in habit.ledger.history:
                    session.delete(entry)
            for day, count in habit.ledger.history.items():
                entry = stored.get(day)
                if entry is None:
                    session.add(HabitEntry(habit_id=habit.id, occurred_on=day, count=count))
                elif entry.count != count:
                    entry.count = count
                    session.add(entry)
            session.commit()
            return habit
