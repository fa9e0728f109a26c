"""Habit persistence tables."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


class HabitRecord(SQLModel, table=True):
    """Stored habit definition plus its derived streak fields."""

    __tablename__: ClassVar[str] = "habit"

    id: str = Field(primary_key=True, max_length=64)
    owner_id: str = Field(nullable=False, index=True, max_length=64)
    name: str = Field(default="", max_length=80)
    recurrence_kind: str = Field(default="daily", max_length=16)
    # Comma separated weekdays, Sunday = 0; empty for daily habits.
    recurrence_days: str = Field(default="", max_length=16)
    created_on: date = Field(nullable=False)
    archived_on: Optional[date] = Field(default=None)
    streak: int = Field(default=0, nullable=False)
    last_completed_on: Optional[date] = Field(default=None)

    entries: list["HabitEntry"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "HabitEntry", back_populates="habit", cascade="all, delete-orphan"
        ),
    )


class HabitEntry(SQLModel, table=True):
    """Completion count for a habit on one calendar day."""

    __tablename__: ClassVar[str] = "habit_entry"

    habit_id: str = Field(foreign_key="habit.id", primary_key=True, max_length=64)
    occurred_on: date = Field(primary_key=True, index=True)
    count: int = Field(default=1, nullable=False)

    habit: "HabitRecord" = Relationship(
        back_populates="entries",
        sa_relationship=relationship("HabitRecord", back_populates="entries"),
    )
