"""SQLModel table exports."""

from .habit import HabitEntry, HabitRecord

__all__ = ["HabitEntry", "HabitRecord"]
