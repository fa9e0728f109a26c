"""HabitSage habit scheduling, streak and statistics engine."""

from __future__ import annotations

from .config import BaseConfig, DevConfig
from .domain.habit import Habit, Ledger, create_habit
from .domain.recurrence import Daily, WeeklyDays, is_scheduled
from .errors import HabitSageError, InvalidDateError, InvalidRecurrenceError, NotFoundError
from .services.ledger import record_completion, remove_completion
from .services.stats import StatsPoint, build_time_series
from .services.streaks import StreakEvent

__all__ = [
    "BaseConfig",
    "Daily",
    "DevConfig",
    "Habit",
    "HabitSageError",
    "InvalidDateError",
    "InvalidRecurrenceError",
    "Ledger",
    "NotFoundError",
    "StatsPoint",
    "StreakEvent",
    "WeeklyDays",
    "build_time_series",
    "create_habit",
    "is_scheduled",
    "record_completion",
    "remove_completion",
]
