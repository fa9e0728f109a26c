"""Pure domain values: dates, recurrence rules, habits and ledgers."""

from .dates import Clock, FixedClock, SystemClock, coerce_local_date, parse_local_date, to_date_key
from .habit import Habit, Ledger, create_habit
from .recurrence import Daily, Recurrence, WeeklyDays, is_scheduled, weekly

__all__ = [
    "Clock",
    "Daily",
    "FixedClock",
    "Habit",
    "Ledger",
    "Recurrence",
    "SystemClock",
    "WeeklyDays",
    "coerce_local_date",
    "create_habit",
    "is_scheduled",
    "parse_local_date",
    "to_date_key",
    "weekly",
]
