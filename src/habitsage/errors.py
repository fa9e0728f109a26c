"""Error types raised by the habit engine."""

from __future__ import annotations


class HabitSageError(Exception):
    """Base class for engine errors."""


class InvalidDateError(HabitSageError, ValueError):
    """A date precedes the habit's creation date or is not a valid local date."""


class NotFoundError(HabitSageError, LookupError):
    """The requested completion entry or habit does not exist."""


class InvalidRecurrenceError(HabitSageError, ValueError):
    """A recurrence rule has an empty or out-of-range set of weekdays."""


__all__ = [
    "HabitSageError",
    "InvalidDateError",
    "InvalidRecurrenceError",
    "NotFoundError",
]
