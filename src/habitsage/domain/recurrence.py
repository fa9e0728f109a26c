"""Recurrence rules and the scheduling check."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional, Union

from ..errors import InvalidRecurrenceError
from .dates import day_of_week

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass(frozen=True, slots=True)
class Daily:
    """Due every calendar day."""

    kind: str = field(default="daily", init=False)

    def describe(self) -> str:
        return "Every day"


@dataclass(frozen=True, slots=True)
class WeeklyDays:
    """Due on a fixed set of weekdays (0 = Sunday ... 6 = Saturday)."""

    days: frozenset[int]
    kind: str = field(default="weekly", init=False)

    def __post_init__(self) -> None:
        try:
            days = frozenset(self.days)
        except TypeError as exc:
            raise InvalidRecurrenceError(f"Weekdays must be iterable, got {self.days!r}") from exc
        if not days:
            raise InvalidRecurrenceError("Weekly recurrence needs at least one weekday")
        for value in days:
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 6:
                raise InvalidRecurrenceError(f"Weekday out of range 0..6: {value!r}")
        object.__setattr__(self, "days", days)

    def describe(self) -> str:
        names = ", ".join(WEEKDAY_NAMES[d] for d in sorted(self.days))
        return f"{len(self.days)} days a week ({names})"


Recurrence = Union[Daily, WeeklyDays]


def weekly(days: Iterable[int]) -> WeeklyDays:
    """Shorthand for ``WeeklyDays(frozenset(days))``."""

    return WeeklyDays(frozenset(days))


def is_scheduled(recurrence: Recurrence, day: date, created_at: Optional[date] = None) -> bool:
    """Return True when a habit with ``recurrence`` is due on ``day``.

    Dates before ``created_at`` are never scheduled.
    """

    if created_at is not None and day < created_at:
        return False
    if isinstance(recurrence, Daily):
        return True
    if isinstance(recurrence, WeeklyDays):
        return day_of_week(day) in recurrence.days
    raise TypeError(f"Unknown recurrence rule: {recurrence!r}")


def recurrence_to_dict(recurrence: Recurrence) -> dict[str, Any]:
    """Serialize a rule into the ``{"type": ..., "days": [...]}`` frequency shape."""

    if isinstance(recurrence, Daily):
        return {"type": "daily"}
    if isinstance(recurrence, WeeklyDays):
        return {"type": "weekly", "days": sorted(recurrence.days)}
    raise TypeError(f"Unknown recurrence rule: {recurrence!r}")


def recurrence_from_dict(data: dict[str, Any]) -> Recurrence:
    """Build a rule from a frequency mapping.

    ``custom`` frequencies carry a weekday list just like ``weekly`` ones and
    map onto :class:`WeeklyDays`.
    """

    kind = str(data.get("type", "")).strip().lower()
    if kind == "daily":
        return Daily()
    if kind in {"weekly", "custom"}:
        return WeeklyDays(frozenset(data.get("days") or ()))
    raise InvalidRecurrenceError(f"Unknown frequency type: {data.get('type')!r}")


__all__ = [
    "Daily",
    "Recurrence",
    "WeeklyDays",
    "is_scheduled",
    "recurrence_from_dict",
    "recurrence_to_dict",
    "weekly",
]
