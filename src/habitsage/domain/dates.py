"""Local calendar date helpers and the clock collaborator.

Every date the engine handles is a ``datetime.date`` holding only year, month
and day. Timestamps are never accepted directly: callers go through a
:class:`Clock` that normalizes "now" into a local date for one explicit
timezone.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator, Protocol, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import InvalidDateError

LocalDate = date
DateLike = Union[date, str]

DATE_KEY_FORMAT = "%Y-%m-%d"


def parse_local_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a local date."""

    try:
        return datetime.strptime(value.strip(), DATE_KEY_FORMAT).date()
    except (AttributeError, ValueError) as exc:
        raise InvalidDateError(f"Not a local date string: {value!r}") from exc


def coerce_local_date(value: DateLike) -> date:
    """Return ``value`` as a plain ``date``.

    Strings are parsed, dates pass through. ``datetime`` instances are rejected
    because turning one into a calendar day needs a timezone decision the
    caller has to make explicitly.
    """

    if isinstance(value, datetime):
        raise InvalidDateError(
            "Expected a local date, got a timestamp; normalize it through a Clock first"
        )
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_local_date(value)
    raise InvalidDateError(f"Unsupported date value: {value!r}")


def to_date_key(value: date) -> str:
    """Format a local date as its canonical ``YYYY-MM-DD`` key."""

    return value.strftime(DATE_KEY_FORMAT)


def day_of_week(value: date) -> int:
    """Return the weekday with Sunday as 0 and Saturday as 6."""

    return value.isoweekday() % 7


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` through ``end`` inclusive."""

    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


class Clock(Protocol):
    """Supplies the current local date."""

    def today(self) -> date:  # pragma: no cover - interface
        ...


class SystemClock:
    """Clock reading the wall time in a fixed IANA timezone."""

    def __init__(self, timezone: str = "UTC") -> None:
        try:
            self.tz = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {timezone!r}") from exc

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock:
    """Clock pinned to a given date (tests, backfills)."""

    def __init__(self, current: DateLike) -> None:
        self.current = coerce_local_date(current)

    def today(self) -> date:
        return self.current

    def advance(self, days: int = 1) -> date:
        self.current = self.current + timedelta(days=days)
        return self.current


__all__ = [
    "Clock",
    "DateLike",
    "FixedClock",
    "LocalDate",
    "SystemClock",
    "coerce_local_date",
    "day_of_week",
    "iter_days",
    "parse_local_date",
    "to_date_key",
]
