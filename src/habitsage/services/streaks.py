"""Streak state machine for habit completions.

A streak counts consecutive *scheduled occurrences* with at least one
completion, so a weekday-only habit is not broken by the weekend between
Friday and Monday.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from typing import Mapping, Optional

from ..domain.recurrence import Recurrence, is_scheduled
from ..logging_config import get_logger

logger = get_logger("services.streaks")

# WeeklyDays always has a hit within a week; Daily within a day.
MAX_LOOKBACK_DAYS = 7


class StreakEvent(str, Enum):
    """Outcome of a first completion on a new date."""

    STARTED = "started"
    CONTINUED = "continued"
    RESET = "reset"


def previous_scheduled_date(
    recurrence: Recurrence, created_at: date, day: date
) -> Optional[date]:
    """Return the latest scheduled date strictly before ``day``.

    Returns None when the walk passes ``created_at`` without finding one.
    """

    cursor = day - timedelta(days=1)
    for _ in range(MAX_LOOKBACK_DAYS):
        if cursor < created_at:
            return None
        if is_scheduled(recurrence, cursor, created_at):
            return cursor
        cursor -= timedelta(days=1)
    return None


def advance_streak(
    *,
    streak: int,
    last_completed: Optional[date],
    recurrence: Recurrence,
    created_at: date,
    day: date,
) -> tuple[int, Optional[date], Optional[StreakEvent]]:
    """Apply a first-completion-of-the-day on ``day``.

    Returns ``(streak, last_completed, event)``.
    """

    if last_completed is None:
        return 1, day, StreakEvent.STARTED
    if day == last_completed:
        return streak, last_completed, None

    prev = previous_scheduled_date(recurrence, created_at, day)
    if day > last_completed and prev == last_completed:
        logger.debug("Streak continued", extra={"day": day, "streak": streak + 1})
        return streak + 1, day, StreakEvent.CONTINUED

    logger.debug(
        "Streak reset",
        extra={"day": day, "last_completed": last_completed, "previous_scheduled": prev},
    )
    return 1, day, StreakEvent.RESET


def rebuild_streak(
    history: Mapping[date, int], recurrence: Recurrence, created_at: date
) -> tuple[int, Optional[date]]:
    """Recompute ``(streak, last_completed)`` from history alone.

    Anchors at the latest completed date and walks back one scheduled
    occurrence at a time while each one has a completion.
    """

    completed = [day for day, count in history.items() if count > 0]
    if not completed:
        return 0, None

    tail = max(completed)
    streak = 1
    cursor = tail
    while True:
        prev = previous_scheduled_date(recurrence, created_at, cursor)
        if prev is None or history.get(prev, 0) <= 0:
            break
        streak += 1
        cursor = prev
    return streak, tail


def longest_streak(
    history: Mapping[date, int], recurrence: Recurrence, created_at: date
) -> int:
    """Return the longest run of consecutive scheduled occurrences completed."""

    longest = 0
    run = 0
    last_day: Optional[date] = None
    for day in sorted(d for d, count in history.items() if count > 0):
        if last_day is not None and previous_scheduled_date(recurrence, created_at, day) == last_day:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        last_day = day
    return longest


def replay_streak_events(
    history: Mapping[date, int], recurrence: Recurrence, created_at: date
) -> list[StreakEvent]:
    """Replay the completed dates of ``history`` in order through the state machine.

    Returns the event of each first completion, oldest first.
    """

    streak, last = 0, None
    events: list[StreakEvent] = []
    for day in sorted(d for d, count in history.items() if count > 0):
        streak, last, event = advance_streak(
            streak=streak,
            last_completed=last,
            recurrence=recurrence,
            created_at=created_at,
            day=day,
        )
        events.append(event)
    return events


__all__ = [
    "MAX_LOOKBACK_DAYS",
    "StreakEvent",
    "advance_streak",
    "longest_streak",
    "previous_scheduled_date",
    "rebuild_streak",
    "replay_streak_events",
]
