"""Completion ledger operations.

Both operations take a ledger value and return a new one; nothing is
persisted here.
"""

from __future__ import annotations

from typing import Optional

from ..domain.dates import DateLike, coerce_local_date
from ..domain.habit import Ledger
from ..domain.recurrence import Recurrence, is_scheduled
from ..errors import InvalidDateError, NotFoundError
from ..logging_config import get_logger
from .streaks import StreakEvent, advance_streak, rebuild_streak

logger = get_logger("services.ledger")


def record_completion(
    ledger: Ledger,
    recurrence: Recurrence,
    habit_created_at: DateLike,
    day: DateLike,
    increment_by: int = 1,
) -> tuple[Ledger, Optional[StreakEvent]]:
    """Record ``increment_by`` completions on ``day``.

    A repeat completion on an already-completed date only bumps the count.
    The first completion of a date runs the streak state machine and returns
    its event.
    """

    created_at = coerce_local_date(habit_created_at)
    on = coerce_local_date(day)
    if on < created_at:
        raise InvalidDateError(f"{on} is before the habit was created ({created_at})")
    if increment_by < 1:
        raise ValueError("increment_by must be at least 1")

    history = dict(ledger.history)
    existing = history.get(on, 0)
    if existing > 0:
        history[on] = existing + increment_by
        return Ledger(history, ledger.streak, ledger.last_completed), None

    if not is_scheduled(recurrence, on, created_at):
        logger.warning("Completion recorded on an unscheduled day", extra={"day": on})

    history[on] = increment_by
    streak, last_completed, event = advance_streak(
        streak=ledger.streak,
        last_completed=ledger.last_completed,
        recurrence=recurrence,
        created_at=created_at,
        day=on,
    )
    return Ledger(history, streak, last_completed), event


def remove_completion(
    ledger: Ledger,
    recurrence: Recurrence,
    habit_created_at: DateLike,
    day: DateLike,
) -> Ledger:
    """Delete the entry for ``day`` and rebuild the streak from what remains.

    Meant for undoing the latest completion; the rebuild walks back from the
    most recent remaining completed date.
    """

    created_at = coerce_local_date(habit_created_at)
    on = coerce_local_date(day)
    if on not in ledger.history:
        raise NotFoundError(f"No completion recorded on {on}")

    history = dict(ledger.history)
    del history[on]
    if ledger.last_completed is not None and on != ledger.last_completed:
        logger.info(
            "Removing a completion that is not the streak tail",
            extra={"day": on, "last_completed": ledger.last_completed},
        )
    streak, last_completed = rebuild_streak(history, recurrence, created_at)
    return Ledger(history, streak, last_completed)


__all__ = ["record_completion", "remove_completion"]
