"""User-level progress counters driven by streak events."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from ..domain.habit import Habit
from .streaks import StreakEvent, replay_streak_events

XP_PER_COMPLETION = 10


def calculate_level(xp_points: int) -> int:
    """Level grows with the square root of XP: 1 at 0 XP, 2 at 100, 3 at 400."""

    return math.floor(1 + math.sqrt(max(xp_points, 0) / 100))


@dataclass(frozen=True, slots=True)
class UserStats:
    total_habits_completed: int = 0
    current_streak: int = 0
    xp_points: int = 0

    @property
    def level(self) -> int:
        return calculate_level(self.xp_points)


def apply_streak_event(stats: UserStats, event: Optional[StreakEvent]) -> UserStats:
    """Credit a completion that started or extended a streak.

    Resets and repeat completions of the same day earn nothing.
    """

    if event not in (StreakEvent.STARTED, StreakEvent.CONTINUED):
        return stats
    return replace(
        stats,
        total_habits_completed=stats.total_habits_completed + 1,
        current_streak=stats.current_streak + 1,
        xp_points=stats.xp_points + XP_PER_COMPLETION,
    )


def user_stats_from_habits(habits: Iterable[Habit]) -> UserStats:
    """Derive counters from the stored ledgers.

    Each habit's completed dates are replayed oldest first, so undoing a
    completion takes back whatever it earned.
    """

    stats = UserStats()
    for habit in habits:
        for event in replay_streak_events(habit.ledger.history, habit.recurrence, habit.created_at):
            stats = apply_streak_event(stats, event)
    return stats


__all__ = [
    "UserStats",
    "XP_PER_COMPLETION",
    "apply_streak_event",
    "calculate_level",
    "user_stats_from_habits",
]
