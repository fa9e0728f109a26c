"""Tests for XP and level bookkeeping."""

from __future__ import annotations

from datetime import date

import pytest

from habitsage.domain.recurrence import weekly
from habitsage.services.progress import (
    UserStats,
    XP_PER_COMPLETION,
    apply_streak_event,
    calculate_level,
    user_stats_from_habits,
)
from habitsage.services.streaks import StreakEvent


@pytest.mark.parametrize("xp, level", [(0, 1), (99, 1), (100, 2), (399, 2), (400, 3), (900, 4)])
def test_calculate_level(xp, level):
    assert calculate_level(xp) == level


@pytest.mark.parametrize("event", [StreakEvent.STARTED, StreakEvent.CONTINUED])
def test_streak_growth_earns_xp(event):
    stats = apply_streak_event(UserStats(), event)
    assert stats.total_habits_completed == 1
    assert stats.current_streak == 1
    assert stats.xp_points == XP_PER_COMPLETION


@pytest.mark.parametrize("event", [StreakEvent.RESET, None])
def test_reset_and_repeat_earn_nothing(event):
    stats = UserStats(total_habits_completed=3, current_streak=2, xp_points=30)
    assert apply_streak_event(stats, event) == stats


def test_level_follows_xp():
    stats = UserStats()
    for _ in range(10):
        stats = apply_streak_event(stats, StreakEvent.CONTINUED)
    assert stats.xp_points == 100
    assert stats.level == 2


def test_stats_replayed_from_ledgers(habit_factory):
    mwf = habit_factory(weekly({1, 3, 5}), completed=[date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 8)])
    archived = habit_factory(completed=[date(2024, 1, 1)], archived_on=date(2024, 1, 2))
    # Mon, Wed, then a missed Friday: started, continued, reset.
    stats = user_stats_from_habits([mwf, archived])
    assert stats.total_habits_completed == 3
    assert stats.xp_points == 3 * XP_PER_COMPLETION


def test_no_habits_means_empty_stats():
    assert user_stats_from_habits([]) == UserStats()
