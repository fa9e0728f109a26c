"""Tests for recurrence rules, local dates and the scheduling check."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from habitsage.domain.dates import (
    FixedClock,
    SystemClock,
    coerce_local_date,
    day_of_week,
    iter_days,
    parse_local_date,
    to_date_key,
)
from habitsage.domain.habit import create_habit
from habitsage.domain.recurrence import (
    Daily,
    WeeklyDays,
    is_scheduled,
    recurrence_from_dict,
    recurrence_to_dict,
    weekly,
)
from habitsage.errors import InvalidDateError, InvalidRecurrenceError

MONDAY = date(2024, 1, 1)
SUNDAY = date(2024, 1, 7)


class TestLocalDates:
    def test_parse_and_format_round_trip(self):
        assert parse_local_date("2024-02-29") == date(2024, 2, 29)
        assert to_date_key(date(2024, 3, 5)) == "2024-03-05"

    @pytest.mark.parametrize("value", ["2024-02-30", "24-1-1", "", "yesterday"])
    def test_malformed_strings_rejected(self, value):
        with pytest.raises(InvalidDateError):
            parse_local_date(value)

    def test_timestamps_are_not_local_dates(self):
        """A datetime must go through a clock before it becomes a calendar day."""
        with pytest.raises(InvalidDateError):
            coerce_local_date(datetime(2024, 1, 1, 23, 30))

    def test_sunday_is_day_zero(self):
        assert day_of_week(SUNDAY) == 0
        assert day_of_week(MONDAY) == 1
        assert day_of_week(date(2024, 1, 6)) == 6

    def test_iter_days_is_inclusive(self):
        days = list(iter_days(MONDAY, SUNDAY))
        assert len(days) == 7
        assert days[0] == MONDAY and days[-1] == SUNDAY

    def test_fixed_clock_advances(self):
        clock = FixedClock("2024-01-31")
        assert clock.advance() == date(2024, 2, 1)
        assert clock.today() == date(2024, 2, 1)

    def test_system_clock_returns_plain_date(self):
        today = SystemClock("UTC").today()
        assert type(today) is date

    def test_system_clock_rejects_unknown_zone(self):
        with pytest.raises(ValueError):
            SystemClock("Mars/Olympus_Mons")


class TestRecurrenceConstruction:
    def test_empty_weekdays_rejected(self):
        with pytest.raises(InvalidRecurrenceError):
            WeeklyDays(frozenset())

    @pytest.mark.parametrize("days", [{7}, {-1}, {1, 9}, {True}, {"1"}])
    def test_out_of_range_weekdays_rejected(self, days):
        with pytest.raises(InvalidRecurrenceError):
            weekly(days)

    def test_weekdays_are_frozen(self):
        rule = WeeklyDays([1, 3, 5])
        assert rule.days == frozenset({1, 3, 5})
        assert rule == weekly({5, 3, 1})

    def test_frequency_mapping_round_trip(self):
        assert recurrence_from_dict({"type": "daily"}) == Daily()
        assert recurrence_to_dict(weekly({5, 1})) == {"type": "weekly", "days": [1, 5]}
        assert recurrence_from_dict({"type": "custom", "days": [0, 6]}) == weekly({0, 6})

    def test_unknown_frequency_type_rejected(self):
        with pytest.raises(InvalidRecurrenceError):
            recurrence_from_dict({"type": "monthly"})

    def test_describe(self):
        assert Daily().describe() == "Every day"
        assert weekly({1, 3, 5}).describe() == "3 days a week (Mon, Wed, Fri)"


class TestIsScheduled:
    def test_daily_is_always_due(self):
        for day in iter_days(MONDAY, date(2024, 1, 31)):
            assert is_scheduled(Daily(), day)

    def test_weekly_matches_only_listed_days(self):
        rule = weekly({1, 3, 5})
        due = [d for d in iter_days(MONDAY, SUNDAY) if is_scheduled(rule, d)]
        assert due == [date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5)]

    def test_nothing_due_before_creation(self):
        assert not is_scheduled(Daily(), date(2023, 12, 31), created_at=MONDAY)
        assert is_scheduled(Daily(), MONDAY, created_at=MONDAY)
        assert not is_scheduled(weekly({0}), date(2023, 12, 31), created_at=MONDAY)

    def test_repeated_calls_agree(self):
        rule = weekly({2, 4})
        for day in iter_days(MONDAY, SUNDAY):
            assert is_scheduled(rule, day) == is_scheduled(rule, day)


class TestHabitLifecycle:
    def test_create_habit_starts_with_empty_ledger(self):
        habit = create_habit(owner_id="u1", recurrence=Daily(), created_at="2024-01-01", name=" Read ")
        assert habit.created_at == MONDAY
        assert habit.name == "Read"
        assert habit.ledger.streak == 0
        assert habit.ledger.last_completed is None
        assert dict(habit.ledger.history) == {}

    def test_recurrence_replaced_wholesale(self, habit_factory):
        habit = habit_factory(recurrence=weekly({1, 3}))
        edited = habit.with_recurrence(Daily())
        assert edited.recurrence == Daily()
        assert habit.recurrence == weekly({1, 3})

    def test_out_of_range_weekday_rejected_at_edit(self, habit_factory):
        habit = habit_factory(recurrence=weekly({1, 3}))
        for days in ({7}, {-1, 2}, {1, 3, 9}):
            with pytest.raises(InvalidRecurrenceError):
                habit.with_recurrence(weekly(days))
        assert habit.recurrence == weekly({1, 3})

    def test_edit_rejects_non_rule(self, habit_factory):
        with pytest.raises(TypeError):
            habit_factory().with_recurrence({"type": "daily"})

    def test_archived_habit_not_scheduled_from_archive_date(self, habit_factory):
        habit = habit_factory().archive(date(2024, 1, 5))
        assert habit.is_scheduled(date(2024, 1, 4))
        assert not habit.is_scheduled(date(2024, 1, 5))
        assert not habit.is_scheduled(date(2024, 2, 1))

    def test_archive_before_creation_rejected(self, habit_factory):
        with pytest.raises(InvalidDateError):
            habit_factory().archive(date(2023, 12, 1))

    def test_archive_keeps_first_archive_date(self, habit_factory):
        habit = habit_factory().archive(date(2024, 1, 5)).archive(date(2024, 1, 9))
        assert habit.archived_on == date(2024, 1, 5)
