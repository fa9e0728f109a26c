"""Completion statistics across a user's habits.

Everything here is read-only: habits go in, fresh report values come out, so
concurrent or overlapping calls need no coordination.
"""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Hashable, Iterable, Optional, Sequence

from ..domain.dates import DateLike, coerce_local_date, iter_days
from ..domain.habit import Habit
from ..errors import InvalidDateError
from .streaks import longest_streak

TIMEFRAMES = ("week", "month", "year")


@dataclass(frozen=True, slots=True)
class StatsPoint:
    """Completion figures for one calendar day."""

    date: date
    scheduled_count: int
    completed_count: int

    @property
    def completion_rate(self) -> float:
        if self.scheduled_count == 0:
            return 0.0
        return self.completed_count / self.scheduled_count


@dataclass(frozen=True, slots=True)
class StatsBucket:
    """A week or month of daily points reduced to one value."""

    start: date
    end: date
    days: int
    completed_count: int
    completion_rate: float


@dataclass(frozen=True, slots=True)
class DayRate:
    """Completion rate of a single day."""

    date: date
    rate: float


@dataclass(frozen=True, slots=True)
class StatsSummary:
    """Headline numbers for a stats window."""

    average_completion: float
    best_day: Optional[DayRate]
    worst_day: Optional[DayRate]
    total_completed: int


def _check_range(start: DateLike, end: DateLike) -> tuple[date, date]:
    first = coerce_local_date(start)
    last = coerce_local_date(end)
    if first > last:
        raise InvalidDateError(f"Range start {first} is after end {last}")
    return first, last


def build_time_series(habits: Iterable[Habit], start: DateLike, end: DateLike) -> list[StatsPoint]:
    """Return one :class:`StatsPoint` per day from ``start`` to ``end`` inclusive."""

    first, last = _check_range(start, end)
    habit_list = list(habits)
    points: list[StatsPoint] = []
    for day in iter_days(first, last):
        scheduled = [h for h in habit_list if h.is_scheduled(day)]
        completed = sum(1 for h in scheduled if h.ledger.is_completed(day))
        points.append(StatsPoint(date=day, scheduled_count=len(scheduled), completed_count=completed))
    return points


def _group(points: Sequence[StatsPoint], key: Callable[[date], Hashable]) -> list[StatsBucket]:
    buckets: list[StatsBucket] = []
    current: list[StatsPoint] = []
    current_key: Hashable = None

    def flush() -> None:
        if not current:
            return
        rates = [p.completion_rate for p in current]
        buckets.append(
            StatsBucket(
                start=current[0].date,
                end=current[-1].date,
                days=len(current),
                completed_count=sum(p.completed_count for p in current),
                # Unweighted mean of daily rates, not completed/scheduled totals.
                completion_rate=sum(rates) / len(rates),
            )
        )

    for point in sorted(points, key=lambda p: p.date):
        point_key = key(point.date)
        if current and point_key != current_key:
            flush()
            current = []
        current.append(point)
        current_key = point_key
    flush()
    return buckets


def group_by_week(points: Sequence[StatsPoint]) -> list[StatsBucket]:
    """Bucket daily points by ISO week."""

    return _group(points, lambda d: d.isocalendar()[:2])


def group_by_month(points: Sequence[StatsPoint]) -> list[StatsBucket]:
    """Bucket daily points by calendar month."""

    return _group(points, lambda d: (d.year, d.month))


def summarize(points: Sequence[StatsPoint]) -> StatsSummary:
    """Average rate, best and worst day, and total completions.

    The best day is the first day with the highest non-zero rate; the worst day
    only considers days where something was scheduled.
    """

    if not points:
        return StatsSummary(average_completion=0.0, best_day=None, worst_day=None, total_completed=0)

    best: Optional[DayRate] = None
    worst: Optional[DayRate] = None
    for point in points:
        rate = point.completion_rate
        if rate > 0 and (best is None or rate > best.rate):
            best = DayRate(point.date, rate)
        if point.scheduled_count > 0 and (worst is None or rate < worst.rate):
            worst = DayRate(point.date, rate)

    return StatsSummary(
        average_completion=sum(p.completion_rate for p in points) / len(points),
        best_day=best,
        worst_day=worst,
        total_completed=sum(p.completed_count for p in points),
    )


def habit_completion_rate(habit: Habit, start: DateLike, end: DateLike) -> float:
    """Share of ``habit``'s scheduled days in the range that were completed."""

    first, last = _check_range(start, end)
    scheduled = 0
    completed = 0
    for day in iter_days(first, last):
        if not habit.is_scheduled(day):
            continue
        scheduled += 1
        if habit.ledger.is_completed(day):
            completed += 1
    return completed / scheduled if scheduled else 0.0


def month_completion_rate(habit: Habit, year: int, month: int) -> float:
    """Completion rate of ``habit`` over one calendar month."""

    last_day = monthrange(year, month)[1]
    return habit_completion_rate(habit, date(year, month, 1), date(year, month, last_day))


def top_streaks(habits: Iterable[Habit], limit: int = 5) -> list[Habit]:
    """Active habits with a running streak, longest first."""

    running = [h for h in habits if not h.is_archived and h.ledger.streak > 0]
    running.sort(key=lambda h: h.ledger.streak, reverse=True)
    return running[:limit]


def best_streak(habit: Habit) -> int:
    """Longest streak the habit has ever reached."""

    return longest_streak(habit.ledger.history, habit.recurrence, habit.created_at)


def due_habits(habits: Iterable[Habit], day: DateLike) -> list[Habit]:
    """Habits due on ``day``."""

    on = coerce_local_date(day)
    return [h for h in habits if h.is_scheduled(on)]


def _months_back(value: date, months: int) -> date:
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    return value.replace(year=year, month=month, day=min(value.day, monthrange(year, month)[1]))


def timeframe_window(today: DateLike, timeframe: str = "week") -> tuple[date, date]:
    """Return the inclusive ``(start, end)`` look-back window ending ``today``."""

    end = coerce_local_date(today)
    if timeframe == "week":
        return end - timedelta(days=7), end
    if timeframe == "month":
        return _months_back(end, 1), end
    if timeframe == "year":
        return _months_back(end, 12), end
    raise ValueError(f"Unknown timeframe {timeframe!r}; expected one of {', '.join(TIMEFRAMES)}")


__all__ = [
    "DayRate",
    "StatsBucket",
    "StatsPoint",
    "StatsSummary",
    "TIMEFRAMES",
    "best_streak",
    "build_time_series",
    "due_habits",
    "group_by_month",
    "group_by_week",
    "habit_completion_rate",
    "month_completion_rate",
    "summarize",
    "timeframe_window",
    "top_streaks",
]
