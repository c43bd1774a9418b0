"""
Weekly hydration statistics and the goal streak.

A week runs Monday to Sunday. The streak counts consecutive days whose
goal was reached, walking back from the reference day: today for the
current week, the last day for a past week. Today only counts once its
goal is reached; until then the streak runs up to yesterday, so an
ongoing day never breaks it.

Everything here is a pure function of its inputs.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence

DAYS_PER_WEEK = 7

# Upper bound on how far back a streak is followed
MAX_STREAK_DAYS = 366


@dataclass(frozen=True)
class DaySummary:
    day: date
    net_hydration: float
    goal: float
    is_goal_reached: bool


@dataclass(frozen=True)
class WeeklyStatistics:
    week_start: date
    week_end: date
    days: List[DaySummary]
    total: float
    average_daily: float
    days_goal_reached: int
    current_streak: int

    @property
    def weekly_goal(self) -> float:
        return sum(d.goal for d in self.days)

    @property
    def week_progress(self) -> float:
        """Share of the weekly goal covered, capped at 1.0."""
        if self.weekly_goal <= 0:
            return 0.0
        return min(self.total / self.weekly_goal, 1.0)


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def week_days(start: date) -> List[date]:
    return [start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def streak_anchor(days: Sequence[DaySummary], today: date) -> Optional[date]:
    """
    Latest day the streak may start counting from.

    Returns None when the week lies entirely after today.
    """
    if not days:
        return None
    first, last = days[0].day, days[-1].day
    ref = min(today, last)
    if ref < first:
        return None

    ref_summary = next(d for d in days if d.day == ref)
    if ref == today and not ref_summary.is_goal_reached:
        return ref - timedelta(days=1)
    return ref


def count_streak(
    goal_reached_on: Callable[[date], bool],
    anchor: Optional[date],
    limit: int = MAX_STREAK_DAYS,
) -> int:
    """
    Consecutive days, from anchor backwards, whose goal was reached.

    Args:
        goal_reached_on: whether the goal was reached on a day.
        anchor: first day to check (see streak_anchor); None gives 0.
        limit: stop after this many days.
    """
    if anchor is None:
        return 0
    streak = 0
    day = anchor
    while streak < limit and goal_reached_on(day):
        streak += 1
        day -= timedelta(days=1)
    return streak


def summarize_week(days: Sequence[DaySummary], current_streak: int = 0) -> WeeklyStatistics:
    """
    Totals over one week of daily summaries, oldest first.

    Raises:
        ValueError: days is not exactly one week.
    """
    if len(days) != DAYS_PER_WEEK:
        raise ValueError(f"expected {DAYS_PER_WEEK} days, got {len(days)}")

    total = sum(d.net_hydration for d in days)
    return WeeklyStatistics(
        week_start=days[0].day,
        week_end=days[-1].day,
        days=list(days),
        total=total,
        average_daily=total / DAYS_PER_WEEK,
        days_goal_reached=sum(1 for d in days if d.is_goal_reached),
        current_streak=current_streak,
    )
