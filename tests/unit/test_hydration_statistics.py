"""Tests for weekly statistics and the goal streak."""
from datetime import date, timedelta

import pytest

from hydromate.hydration.statistics import (
    DaySummary,
    count_streak,
    streak_anchor,
    summarize_week,
    week_days,
    week_start,
)

MONDAY = date(2025, 1, 13)
WEDNESDAY = date(2025, 1, 15)


def _week(net_by_offset=None, goal: float = 2000):
    net_by_offset = net_by_offset or {}
    return [
        DaySummary(
            day=day,
            net_hydration=net_by_offset.get(i, 0),
            goal=goal,
            is_goal_reached=net_by_offset.get(i, 0) >= goal,
        )
        for i, day in enumerate(week_days(MONDAY))
    ]


class TestWeekBounds:
    @pytest.mark.parametrize("day", [MONDAY, WEDNESDAY, date(2025, 1, 19)])
    def test_week_start_is_monday(self, day):
        assert week_start(day) == MONDAY

    def test_week_days(self):
        days = week_days(MONDAY)
        assert len(days) == 7
        assert days[-1] == date(2025, 1, 19)


class TestSummarizeWeek:
    def test_totals(self):
        stats = summarize_week(_week({0: 2000, 1: 1500, 2: 2100}), current_streak=1)

        assert stats.week_start == MONDAY
        assert stats.week_end == date(2025, 1, 19)
        assert stats.total == 5600
        assert stats.average_daily == pytest.approx(800.0)
        assert stats.days_goal_reached == 2
        assert stats.current_streak == 1
        assert stats.weekly_goal == 14000
        assert stats.week_progress == pytest.approx(0.4)

    def test_progress_capped(self):
        stats = summarize_week(_week({i: 3000 for i in range(7)}))
        assert stats.week_progress == 1.0

    def test_empty_week(self):
        stats = summarize_week(_week())
        assert stats.total == 0
        assert stats.days_goal_reached == 0
        assert stats.week_progress == 0

    def test_rejects_partial_week(self):
        with pytest.raises(ValueError):
            summarize_week(_week()[:3])


class TestStreakAnchor:
    def test_today_not_reached_counts_from_yesterday(self):
        assert streak_anchor(_week(), WEDNESDAY) == date(2025, 1, 14)

    def test_today_reached_counts_today(self):
        assert streak_anchor(_week({2: 2000}), WEDNESDAY) == WEDNESDAY

    def test_past_week_uses_sunday(self):
        assert streak_anchor(_week(), date(2025, 1, 22)) == date(2025, 1, 19)

    def test_future_week(self):
        assert streak_anchor(_week(), date(2025, 1, 10)) is None

    def test_no_days(self):
        assert streak_anchor([], WEDNESDAY) is None


class TestCountStreak:
    def test_counts_back_until_a_miss(self):
        reached = {date(2025, 1, 14), date(2025, 1, 13), date(2025, 1, 11)}
        assert count_streak(lambda d: d in reached, date(2025, 1, 14)) == 2

    def test_crosses_week_boundary(self):
        reached = {date(2025, 1, 14) - timedelta(days=i) for i in range(10)}
        assert count_streak(lambda d: d in reached, date(2025, 1, 14)) == 10

    def test_anchor_missed(self):
        assert count_streak(lambda d: False, WEDNESDAY) == 0

    def test_no_anchor(self):
        assert count_streak(lambda d: True, None) == 0

    def test_limit(self):
        assert count_streak(lambda d: True, WEDNESDAY, limit=30) == 30
