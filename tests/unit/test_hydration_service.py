"""Tests for the daily hydration service."""
from datetime import date, datetime
from unittest.mock import patch

import pytest

from hydromate.hydration.calculator import PenaltyPolicy
from hydromate.hydration.service import daily_hydration, penalty_policy, weekly_statistics
from hydromate.reminders.settings import UserSettings
from hydromate.tracking.repository import DrinkRepository, EntryRepository

DAY = date(2025, 1, 15)


def _log(engine, drink_name: str, amount_ml: int, hour: int = 9, day: date = DAY):
    drink = DrinkRepository(engine).find_by_name(drink_name)
    EntryRepository(engine).add(amount_ml, drink_id=drink.id, timestamp=datetime(day.year, day.month, day.day, hour))


class TestPenaltyPolicy:
    def test_from_config(self):
        with patch("hydromate.hydration.service.get_settings") as mock_settings:
            mock_settings.return_value.caffeine_penalty_fraction = 0.1
            mock_settings.return_value.alcohol_penalty_fraction = 0.2
            mock_settings.return_value.combined_penalty_policy = "max"
            policy = penalty_policy()

        assert policy == PenaltyPolicy(caffeine_fraction=0.1, alcohol_fraction=0.2, combine="max")


class TestDailyHydration:
    def test_empty_day(self, seeded_engine):
        result = daily_hydration(seeded_engine, UserSettings(), DAY, policy=PenaltyPolicy())
        assert result.entry_count == 0
        assert result.totals.net_hydration == 0
        assert result.progress.percentage == 0

    def test_water_only(self, seeded_engine):
        _log(seeded_engine, "Water", 500)
        _log(seeded_engine, "Water", 500, hour=12)

        result = daily_hydration(seeded_engine, UserSettings(), DAY, policy=PenaltyPolicy())

        assert result.entry_count == 2
        assert result.totals.net_hydration == pytest.approx(1000.0)
        assert result.progress.percentage == pytest.approx(50.0)

    def test_coffee_penalty(self, seeded_engine):
        _log(seeded_engine, "Coffee", 1000)

        result = daily_hydration(seeded_engine, UserSettings(), DAY, policy=PenaltyPolicy())

        assert result.totals.total_effective == pytest.approx(600.0)
        assert result.totals.total_dehydration == pytest.approx(50.0)
        assert result.totals.net_hydration == pytest.approx(550.0)

    def test_other_days_ignored(self, seeded_engine):
        _log(seeded_engine, "Water", 800, day=date(2025, 1, 14))
        result = daily_hydration(seeded_engine, UserSettings(), DAY, policy=PenaltyPolicy())
        assert result.entry_count == 0

    def test_threshold_applies(self, seeded_engine):
        _log(seeded_engine, "Water", 1800)
        result = daily_hydration(
            seeded_engine, UserSettings(goal_threshold=0.9), DAY, policy=PenaltyPolicy()
        )
        assert result.progress.is_goal_reached


class TestWeeklyStatistics:
    def test_week_totals_and_streak(self, seeded_engine):
        # Mon-Tue reached, Wed (today) in progress
        _log(seeded_engine, "Water", 2000, day=date(2025, 1, 13))
        _log(seeded_engine, "Water", 2000, day=date(2025, 1, 14))
        _log(seeded_engine, "Water", 500, day=DAY)

        stats = weekly_statistics(
            seeded_engine, UserSettings(), date(2025, 1, 13), DAY, policy=PenaltyPolicy()
        )

        assert stats.total == pytest.approx(4500.0)
        assert stats.days_goal_reached == 2
        assert stats.current_streak == 2
        assert [d.day for d in stats.days][-1] == date(2025, 1, 19)

    def test_streak_continues_into_previous_week(self, seeded_engine):
        for day in (10, 11, 12, 13, 14):
            _log(seeded_engine, "Water", 2000, day=date(2025, 1, day))

        stats = weekly_statistics(
            seeded_engine, UserSettings(), date(2025, 1, 13), DAY, policy=PenaltyPolicy()
        )

        assert stats.current_streak == 5

    def test_coffee_counts_net(self, seeded_engine):
        # 2000ml coffee nets 1100ml, short of the goal
        _log(seeded_engine, "Coffee", 2000, day=date(2025, 1, 14))

        stats = weekly_statistics(
            seeded_engine, UserSettings(), date(2025, 1, 13), DAY, policy=PenaltyPolicy()
        )

        assert stats.total == pytest.approx(1100.0)
        assert stats.current_streak == 0
