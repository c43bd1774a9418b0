"""Daily and weekly hydration: loads entries and runs the calculator over them."""
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional

from hydromate.config import Settings, get_settings
from hydromate.hydration.calculator import (
    HydrationProgress,
    HydrationTotals,
    PenaltyPolicy,
    calculate_progress,
    calculate_totals,
)
from hydromate.hydration.statistics import (
    DaySummary,
    WeeklyStatistics,
    count_streak,
    streak_anchor,
    summarize_week,
    week_days,
)
from hydromate.reminders.settings import UserSettings
from hydromate.tracking.repository import DrinkRepository, EntryRepository


@dataclass(frozen=True)
class DailyHydration:
    day: date
    entry_count: int
    totals: HydrationTotals
    progress: HydrationProgress


def penalty_policy(config: Optional[Settings] = None) -> PenaltyPolicy:
    """Penalty policy from the app configuration."""
    config = config or get_settings()
    return PenaltyPolicy(
        caffeine_fraction=config.caffeine_penalty_fraction,
        alcohol_fraction=config.alcohol_penalty_fraction,
        combine=config.combined_penalty_policy,
    )


def daily_hydration(
    engine,
    settings: UserSettings,
    day: date,
    policy: Optional[PenaltyPolicy] = None,
    user_id: int = 1,
) -> DailyHydration:
    """
    Totals and goal progress for one local day.

    Args:
        engine: SQLAlchemy engine.
        settings: settings snapshot (goal and threshold).
        day: local calendar day.
        policy: penalty policy; defaults to the configured one.
        user_id: whose entries to load.
    """
    entries = EntryRepository(engine, user_id=user_id).for_day(day)
    drinks = DrinkRepository(engine).metadata_map()
    totals = calculate_totals(entries, drinks, policy or penalty_policy())
    progress = calculate_progress(
        totals.net_hydration,
        settings.daily_goal_ml,
        settings.goal_threshold,
    )
    return DailyHydration(day=day, entry_count=len(entries), totals=totals, progress=progress)


def weekly_statistics(
    engine,
    settings: UserSettings,
    start: date,
    today: date,
    policy: Optional[PenaltyPolicy] = None,
    user_id: int = 1,
) -> WeeklyStatistics:
    """
    Statistics for the week starting on start (a Monday).

    The current goal is applied to every day; goals are not versioned.
    The streak follows reached goals back past the start of the week.
    """
    policy = policy or penalty_policy()
    cache: Dict[date, DaySummary] = {}

    def summary(day: date) -> DaySummary:
        if day not in cache:
            result = daily_hydration(engine, settings, day, policy=policy, user_id=user_id)
            cache[day] = DaySummary(
                day=day,
                net_hydration=result.totals.net_hydration,
                goal=result.progress.goal,
                is_goal_reached=result.progress.is_goal_reached,
            )
        return cache[day]

    days = [summary(day) for day in week_days(start)]
    streak = count_streak(lambda day: summary(day).is_goal_reached, streak_anchor(days, today))
    return summarize_week(days, current_streak=streak)
