"""Hydration summary, weekly statistics and goal recommendation routes."""
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from hydromate.api.deps import current_settings, get_app_engine
from hydromate.config import get_settings
from hydromate.hydration.goal import ActivityLevel, Climate, Gender, UserProfile, recommend_daily_goal
from hydromate.hydration.service import DailyHydration, daily_hydration, weekly_statistics
from hydromate.hydration.statistics import WeeklyStatistics, week_start
from hydromate.reminders.settings import UserSettings

router = APIRouter()


class HydrationSummary(BaseModel):
    day: date
    entry_count: int
    total_actual: float
    total_effective: float
    total_dehydration: float
    net_hydration: float
    goal: float
    percentage: float
    remaining: float
    is_goal_reached: bool
    drink_breakdown: Dict[int, int]


def _summary(result: DailyHydration) -> HydrationSummary:
    totals, progress = result.totals, result.progress
    return HydrationSummary(
        day=result.day,
        entry_count=result.entry_count,
        total_actual=totals.total_actual,
        total_effective=totals.total_effective,
        total_dehydration=totals.total_dehydration,
        net_hydration=totals.net_hydration,
        goal=progress.goal,
        percentage=progress.percentage,
        remaining=progress.remaining,
        is_goal_reached=progress.is_goal_reached,
        drink_breakdown=totals.drink_breakdown,
    )


class DaySummaryRead(BaseModel):
    day: date
    net_hydration: float
    goal: float
    is_goal_reached: bool


class WeeklySummary(BaseModel):
    week_start: date
    week_end: date
    days: List[DaySummaryRead]
    total: float
    average_daily: float
    days_goal_reached: int
    current_streak: int
    weekly_goal: float
    week_progress: float


def _weekly(stats: WeeklyStatistics) -> WeeklySummary:
    return WeeklySummary(
        week_start=stats.week_start,
        week_end=stats.week_end,
        days=[
            DaySummaryRead(
                day=d.day,
                net_hydration=d.net_hydration,
                goal=d.goal,
                is_goal_reached=d.is_goal_reached,
            )
            for d in stats.days
        ],
        total=stats.total,
        average_daily=stats.average_daily,
        days_goal_reached=stats.days_goal_reached,
        current_streak=stats.current_streak,
        weekly_goal=stats.weekly_goal,
        week_progress=stats.week_progress,
    )


class ProfilePayload(BaseModel):
    weight_kg: int = Field(gt=0)
    gender: Gender = Gender.UNSPECIFIED
    activity: ActivityLevel = ActivityLevel.MODERATE
    climate: Climate = Climate.MODERATE


class GoalRecommendation(BaseModel):
    goal_ml: int
    minimum_ml: int
    maximum_ml: int
    base_ml: int
    gender_ml: int
    activity_ml: int
    climate_ml: int
    explanation: str
    is_default: bool


@router.get("/today", response_model=HydrationSummary)
def hydration_today(
    engine=Depends(get_app_engine),
    settings: UserSettings = Depends(current_settings),
):
    return _summary(daily_hydration(engine, settings, date.today(), user_id=get_settings().user_id))


@router.get("/week", response_model=WeeklySummary)
def hydration_week(
    start: Optional[date] = None,
    engine=Depends(get_app_engine),
    settings: UserSettings = Depends(current_settings),
):
    """Statistics for the Monday-to-Sunday week containing start (this week by default)."""
    today = date.today()
    stats = weekly_statistics(
        engine, settings, week_start(start or today), today, user_id=get_settings().user_id
    )
    return _weekly(stats)


@router.post("/goal/recommendation", response_model=GoalRecommendation)
def recommend_goal(profile: ProfilePayload):
    """Recommended daily goal for a body profile. Nothing is saved."""
    result = recommend_daily_goal(UserProfile(
        weight_kg=profile.weight_kg,
        gender=profile.gender,
        activity=profile.activity,
        climate=profile.climate,
    ))
    return GoalRecommendation(
        goal_ml=result.goal_ml,
        minimum_ml=result.minimum_ml,
        maximum_ml=result.maximum_ml,
        base_ml=result.breakdown.base,
        gender_ml=result.breakdown.gender,
        activity_ml=result.breakdown.activity,
        climate_ml=result.breakdown.climate,
        explanation=result.explanation,
        is_default=result.is_default,
    )


@router.get("/{day}", response_model=HydrationSummary)
def hydration_for_day(
    day: date,
    engine=Depends(get_app_engine),
    settings: UserSettings = Depends(current_settings),
):
    """Summary for any past local day (YYYY-MM-DD)."""
    return _summary(daily_hydration(engine, settings, day, user_id=get_settings().user_id))
