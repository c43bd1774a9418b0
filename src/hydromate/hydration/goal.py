"""
Recommended daily goal from a user profile.

The base amount starts from 30 kg at a per-gender rate and adds 10 ml for
each kg up to 50 kg and 20 ml for each kg above. Fixed additions follow
for pregnancy or breastfeeding, activity level and climate. Profiles with
a weight outside 30-200 kg fall back to the 2000 ml default.
"""
from dataclasses import dataclass
from enum import Enum

DEFAULT_GOAL_ML = 2000
MIN_WEIGHT_KG = 30
MAX_WEIGHT_KG = 200

# Healthy range around the recommendation
RANGE_LOW = 0.8
RANGE_HIGH = 1.2


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    PREGNANT = "pregnant"
    BREASTFEEDING = "breastfeeding"
    UNSPECIFIED = "unspecified"


class ActivityLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class Climate(str, Enum):
    COLD = "cold"
    MODERATE = "moderate"
    WARM = "warm"
    HOT = "hot"


# ml per kg of the first 30 kg
BASE_RATE_ML = {
    Gender.MALE: 37,
    Gender.FEMALE: 32,
    Gender.PREGNANT: 32,
    Gender.BREASTFEEDING: 32,
    Gender.UNSPECIFIED: 34,
}

GENDER_EXTRA_ML = {
    Gender.PREGNANT: 300,
    Gender.BREASTFEEDING: 700,
}

ACTIVITY_EXTRA_ML = {
    ActivityLevel.LOW: 0,
    ActivityLevel.MODERATE: 300,
    ActivityLevel.HIGH: 700,
}

CLIMATE_EXTRA_ML = {
    Climate.COLD: 0,
    Climate.MODERATE: 200,
    Climate.WARM: 450,
    Climate.HOT: 700,
}


@dataclass(frozen=True)
class UserProfile:
    weight_kg: int = 70
    gender: Gender = Gender.UNSPECIFIED
    activity: ActivityLevel = ActivityLevel.MODERATE
    climate: Climate = Climate.MODERATE

    def is_valid(self) -> bool:
        return MIN_WEIGHT_KG <= self.weight_kg <= MAX_WEIGHT_KG


@dataclass(frozen=True)
class GoalBreakdown:
    base: int
    gender: int
    activity: int
    climate: int

    @property
    def total(self) -> int:
        return self.base + self.gender + self.activity + self.climate


@dataclass(frozen=True)
class RecommendedGoal:
    goal_ml: int
    breakdown: GoalBreakdown
    explanation: str
    is_default: bool = False

    @property
    def minimum_ml(self) -> int:
        return round(self.goal_ml * RANGE_LOW)

    @property
    def maximum_ml(self) -> int:
        return round(self.goal_ml * RANGE_HIGH)


def base_amount(weight_kg: int, gender: Gender) -> int:
    amount = MIN_WEIGHT_KG * BASE_RATE_ML[gender]
    amount += 10 * max(0, min(weight_kg, 50) - MIN_WEIGHT_KG)
    amount += 20 * max(0, weight_kg - 50)
    return amount


def recommend_daily_goal(profile: UserProfile) -> RecommendedGoal:
    if not profile.is_valid():
        return RecommendedGoal(
            goal_ml=DEFAULT_GOAL_ML,
            breakdown=GoalBreakdown(base=DEFAULT_GOAL_ML, gender=0, activity=0, climate=0),
            explanation=f"Invalid profile data. Using default {DEFAULT_GOAL_ML}ml.",
            is_default=True,
        )

    breakdown = GoalBreakdown(
        base=base_amount(profile.weight_kg, profile.gender),
        gender=GENDER_EXTRA_ML.get(profile.gender, 0),
        activity=ACTIVITY_EXTRA_ML[profile.activity],
        climate=CLIMATE_EXTRA_ML[profile.climate],
    )
    return RecommendedGoal(
        goal_ml=breakdown.total,
        breakdown=breakdown,
        explanation=_explain(profile, breakdown),
    )


def _explain(profile: UserProfile, breakdown: GoalBreakdown) -> str:
    lines = [f"Based on your weight ({profile.weight_kg}kg): {breakdown.base}ml"]
    if breakdown.gender:
        lines.append(f"{profile.gender.value.capitalize()}: +{breakdown.gender}ml")
    if breakdown.activity:
        lines.append(f"{profile.activity.value.capitalize()} activity: +{breakdown.activity}ml")
    if breakdown.climate:
        lines.append(f"{profile.climate.value.capitalize()} climate: +{breakdown.climate}ml")
    return "\n".join(lines)
