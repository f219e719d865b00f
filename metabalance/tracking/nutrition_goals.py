"""Daily calorie and macro targets from body metrics.

Mifflin–St Jeor BMR, activity multiplier for TDEE, fixed 500 kcal/day
deficit. Protein and fat scale with body weight; carbs take the remainder.
Pure and total: every input produces a NutritionGoals, nothing raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from metabalance.tracking.features import round_half_up

Sex = Literal["male", "female", "other"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]

LB_TO_KG = 0.453592
IN_TO_CM = 2.54

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = 1.2

DAILY_DEFICIT_KCAL = 500
LEAN_MASS_FRACTION = 0.75
PROTEIN_G_PER_LEAN_LB = 1.0
FAT_G_PER_LB = 0.35
FIBER_G = 35


@dataclass(frozen=True, slots=True)
class ProfileMetrics:
    weight_lb: float
    height_in: float
    age: int
    sex: Sex
    activity_level: ActivityLevel


@dataclass(frozen=True, slots=True)
class NutritionGoals:
    daily_calories: int
    daily_protein: int  # grams
    daily_carbs: int  # grams
    daily_fats: int  # grams
    daily_fiber: int  # grams


# Served when a stored profile is missing any of the metrics above.
DEFAULT_GOALS = NutritionGoals(
    daily_calories=2000,
    daily_protein=150,
    daily_carbs=200,
    daily_fats=65,
    daily_fiber=30,
)


def bmr_mifflin_st_jeor(metrics: ProfileMetrics) -> float:
    """Basal metabolic rate in kcal/day.

    "other" uses the male constant; there is no third formula.
    """
    weight_kg = metrics.weight_lb * LB_TO_KG
    height_cm = metrics.height_in * IN_TO_CM
    base = 10 * weight_kg + 6.25 * height_cm - 5 * metrics.age
    if metrics.sex == "female":
        return base - 161
    return base + 5


def activity_multiplier(activity_level: str) -> float:
    return ACTIVITY_MULTIPLIERS.get(activity_level, DEFAULT_ACTIVITY_MULTIPLIER)


def tdee(bmr: float, activity_level: str) -> float:
    return bmr * activity_multiplier(activity_level)


def calculate_nutrition_goals(metrics: ProfileMetrics) -> NutritionGoals:
    """Compute daily targets. Carbs are not clamped and can go negative."""
    bmr = bmr_mifflin_st_jeor(metrics)
    target_calories = round_half_up(tdee(bmr, metrics.activity_level) - DAILY_DEFICIT_KCAL)

    protein_g = round_half_up(metrics.weight_lb * LEAN_MASS_FRACTION * PROTEIN_G_PER_LEAN_LB)
    fats_g = round_half_up(metrics.weight_lb * FAT_G_PER_LB)
    remaining_kcal = target_calories - protein_g * 4 - fats_g * 9
    carbs_g = round_half_up(remaining_kcal / 4)

    return NutritionGoals(
        daily_calories=target_calories,
        daily_protein=protein_g,
        daily_carbs=carbs_g,
        daily_fats=fats_g,
        daily_fiber=FIBER_G,
    )
