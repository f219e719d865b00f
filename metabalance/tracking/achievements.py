"""Static achievement catalogue and its unlock rules.

Each AchievementDefinition is paired with a threshold on one UserStats
field. check_unlocked() walks the rules in order and returns the ids
that are newly satisfied.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AchievementDefinition:
    id: str
    name: str
    description: str
    icon: str
    category: str  # "weight" | "streak" | "consistency" | "milestone"
    tier: str  # "bronze" | "silver" | "gold" | "platinum"


@dataclass(frozen=True, slots=True)
class UserStats:
    current_weight: float = 0.0
    starting_weight: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    total_meals_logged: int = 0
    total_perfect_days: int = 0
    consecutive_perfect_days: int = 0
    days_tracking: int = 0

    @property
    def weight_lost(self) -> float:
        return self.starting_weight - self.current_weight


def _define(*defs: AchievementDefinition) -> dict[str, AchievementDefinition]:
    return {d.id: d for d in defs}


ACHIEVEMENTS: dict[str, AchievementDefinition] = _define(
    AchievementDefinition("first_week", "First Week Complete", "Completed your first week of tracking", "🌱", "milestone", "bronze"),
    AchievementDefinition("first_meal_logged", "Meal Logger", "Logged your first meal", "🍽️", "milestone", "bronze"),
    AchievementDefinition("weight_5lbs", "5 Pounds Down", "Lost 5 pounds from your starting weight", "🎯", "weight", "bronze"),
    AchievementDefinition("weight_10lbs", "10 Pounds Down", "Lost 10 pounds from your starting weight", "💪", "weight", "silver"),
    AchievementDefinition("weight_25lbs", "25 Pounds Down", "Lost 25 pounds from your starting weight", "🏆", "weight", "gold"),
    AchievementDefinition("weight_50lbs", "50 Pounds Down", "Lost 50 pounds from your starting weight", "👑", "weight", "platinum"),
    AchievementDefinition("weight_100lbs", "100 Pounds Down", "Lost 100 pounds from your starting weight", "🌟", "weight", "platinum"),
    AchievementDefinition("streak_7", "Week Warrior", "7-day streak of 3+ stars", "🔥", "streak", "bronze"),
    AchievementDefinition("streak_30", "Month Master", "30-day streak of 3+ stars", "🔥", "streak", "silver"),
    AchievementDefinition("streak_100", "Century Club", "100-day streak of 3+ stars", "🔥", "streak", "gold"),
    AchievementDefinition("streak_365", "Year Legend", "365-day streak of 3+ stars", "🔥", "streak", "platinum"),
    AchievementDefinition("perfect_week", "Perfect Week", "7 consecutive days with 5 stars", "⭐", "consistency", "silver"),
    AchievementDefinition("perfect_month", "Perfect Month", "30 consecutive days with 5 stars", "⭐", "consistency", "gold"),
    AchievementDefinition("meal_tracker_pro", "Meal Tracker Pro", "Logged 100 meals", "📊", "consistency", "silver"),
    AchievementDefinition("goal_crusher", "Goal Crusher", "Achieved 50 perfect days (5 stars)", "💯", "consistency", "gold"),
)

# (achievement id, UserStats attribute, minimum value), in evaluation order.
UNLOCK_RULES: tuple[tuple[str, str, float], ...] = (
    ("weight_5lbs", "weight_lost", 5),
    ("weight_10lbs", "weight_lost", 10),
    ("weight_25lbs", "weight_lost", 25),
    ("weight_50lbs", "weight_lost", 50),
    ("weight_100lbs", "weight_lost", 100),
    ("streak_7", "current_streak", 7),
    ("streak_30", "current_streak", 30),
    ("streak_100", "current_streak", 100),
    ("streak_365", "current_streak", 365),
    ("perfect_week", "consecutive_perfect_days", 7),
    ("perfect_month", "consecutive_perfect_days", 30),
    ("meal_tracker_pro", "total_meals_logged", 100),
    ("goal_crusher", "total_perfect_days", 50),
    ("first_week", "days_tracking", 7),
    ("first_meal_logged", "total_meals_logged", 1),
)


def get_achievement(achievement_id: str) -> AchievementDefinition | None:
    return ACHIEVEMENTS.get(achievement_id)


def list_achievements() -> list[AchievementDefinition]:
    return list(ACHIEVEMENTS.values())


def check_unlocked(stats: UserStats, existing: list[str] | set[str]) -> list[str]:
    """Ids whose threshold is met and that the user does not hold yet."""
    held = set(existing)
    return [
        achievement_id
        for achievement_id, attr, minimum in UNLOCK_RULES
        if achievement_id not in held and getattr(stats, attr) >= minimum
    ]
