"""Tests for the achievement catalogue and unlock rules."""

from metabalance.tracking.achievements import (
    ACHIEVEMENTS,
    UNLOCK_RULES,
    UserStats,
    check_unlocked,
    get_achievement,
    list_achievements,
)


class TestCatalogue:
    def test_fifteen_definitions(self):
        assert len(list_achievements()) == 15

    def test_every_rule_has_a_definition(self):
        assert {rule[0] for rule in UNLOCK_RULES} == set(ACHIEVEMENTS)

    def test_lookup(self):
        week = get_achievement("streak_7")
        assert week is not None
        assert week.name == "Week Warrior"
        assert week.tier == "bronze"
        assert get_achievement("nope") is None


class TestCheckUnlocked:
    def test_fresh_user_unlocks_nothing(self):
        assert check_unlocked(UserStats(), []) == []

    def test_weight_tiers(self):
        stats = UserStats(starting_weight=250, current_weight=238)
        assert check_unlocked(stats, []) == ["weight_5lbs", "weight_10lbs"]

    def test_weight_gain_unlocks_nothing(self):
        assert check_unlocked(UserStats(starting_weight=200, current_weight=210), []) == []

    def test_held_achievements_skipped(self):
        stats = UserStats(starting_weight=250, current_weight=238)
        assert check_unlocked(stats, {"weight_5lbs"}) == ["weight_10lbs"]

    def test_first_meal_and_first_week(self):
        stats = UserStats(total_meals_logged=1, days_tracking=7)
        assert check_unlocked(stats, []) == ["first_week", "first_meal_logged"]

    def test_streak_and_perfect(self):
        stats = UserStats(current_streak=30, consecutive_perfect_days=7, total_perfect_days=50)
        assert check_unlocked(stats, []) == ["streak_7", "streak_30", "perfect_week", "goal_crusher"]

    def test_longest_streak_does_not_count(self):
        assert check_unlocked(UserStats(current_streak=2, longest_streak=40), []) == []

    def test_meal_tracker_pro(self):
        unlocked = check_unlocked(UserStats(total_meals_logged=100), [])
        assert unlocked == ["meal_tracker_pro", "first_meal_logged"]
