"""Tests for the nutrition goals calculator."""

from metabalance.tracking.nutrition_goals import (
    DEFAULT_GOALS,
    ProfileMetrics,
    activity_multiplier,
    bmr_mifflin_st_jeor,
    calculate_nutrition_goals,
)


def _metrics(**overrides) -> ProfileMetrics:
    base = dict(weight_lb=200.0, height_in=68.0, age=40, sex="male", activity_level="moderate")
    base.update(overrides)
    return ProfileMetrics(**base)


class TestBmr:
    def test_male_female_gap_is_166(self):
        male = bmr_mifflin_st_jeor(_metrics(sex="male"))
        female = bmr_mifflin_st_jeor(_metrics(sex="female"))
        assert abs((male - female) - 166) < 1e-9

    def test_other_uses_male_constant(self):
        assert bmr_mifflin_st_jeor(_metrics(sex="other")) == bmr_mifflin_st_jeor(_metrics(sex="male"))

    def test_known_value(self):
        bmr = bmr_mifflin_st_jeor(_metrics(weight_lb=312, height_in=72, age=61))
        assert round(bmr) == 2258


class TestActivityMultiplier:
    def test_levels_increase(self):
        levels = ["sedentary", "light", "moderate", "active", "very_active"]
        values = [activity_multiplier(lvl) for lvl in levels]
        assert all(a < b for a, b in zip(values, values[1:]))
        assert values[0] == 1.2
        assert values[-1] == 1.9

    def test_unknown_defaults_to_sedentary(self):
        assert activity_multiplier("couch") == 1.2


class TestCalculateNutritionGoals:
    def test_end_to_end_case(self):
        goals = calculate_nutrition_goals(
            _metrics(weight_lb=312, height_in=72, age=61, sex="male", activity_level="very_active")
        )
        assert 3700 < goals.daily_calories < 3900
        assert 220 < goals.daily_protein < 250
        assert 450 < goals.daily_carbs < 500
        assert 100 < goals.daily_fats < 120
        assert goals.daily_fiber == 35

    def test_exact_macros(self):
        goals = calculate_nutrition_goals(
            _metrics(weight_lb=312, height_in=72, age=61, sex="male", activity_level="very_active")
        )
        assert goals.daily_calories == 3791
        assert goals.daily_protein == 234
        assert goals.daily_fats == 109
        assert goals.daily_carbs == 469

    def test_female_target_lower(self):
        male = calculate_nutrition_goals(_metrics(sex="male"))
        female = calculate_nutrition_goals(_metrics(sex="female"))
        assert female.daily_calories < male.daily_calories

    def test_more_active_more_calories(self):
        sedentary = calculate_nutrition_goals(_metrics(activity_level="sedentary"))
        active = calculate_nutrition_goals(_metrics(activity_level="very_active"))
        assert active.daily_calories > sedentary.daily_calories

    def test_protein_and_fat_scale_with_weight(self):
        light = calculate_nutrition_goals(_metrics(weight_lb=150))
        heavy = calculate_nutrition_goals(_metrics(weight_lb=250))
        assert heavy.daily_protein > light.daily_protein
        assert heavy.daily_fats > light.daily_fats

    def test_doubling_weight_scales_protein_and_fat(self):
        light = calculate_nutrition_goals(_metrics(weight_lb=150))
        heavy = calculate_nutrition_goals(_metrics(weight_lb=300))
        assert heavy.daily_protein >= 1.5 * light.daily_protein
        assert heavy.daily_fats >= 1.5 * light.daily_fats

    def test_calories_strictly_increase_with_activity(self):
        levels = ["sedentary", "light", "moderate", "active", "very_active"]
        calories = [calculate_nutrition_goals(_metrics(activity_level=lvl)).daily_calories for lvl in levels]
        assert all(a < b for a, b in zip(calories, calories[1:]))

    def test_fiber_constant(self):
        for w in (120, 200, 400):
            assert calculate_nutrition_goals(_metrics(weight_lb=w)).daily_fiber == 35

    def test_carbs_not_clamped(self):
        goals = calculate_nutrition_goals(
            _metrics(weight_lb=400, height_in=48, age=90, sex="female", activity_level="sedentary")
        )
        assert goals.daily_carbs < 0


class TestDefaults:
    def test_default_goals(self):
        assert DEFAULT_GOALS.daily_calories == 2000
        assert DEFAULT_GOALS.daily_protein == 150
        assert DEFAULT_GOALS.daily_carbs == 200
        assert DEFAULT_GOALS.daily_fats == 65
        assert DEFAULT_GOALS.daily_fiber == 30
