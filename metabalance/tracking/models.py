"""Request and response contracts (pydantic v2)."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Gender = Literal["male", "female", "other"]
ActivityLevelName = Literal["sedentary", "light", "moderate", "active", "very_active"]
StressLevel = Literal["low", "moderate", "high"]
Quality = Literal["poor", "fair", "good", "excellent"]
EnergyLevel = Literal["very_low", "low", "moderate", "high", "very_high"]
MealType = Literal["breakfast", "lunch", "dinner", "snack"]
FastingType = Literal["adf", "tre", "wdf"]
SupplementType = Literal["berberine", "probiotic", "nmn", "resveratrol", "other"]
InsightType = Literal["motivation", "education", "tip", "reminder", "celebration"]
GoalIdName = Literal["meal_logging", "protein", "fasting", "exercise", "water"]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserOut(ORMModel):
    id: int
    email: str
    name: str | None = None
    role: str
    created_at: datetime
    last_signed_in: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class ProfileUpdate(BaseModel):
    """Every field optional; only the fields sent are written."""

    current_weight: int | None = Field(default=None, gt=0)
    target_weight: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    age: int | None = Field(default=None, gt=0, lt=130)
    gender: Gender | None = None
    has_obesity: bool | None = None
    has_diabetes: bool | None = None
    has_metabolic_syndrome: bool | None = None
    has_nafld: bool | None = None
    current_medications: str | None = None
    taking_glp1: bool | None = None
    stress_level: StressLevel | None = None
    sleep_quality: Quality | None = None
    activity_level: ActivityLevelName | None = None
    primary_goal: str | None = None
    target_date: datetime | None = None
    notifications_enabled: bool | None = None
    daily_reminder_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")


class ProfileOut(ORMModel):
    id: int
    user_id: int
    current_weight: int | None = None
    target_weight: int | None = None
    height: int | None = None
    age: int | None = None
    gender: str | None = None
    has_obesity: bool = False
    has_diabetes: bool = False
    has_metabolic_syndrome: bool = False
    has_nafld: bool = False
    current_medications: str | None = None
    taking_glp1: bool = False
    stress_level: str | None = None
    sleep_quality: str | None = None
    activity_level: str | None = None
    primary_goal: str | None = None
    target_date: datetime | None = None
    notifications_enabled: bool = True
    daily_reminder_time: str | None = None
    updated_at: datetime


class NutritionGoalsOut(BaseModel):
    daily_calories: int
    daily_protein: int
    daily_carbs: int
    daily_fats: int
    daily_fiber: int
    is_default: bool = False


# ---------------------------------------------------------------------------
# Meals & food
# ---------------------------------------------------------------------------


class MealCreate(BaseModel):
    logged_at: datetime
    meal_type: MealType
    food_name: str = Field(min_length=1, max_length=255)
    serving_size: str | None = None
    calories: int | None = Field(default=None, ge=0)
    protein: int | None = Field(default=None, ge=0)
    carbs: int | None = Field(default=None, ge=0)
    fats: int | None = Field(default=None, ge=0)
    fiber: int | None = Field(default=None, ge=0)
    notes: str | None = None


class MealOut(ORMModel):
    id: int
    logged_at: datetime
    meal_type: str
    food_name: str
    serving_size: str | None = None
    calories: int | None = None
    protein: int | None = None
    carbs: int | None = None
    fats: int | None = None
    fiber: int | None = None
    notes: str | None = None


class NutritionTotals(BaseModel):
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fats: int = 0
    fiber: int = 0


class DailyTotalsOut(BaseModel):
    date: date
    totals: NutritionTotals
    goals: NutritionGoalsOut
    progress_pct: dict[str, float | None]


class DailyNutritionOut(NutritionTotals):
    date: date


class FoodSearchResult(BaseModel):
    id: int
    name: str
    image: str | None = None


class FoodNutrition(BaseModel):
    id: int
    name: str
    amount: float
    unit: str
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fats: int = 0
    fiber: int = 0


# ---------------------------------------------------------------------------
# Fasting & supplements
# ---------------------------------------------------------------------------


class FastingScheduleCreate(BaseModel):
    fasting_type: FastingType
    eating_window_start: int | None = Field(default=None, ge=0, le=23)
    eating_window_end: int | None = Field(default=None, ge=0, le=23)
    fasting_days: str | None = None
    start_date: datetime
    end_date: datetime | None = None


class FastingScheduleOut(ORMModel):
    id: int
    fasting_type: str
    eating_window_start: int | None = None
    eating_window_end: int | None = None
    fasting_days: str | None = None
    is_active: bool
    start_date: datetime
    end_date: datetime | None = None


class FastingLogCreate(BaseModel):
    schedule_id: int
    date: datetime
    adhered: bool
    actual_eating_start: datetime | None = None
    actual_eating_end: datetime | None = None
    notes: str | None = None


class FastingLogOut(ORMModel):
    id: int
    schedule_id: int
    date: datetime
    adhered: bool
    actual_eating_start: datetime | None = None
    actual_eating_end: datetime | None = None
    notes: str | None = None


class SupplementCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: SupplementType
    dosage: str = Field(min_length=1, max_length=100)
    frequency: str = Field(min_length=1, max_length=100)
    timing: str | None = None
    start_date: datetime
    end_date: datetime | None = None
    notes: str | None = None


class SupplementUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    dosage: str | None = None
    frequency: str | None = None
    timing: str | None = None
    end_date: datetime | None = None
    is_active: bool | None = None
    notes: str | None = None


class SupplementOut(ORMModel):
    id: int
    name: str
    type: str
    dosage: str
    frequency: str
    timing: str | None = None
    start_date: datetime
    end_date: datetime | None = None
    is_active: bool
    notes: str | None = None


class SupplementLogCreate(BaseModel):
    supplement_id: int
    taken_at: datetime
    adhered: bool
    notes: str | None = None


class SupplementLogOut(ORMModel):
    id: int
    supplement_id: int
    taken_at: datetime
    adhered: bool
    notes: str | None = None


# ---------------------------------------------------------------------------
# Progress & water
# ---------------------------------------------------------------------------


class ProgressCreate(BaseModel):
    logged_at: datetime
    weight: float | None = Field(default=None, gt=0)
    waist_circumference: float | None = Field(default=None, gt=0)
    hip_circumference: float | None = Field(default=None, gt=0)
    chest_circumference: float | None = Field(default=None, gt=0)
    energy_level: EnergyLevel | None = None
    mood: Quality | None = None
    sleep_quality: Quality | None = None
    notes: str | None = None


class ProgressOut(ORMModel):
    id: int
    logged_at: datetime
    weight: float | None = None
    waist_circumference: float | None = None
    hip_circumference: float | None = None
    chest_circumference: float | None = None
    energy_level: str | None = None
    mood: str | None = None
    sleep_quality: str | None = None
    notes: str | None = None


class ProgressExport(BaseModel):
    pdf: str  # base64
    filename: str


class WaterUpdate(BaseModel):
    date: date
    glasses_consumed: int = Field(ge=0, le=20)


class WaterOut(BaseModel):
    date: date
    glasses_consumed: int = 0


# ---------------------------------------------------------------------------
# Daily goals
# ---------------------------------------------------------------------------


class DailyGoalPatch(BaseModel):
    date: date
    meal_logging_complete: bool | None = None
    protein_goal_complete: bool | None = None
    fasting_goal_complete: bool | None = None
    exercise_goal_complete: bool | None = None
    water_goal_complete: bool | None = None


class DailyGoalToggle(BaseModel):
    date: date
    goal_id: GoalIdName


class DailyGoalOut(BaseModel):
    date: date
    meal_logging_complete: bool = False
    protein_goal_complete: bool = False
    fasting_goal_complete: bool = False
    exercise_goal_complete: bool = False
    water_goal_complete: bool = False
    win_score: int = 0


class WeeklyAggregateOut(BaseModel):
    start: date
    end: date
    total_days: int = 0
    days_logged: int = 0
    average_win_score: int = 0
    perfect_days: int = 0
    current_streak: int = 0
    longest_streak: int = 0


class WeekGoalsOut(BaseModel):
    start: date
    end: date
    days: list[DailyGoalOut] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Reflections, achievements, insights, chat
# ---------------------------------------------------------------------------


class ReflectionCreate(BaseModel):
    week_start_date: date
    went_well: str | None = None
    challenges: str | None = None
    next_week_plan: str | None = None
    weight_change: float | None = None


class ReflectionOut(ORMModel):
    id: int
    week_start_date: date
    week_end_date: date
    went_well: str | None = None
    challenges: str | None = None
    next_week_plan: str | None = None
    ai_insights: str | None = None
    days_logged: int = 0
    avg_win_score: int = 0
    weight_change: float | None = None
    created_at: datetime


class AchievementOut(BaseModel):
    id: int
    achievement_id: str
    name: str
    description: str
    icon: str
    category: str
    tier: str
    unlocked_at: datetime
    viewed: bool


class AchievementsViewed(BaseModel):
    achievement_ids: list[str] = Field(default_factory=list)


class AchievementCheckOut(BaseModel):
    new_achievements: list[AchievementOut] = Field(default_factory=list)


class InsightOut(ORMModel):
    id: int
    date: date
    insight_type: InsightType
    title: str
    content: str
    viewed: bool = False
    viewed_at: datetime | None = None


class ChatMessageOut(ORMModel):
    id: int
    role: str
    content: str
    created_at: datetime


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)


class ChatReply(BaseModel):
    message: str
