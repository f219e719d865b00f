"""SQLAlchemy ORM tables.

Timestamps are stored as naive UTC. Per-day rows (daily goals, water,
insights) key on a local calendar ``Date``.
"""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(16), default="user")  # user/admin

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
    last_signed_in: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)


class MetabolicProfile(Base):
    __tablename__ = "metabolic_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True)

    current_weight: Mapped[int | None] = mapped_column(Integer, nullable=True)  # lb
    target_weight: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)  # in
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(16), nullable=True)  # male/female/other

    has_obesity: Mapped[bool] = mapped_column(Boolean, default=False)
    has_diabetes: Mapped[bool] = mapped_column(Boolean, default=False)
    has_metabolic_syndrome: Mapped[bool] = mapped_column(Boolean, default=False)
    has_nafld: Mapped[bool] = mapped_column(Boolean, default=False)

    current_medications: Mapped[str | None] = mapped_column(Text, nullable=True)
    taking_glp1: Mapped[bool] = mapped_column(Boolean, default=False)

    stress_level: Mapped[str | None] = mapped_column(String(16), nullable=True)  # low/moderate/high
    sleep_quality: Mapped[str | None] = mapped_column(String(16), nullable=True)  # poor/fair/good/excellent
    activity_level: Mapped[str | None] = mapped_column(String(16), nullable=True)

    primary_goal: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_date: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)

    notifications_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    daily_reminder_time: Mapped[str | None] = mapped_column(String(5), nullable=True)  # HH:MM

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class MealLog(Base):
    __tablename__ = "meal_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)

    logged_at: Mapped[dt.datetime] = mapped_column(DateTime, index=True)
    meal_type: Mapped[str] = mapped_column(String(16))  # breakfast/lunch/dinner/snack
    food_name: Mapped[str] = mapped_column(String(255))
    serving_size: Mapped[str | None] = mapped_column(String(100), nullable=True)

    calories: Mapped[int | None] = mapped_column(Integer, nullable=True)
    protein: Mapped[int | None] = mapped_column(Integer, nullable=True)
    carbs: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fats: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fiber: Mapped[int | None] = mapped_column(Integer, nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)


class FastingSchedule(Base):
    __tablename__ = "fasting_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)

    fasting_type: Mapped[str] = mapped_column(String(8))  # adf/tre/wdf
    eating_window_start: Mapped[int | None] = mapped_column(Integer, nullable=True)  # hour 0-23
    eating_window_end: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fasting_days: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    start_date: Mapped[dt.datetime] = mapped_column(DateTime)
    end_date: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class FastingLog(Base):
    __tablename__ = "fasting_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    schedule_id: Mapped[int] = mapped_column(Integer, ForeignKey("fasting_schedules.id", ondelete="CASCADE"), index=True)

    date: Mapped[dt.datetime] = mapped_column(DateTime)
    adhered: Mapped[bool] = mapped_column(Boolean)
    actual_eating_start: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    actual_eating_end: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)


class Supplement(Base):
    __tablename__ = "supplements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)

    name: Mapped[str] = mapped_column(String(255))
    type: Mapped[str] = mapped_column(String(16))  # berberine/probiotic/nmn/resveratrol/other
    dosage: Mapped[str] = mapped_column(String(100))
    frequency: Mapped[str] = mapped_column(String(100))
    timing: Mapped[str | None] = mapped_column(String(100), nullable=True)

    start_date: Mapped[dt.datetime] = mapped_column(DateTime)
    end_date: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class SupplementLog(Base):
    __tablename__ = "supplement_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    supplement_id: Mapped[int] = mapped_column(Integer, ForeignKey("supplements.id", ondelete="CASCADE"), index=True)

    taken_at: Mapped[dt.datetime] = mapped_column(DateTime)
    adhered: Mapped[bool] = mapped_column(Boolean)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)


class ProgressLog(Base):
    __tablename__ = "progress_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)

    logged_at: Mapped[dt.datetime] = mapped_column(DateTime, index=True)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)  # lb
    waist_circumference: Mapped[float | None] = mapped_column(Float, nullable=True)
    hip_circumference: Mapped[float | None] = mapped_column(Float, nullable=True)
    chest_circumference: Mapped[float | None] = mapped_column(Float, nullable=True)

    energy_level: Mapped[str | None] = mapped_column(String(16), nullable=True)
    mood: Mapped[str | None] = mapped_column(String(16), nullable=True)
    sleep_quality: Mapped[str | None] = mapped_column(String(16), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)


class DailyGoal(Base):
    __tablename__ = "daily_goals"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_goals_user_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)

    meal_logging_complete: Mapped[bool] = mapped_column(Boolean, default=False)
    protein_goal_complete: Mapped[bool] = mapped_column(Boolean, default=False)
    fasting_goal_complete: Mapped[bool] = mapped_column(Boolean, default=False)
    exercise_goal_complete: Mapped[bool] = mapped_column(Boolean, default=False)
    water_goal_complete: Mapped[bool] = mapped_column(Boolean, default=False)

    win_score: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class WeeklyReflection(Base):
    __tablename__ = "weekly_reflections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)

    week_start_date: Mapped[dt.date] = mapped_column(Date, index=True)
    week_end_date: Mapped[dt.date] = mapped_column(Date)

    went_well: Mapped[str | None] = mapped_column(Text, nullable=True)
    challenges: Mapped[str | None] = mapped_column(Text, nullable=True)
    next_week_plan: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_insights: Mapped[str | None] = mapped_column(Text, nullable=True)

    days_logged: Mapped[int] = mapped_column(Integer, default=0)
    avg_win_score: Mapped[int] = mapped_column(Integer, default=0)
    weight_change: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)


class WaterIntake(Base):
    __tablename__ = "water_intake"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_water_intake_user_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    glasses_consumed: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class Achievement(Base):
    __tablename__ = "achievements"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="uq_achievements_user_achievement"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    achievement_id: Mapped[str] = mapped_column(String(100), index=True)
    unlocked_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    viewed: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    role: Mapped[str] = mapped_column(String(16))  # user/assistant
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, index=True)


class DailyInsight(Base):
    __tablename__ = "daily_insights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)

    insight_type: Mapped[str] = mapped_column(String(16))  # motivation/education/tip/reminder/celebration
    title: Mapped[str] = mapped_column(String(255))
    content: Mapped[str] = mapped_column(Text)

    viewed: Mapped[bool] = mapped_column(Boolean, default=False)
    viewed_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
