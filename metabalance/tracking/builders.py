"""Composite reads that join several repositories with the pure core.

Each builder takes an AsyncSession and a user id and returns plain data;
none of them commit except check_achievements, which inserts unlocks
and leaves the commit to the caller.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from metabalance.tracking import daily_wins
from metabalance.tracking.achievements import UserStats, check_unlocked
from metabalance.tracking.coaching import InsightContext
from metabalance.tracking.dates import to_local_date, utc_range
from metabalance.tracking.features import goal_progress_pct, mean_or_zero
from metabalance.tracking.models import (
    DailyNutritionOut,
    NutritionGoalsOut,
    NutritionTotals,
    WeeklyAggregateOut,
)
from metabalance.tracking.nutrition_goals import DEFAULT_GOALS, ProfileMetrics, calculate_nutrition_goals
from metabalance.tracking.pdf_report import ProgressReport, WeightEntry
from metabalance.tracking.repositories import (
    AchievementRepo,
    DailyGoalRepo,
    MealRepo,
    ProfileRepo,
    ProgressRepo,
    day_record,
)
from metabalance.tracking.tables import Achievement, MealLog, MetabolicProfile

logger = logging.getLogger(__name__)


def profile_metrics(profile: MetabolicProfile | None) -> ProfileMetrics | None:
    """None unless every input the calculator needs is present."""
    if profile is None:
        return None
    if not (profile.current_weight and profile.height and profile.age and profile.gender and profile.activity_level):
        return None
    return ProfileMetrics(
        weight_lb=float(profile.current_weight),
        height_in=float(profile.height),
        age=profile.age,
        sex=profile.gender,  # type: ignore[arg-type]
        activity_level=profile.activity_level,  # type: ignore[arg-type]
    )


def goals_for_profile(profile: MetabolicProfile | None) -> NutritionGoalsOut:
    metrics = profile_metrics(profile)
    if metrics is None:
        g, is_default = DEFAULT_GOALS, True
    else:
        g, is_default = calculate_nutrition_goals(metrics), False
    return NutritionGoalsOut(
        daily_calories=g.daily_calories,
        daily_protein=g.daily_protein,
        daily_carbs=g.daily_carbs,
        daily_fats=g.daily_fats,
        daily_fiber=g.daily_fiber,
        is_default=is_default,
    )


async def nutrition_goals(session: AsyncSession, user_id: int) -> NutritionGoalsOut:
    return goals_for_profile(await ProfileRepo(session).get(user_id))


def sum_meals(meals: list[MealLog]) -> NutritionTotals:
    return NutritionTotals(
        calories=sum(m.calories or 0 for m in meals),
        protein=sum(m.protein or 0 for m in meals),
        carbs=sum(m.carbs or 0 for m in meals),
        fats=sum(m.fats or 0 for m in meals),
        fiber=sum(m.fiber or 0 for m in meals),
    )


def progress_against(totals: NutritionTotals, goals: NutritionGoalsOut) -> dict[str, float | None]:
    return {
        "calories": goal_progress_pct(totals.calories, goals.daily_calories),
        "protein": goal_progress_pct(totals.protein, goals.daily_protein),
        "carbs": goal_progress_pct(totals.carbs, goals.daily_carbs),
        "fats": goal_progress_pct(totals.fats, goals.daily_fats),
        "fiber": goal_progress_pct(totals.fiber, goals.daily_fiber),
    }


async def daily_nutrition(
    session: AsyncSession, user_id: int, start: date, end: date, tz_name: str
) -> list[DailyNutritionOut]:
    """Per-local-day sums for [start, end], days without meals omitted."""
    start_utc, end_utc = utc_range(start, end + timedelta(days=1), tz_name)
    meals = await MealRepo(session).between(user_id, start_utc, end_utc)
    by_day: dict[date, list[MealLog]] = {}
    for m in meals:
        local_day = to_local_date(m.logged_at, tz_name)
        by_day.setdefault(local_day, []).append(m)
    return [DailyNutritionOut(date=d, **sum_meals(ms).model_dump()) for d, ms in sorted(by_day.items())]


async def goals_summary(session: AsyncSession, user_id: int, start: date, end: date) -> WeeklyAggregateOut:
    goals = await DailyGoalRepo(session).between(user_id, start, end)
    agg = daily_wins.weekly_aggregate([day_record(g) for g in goals])
    return WeeklyAggregateOut(
        start=start,
        end=end,
        total_days=agg.total_days,
        days_logged=agg.days_logged,
        average_win_score=agg.average_win_score,
        perfect_days=agg.perfect_days,
        current_streak=agg.current_streak,
        longest_streak=agg.longest_streak,
    )


async def user_stats(session: AsyncSession, user_id: int) -> UserStats:
    profile = await ProfileRepo(session).get(user_id)
    progress = ProgressRepo(session)
    profile_weight = float(profile.current_weight) if profile and profile.current_weight else 0.0

    current_weight = await progress.latest_weight(user_id)
    if current_weight is None:
        current_weight = profile_weight
    starting_weight = await progress.earliest_weight(user_id)
    if starting_weight is None:
        starting_weight = profile_weight

    records = await DailyGoalRepo(session).all_records(user_id)
    streaks = daily_wins.streaks_from_records(records)
    perfect = daily_wins.streaks_from_records(records, threshold=daily_wins.PERFECT_SCORE)

    return UserStats(
        current_weight=current_weight,
        starting_weight=starting_weight,
        current_streak=streaks.current_streak,
        longest_streak=streaks.longest_streak,
        total_meals_logged=await MealRepo(session).count(user_id),
        total_perfect_days=daily_wins.perfect_days(records),
        consecutive_perfect_days=perfect.current_streak,
        days_tracking=len(records),
    )


async def check_achievements(session: AsyncSession, user_id: int) -> list[Achievement]:
    """Evaluate the unlock rules and insert anything new. Caller commits."""
    repo = AchievementRepo(session)
    stats = await user_stats(session, user_id)
    unlocked: list[Achievement] = []
    for achievement_id in check_unlocked(stats, await repo.held_ids(user_id)):
        row = await repo.unlock(user_id, achievement_id)
        if row is not None:
            unlocked.append(row)
    if unlocked:
        logger.info("User %s unlocked %s", user_id, [a.achievement_id for a in unlocked])
    return unlocked


async def insight_context(session: AsyncSession, user_id: int, today: date, tz_name: str) -> InsightContext:
    week_ago = today - timedelta(days=7)
    start_utc, end_utc = utc_range(week_ago, today + timedelta(days=1), tz_name)

    profile = await ProfileRepo(session).get(user_id)
    recent_progress = await ProgressRepo(session).find(user_id, start_utc, end_utc)
    weights = [p.weight for p in recent_progress if p.weight is not None]
    # find() is newest first
    weight_change = weights[0] - weights[-1] if len(weights) >= 2 else 0.0

    meal_days = await daily_nutrition(session, user_id, week_ago, today, tz_name)
    goals = await DailyGoalRepo(session).between(user_id, week_ago, today)

    return InsightContext(
        profile=profile,
        weight_change_7d=weight_change,
        progress_logs_7d=len(recent_progress),
        meal_days_7d=len(meal_days),
        avg_win_score_7d=mean_or_zero([float(g.win_score or 0) for g in goals]),
    )


async def progress_report(
    session: AsyncSession, user_id: int, user_name: str, today: date, tz_name: str
) -> ProgressReport:
    profile = await ProfileRepo(session).get(user_id)
    logs = await ProgressRepo(session).find(user_id)
    weight_logs = [WeightEntry(logged_at=p.logged_at, weight=p.weight) for p in reversed(logs) if p.weight is not None]

    goals = await DailyGoalRepo(session).between(user_id, today - timedelta(days=30), today)
    records = [day_record(g) for g in goals]
    streaks = daily_wins.streaks_from_records(records)

    start_utc, end_utc = utc_range(today - timedelta(days=6), today + timedelta(days=1), tz_name)
    meals = await MealRepo(session).between(user_id, start_utc, end_utc)
    n = max(len(meals), 1)

    return ProgressReport(
        user_name=user_name,
        current_weight=float(profile.current_weight) if profile and profile.current_weight else 0.0,
        target_weight=float(profile.target_weight) if profile and profile.target_weight else 0.0,
        weight_logs=weight_logs,
        avg_calories=sum(m.calories or 0 for m in meals) / n,
        avg_protein=sum(m.protein or 0 for m in meals) / n,
        avg_carbs=sum(m.carbs or 0 for m in meals) / n,
        avg_fats=sum(m.fats or 0 for m in meals) / n,
        current_streak=streaks.current_streak,
        longest_streak=streaks.longest_streak,
        total_days=len(records),
        avg_stars=mean_or_zero([float(r.win_score) for r in records]),
        perfect_days=daily_wins.perfect_days(records),
    )
