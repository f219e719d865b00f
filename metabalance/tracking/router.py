"""Profile, daily goals and achievements endpoints."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from metabalance.auth import get_current_user
from metabalance.config import settings
from metabalance.db import get_session
from metabalance.tracking import builders
from metabalance.tracking.achievements import get_achievement, list_achievements
from metabalance.tracking.daily_wins import DailyGoalUpdate, toggle_update
from metabalance.tracking.dates import local_today, to_naive_utc, week_range
from metabalance.tracking.models import (
    AchievementCheckOut,
    AchievementOut,
    AchievementsViewed,
    DailyGoalOut,
    DailyGoalPatch,
    DailyGoalToggle,
    NutritionGoalsOut,
    ProfileOut,
    ProfileUpdate,
    WeekGoalsOut,
    WeeklyAggregateOut,
)
from metabalance.tracking.repositories import AchievementRepo, DailyGoalRepo, ProfileRepo, flags_of
from metabalance.tracking.tables import Achievement, DailyGoal, User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tracking"])


def _goal_out(day: date, goal: DailyGoal | None) -> DailyGoalOut:
    if goal is None:
        return DailyGoalOut(date=day)
    return DailyGoalOut(
        date=goal.date,
        meal_logging_complete=bool(goal.meal_logging_complete),
        protein_goal_complete=bool(goal.protein_goal_complete),
        fasting_goal_complete=bool(goal.fasting_goal_complete),
        exercise_goal_complete=bool(goal.exercise_goal_complete),
        water_goal_complete=bool(goal.water_goal_complete),
        win_score=goal.win_score or 0,
    )


def _achievement_out(row: Achievement) -> AchievementOut | None:
    definition = get_achievement(row.achievement_id)
    if definition is None:
        return None
    return AchievementOut(
        id=row.id,
        achievement_id=row.achievement_id,
        name=definition.name,
        description=definition.description,
        icon=definition.icon,
        category=definition.category,
        tier=definition.tier,
        unlocked_at=row.unlocked_at,
        viewed=bool(row.viewed),
    )


def _achievements_out(rows: list[Achievement]) -> list[AchievementOut]:
    return [a for a in (_achievement_out(r) for r in rows) if a is not None]


# ---------------------------------------------------------------------------
# /profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=ProfileOut | None)
async def get_profile(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ProfileOut | None:
    profile = await ProfileRepo(session).get(user.id)
    return ProfileOut.model_validate(profile) if profile else None


@router.put("/profile", response_model=ProfileOut)
async def update_profile(
    body: ProfileUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ProfileOut:
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "target_date" in changes:
        changes["target_date"] = to_naive_utc(changes["target_date"])
    profile = await ProfileRepo(session).upsert(user.id, changes)
    await session.commit()
    logger.info("Profile updated for user %s: %s", user.id, sorted(changes))
    return ProfileOut.model_validate(profile)


@router.get("/profile/nutrition-goals", response_model=NutritionGoalsOut)
async def get_nutrition_goals(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> NutritionGoalsOut:
    return await builders.nutrition_goals(session, user.id)


# ---------------------------------------------------------------------------
# /goals
# ---------------------------------------------------------------------------


@router.get("/goals/daily", response_model=DailyGoalOut)
async def get_daily_goal(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    day: date | None = Query(default=None, alias="date", description="Date (default: today)"),
) -> DailyGoalOut:
    target = day or local_today(settings.default_tz)
    return _goal_out(target, await DailyGoalRepo(session).get(user.id, target))


@router.patch("/goals/daily", response_model=DailyGoalOut)
async def patch_daily_goal(
    body: DailyGoalPatch,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> DailyGoalOut:
    update = DailyGoalUpdate(**body.model_dump(exclude={"date"}))
    goal = await DailyGoalRepo(session).upsert(user.id, body.date, update)
    await session.commit()
    return _goal_out(body.date, goal)


@router.post("/goals/daily/toggle", response_model=DailyGoalOut)
async def toggle_daily_goal(
    body: DailyGoalToggle,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> DailyGoalOut:
    repo = DailyGoalRepo(session)
    current = flags_of(await repo.get(user.id, body.date))
    goal = await repo.upsert(user.id, body.date, toggle_update(current, body.goal_id))
    await session.commit()
    return _goal_out(body.date, goal)


@router.get("/goals/week", response_model=WeekGoalsOut)
async def get_week_goals(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    start: date | None = Query(default=None, description="Any day in the week (default: this week)"),
) -> WeekGoalsOut:
    week_start, week_end = week_range(start or local_today(settings.default_tz))
    goals = await DailyGoalRepo(session).between(user.id, week_start, week_end)
    return WeekGoalsOut(start=week_start, end=week_end, days=[_goal_out(g.date, g) for g in goals])


@router.get("/goals/summary", response_model=WeeklyAggregateOut)
async def get_goals_summary(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    days: int = Query(default=7, ge=1, le=365),
) -> WeeklyAggregateOut:
    end = local_today(settings.default_tz)
    start = end - timedelta(days=days - 1)
    return await builders.goals_summary(session, user.id, start, end)


# ---------------------------------------------------------------------------
# /achievements
# ---------------------------------------------------------------------------


@router.get("/achievements/catalog")
async def achievements_catalog(_: User = Depends(get_current_user)) -> list[dict]:
    return [
        {
            "id": a.id,
            "name": a.name,
            "description": a.description,
            "icon": a.icon,
            "category": a.category,
            "tier": a.tier,
        }
        for a in list_achievements()
    ]


@router.get("/achievements", response_model=list[AchievementOut])
async def get_achievements(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[AchievementOut]:
    return _achievements_out(await AchievementRepo(session).find(user.id))


@router.get("/achievements/unviewed", response_model=list[AchievementOut])
async def get_unviewed_achievements(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[AchievementOut]:
    return _achievements_out(await AchievementRepo(session).find(user.id, unviewed_only=True))


@router.post("/achievements/viewed")
async def mark_achievements_viewed(
    body: AchievementsViewed,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    await AchievementRepo(session).mark_viewed(user.id, body.achievement_ids)
    await session.commit()
    return {"success": True}


@router.post("/achievements/check", response_model=AchievementCheckOut)
async def check_achievements(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> AchievementCheckOut:
    unlocked = await builders.check_achievements(session, user.id)
    await session.commit()
    return AchievementCheckOut(new_achievements=_achievements_out(unlocked))
