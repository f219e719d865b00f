"""Logging endpoints for meals, food lookup, fasting, supplements, progress and water."""

from __future__ import annotations

import base64
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from metabalance.auth import get_current_user
from metabalance.config import settings
from metabalance.db import get_session
from metabalance.tracking import builders, food_lookup
from metabalance.tracking.daily_wins import DailyGoalUpdate
from metabalance.tracking.dates import local_today, to_naive_utc, utc_day_range
from metabalance.tracking.food_lookup import FoodLookupError
from metabalance.tracking.models import (
    DailyNutritionOut,
    DailyTotalsOut,
    FastingLogCreate,
    FastingLogOut,
    FastingScheduleCreate,
    FastingScheduleOut,
    FoodNutrition,
    FoodSearchResult,
    MealCreate,
    MealOut,
    ProgressCreate,
    ProgressExport,
    ProgressOut,
    SupplementCreate,
    SupplementLogCreate,
    SupplementLogOut,
    SupplementOut,
    SupplementUpdate,
    WaterOut,
    WaterUpdate,
)
from metabalance.tracking.pdf_report import render_progress_pdf
from metabalance.tracking.repositories import (
    DailyGoalRepo,
    FastingRepo,
    MealRepo,
    ProgressRepo,
    SupplementRepo,
    WaterRepo,
)
from metabalance.tracking.tables import User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["logs"])

WATER_GOAL_GLASSES = 8


def _optional_range(start: date | None, end: date | None):
    """UTC bounds for optional inclusive local dates; a missing side is unbounded."""
    tz = settings.default_tz
    start_utc = utc_day_range(start, tz)[0] if start else None
    end_utc = utc_day_range(end, tz)[1] if end else None
    return start_utc, end_utc


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise HTTPException(status_code=422, detail="'end' must not be before 'start'")


# ---------------------------------------------------------------------------
# /meals
# ---------------------------------------------------------------------------


@router.get("/meals", response_model=list[MealOut])
async def get_meals(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    day: date | None = Query(default=None, alias="date", description="Local date (default: today)"),
) -> list[MealOut]:
    target = day or local_today(settings.default_tz)
    start_utc, end_utc = utc_day_range(target, settings.default_tz)
    meals = await MealRepo(session).between(user.id, start_utc, end_utc)
    return [MealOut.model_validate(m) for m in meals]


@router.get("/meals/totals", response_model=DailyTotalsOut)
async def get_meal_totals(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    day: date | None = Query(default=None, alias="date"),
) -> DailyTotalsOut:
    target = day or local_today(settings.default_tz)
    start_utc, end_utc = utc_day_range(target, settings.default_tz)
    totals = builders.sum_meals(await MealRepo(session).between(user.id, start_utc, end_utc))
    goals = await builders.nutrition_goals(session, user.id)
    return DailyTotalsOut(date=target, totals=totals, goals=goals, progress_pct=builders.progress_against(totals, goals))


@router.get("/meals/range", response_model=list[DailyNutritionOut])
async def get_meal_range(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    start: date = Query(...),
    end: date = Query(...),
) -> list[DailyNutritionOut]:
    _check_range(start, end)
    return await builders.daily_nutrition(session, user.id, start, end, settings.default_tz)


@router.post("/meals", response_model=MealOut, status_code=201)
async def create_meal(
    body: MealCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> MealOut:
    fields = body.model_dump()
    fields["logged_at"] = to_naive_utc(body.logged_at)
    meal = await MealRepo(session).add(user.id, **fields)
    await session.commit()
    return MealOut.model_validate(meal)


@router.delete("/meals/{meal_id}")
async def delete_meal(
    meal_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    if not await MealRepo(session).delete(user.id, meal_id):
        raise HTTPException(status_code=404, detail=f"Meal {meal_id} not found")
    await session.commit()
    return {"success": True}


# ---------------------------------------------------------------------------
# /food
# ---------------------------------------------------------------------------


@router.get("/food/search", response_model=list[FoodSearchResult])
async def search_food(
    _: User = Depends(get_current_user),
    query: str = Query(..., min_length=1),
    limit: int = Query(default=10, ge=1, le=50),
) -> list[FoodSearchResult]:
    try:
        return await food_lookup.search_foods(query, limit)
    except FoodLookupError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@router.get("/food/{ingredient_id}/nutrition", response_model=FoodNutrition)
async def food_nutrition(
    ingredient_id: int,
    _: User = Depends(get_current_user),
    amount: float = Query(default=100, gt=0),
    unit: str = Query(default="g", min_length=1),
) -> FoodNutrition:
    try:
        return await food_lookup.food_nutrition(ingredient_id, amount, unit)
    except FoodLookupError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


# ---------------------------------------------------------------------------
# /fasting
# ---------------------------------------------------------------------------


@router.get("/fasting/active", response_model=FastingScheduleOut | None)
async def get_active_fasting(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> FastingScheduleOut | None:
    schedule = await FastingRepo(session).active_schedule(user.id)
    return FastingScheduleOut.model_validate(schedule) if schedule else None


@router.get("/fasting/schedules", response_model=list[FastingScheduleOut])
async def get_fasting_schedules(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[FastingScheduleOut]:
    return [FastingScheduleOut.model_validate(s) for s in await FastingRepo(session).schedules(user.id)]


@router.post("/fasting/schedules", response_model=FastingScheduleOut, status_code=201)
async def create_fasting_schedule(
    body: FastingScheduleCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> FastingScheduleOut:
    fields = body.model_dump()
    fields["start_date"] = to_naive_utc(body.start_date)
    fields["end_date"] = to_naive_utc(body.end_date) if body.end_date else None
    schedule = await FastingRepo(session).create_schedule(user.id, **fields)
    await session.commit()
    return FastingScheduleOut.model_validate(schedule)


@router.post("/fasting/logs", response_model=FastingLogOut, status_code=201)
async def create_fasting_log(
    body: FastingLogCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> FastingLogOut:
    repo = FastingRepo(session)
    if await repo.get_schedule(user.id, body.schedule_id) is None:
        raise HTTPException(status_code=404, detail=f"Fasting schedule {body.schedule_id} not found")
    fields = body.model_dump()
    for key in ("date", "actual_eating_start", "actual_eating_end"):
        if fields[key] is not None:
            fields[key] = to_naive_utc(fields[key])
    log = await repo.add_log(user.id, **fields)
    await session.commit()
    return FastingLogOut.model_validate(log)


@router.get("/fasting/logs", response_model=list[FastingLogOut])
async def get_fasting_logs(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    schedule_id: int = Query(...),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
) -> list[FastingLogOut]:
    start_utc, end_utc = _optional_range(start, end)
    logs = await FastingRepo(session).logs(user.id, schedule_id, start_utc, end_utc)
    return [FastingLogOut.model_validate(log) for log in logs]


# ---------------------------------------------------------------------------
# /supplements
# ---------------------------------------------------------------------------


@router.get("/supplements", response_model=list[SupplementOut])
async def get_supplements(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    active_only: bool = Query(default=False),
) -> list[SupplementOut]:
    return [SupplementOut.model_validate(s) for s in await SupplementRepo(session).find(user.id, active_only)]


@router.post("/supplements", response_model=SupplementOut, status_code=201)
async def create_supplement(
    body: SupplementCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> SupplementOut:
    fields = body.model_dump()
    fields["start_date"] = to_naive_utc(body.start_date)
    fields["end_date"] = to_naive_utc(body.end_date) if body.end_date else None
    supplement = await SupplementRepo(session).create(user.id, **fields)
    await session.commit()
    return SupplementOut.model_validate(supplement)


@router.patch("/supplements/{supplement_id}", response_model=SupplementOut)
async def update_supplement(
    supplement_id: int,
    body: SupplementUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> SupplementOut:
    repo = SupplementRepo(session)
    supplement = await repo.get(user.id, supplement_id)
    if supplement is None:
        raise HTTPException(status_code=404, detail=f"Supplement {supplement_id} not found")
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "end_date" in changes:
        changes["end_date"] = to_naive_utc(changes["end_date"])
    supplement = await repo.update(supplement, changes)
    await session.commit()
    return SupplementOut.model_validate(supplement)


@router.delete("/supplements/{supplement_id}")
async def delete_supplement(
    supplement_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    if not await SupplementRepo(session).delete(user.id, supplement_id):
        raise HTTPException(status_code=404, detail=f"Supplement {supplement_id} not found")
    await session.commit()
    return {"success": True}


@router.post("/supplements/logs", response_model=SupplementLogOut, status_code=201)
async def create_supplement_log(
    body: SupplementLogCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> SupplementLogOut:
    repo = SupplementRepo(session)
    if await repo.get(user.id, body.supplement_id) is None:
        raise HTTPException(status_code=404, detail=f"Supplement {body.supplement_id} not found")
    fields = body.model_dump()
    fields["taken_at"] = to_naive_utc(body.taken_at)
    log = await repo.add_log(user.id, **fields)
    await session.commit()
    return SupplementLogOut.model_validate(log)


@router.get("/supplements/logs", response_model=list[SupplementLogOut])
async def get_supplement_logs(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    supplement_id: int = Query(...),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
) -> list[SupplementLogOut]:
    start_utc, end_utc = _optional_range(start, end)
    logs = await SupplementRepo(session).logs(user.id, supplement_id, start_utc, end_utc)
    return [SupplementLogOut.model_validate(log) for log in logs]


# ---------------------------------------------------------------------------
# /progress
# ---------------------------------------------------------------------------


@router.get("/progress", response_model=list[ProgressOut])
async def get_progress(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
) -> list[ProgressOut]:
    start_utc, end_utc = _optional_range(start, end)
    return [ProgressOut.model_validate(p) for p in await ProgressRepo(session).find(user.id, start_utc, end_utc)]


@router.get("/progress/latest", response_model=ProgressOut | None)
async def get_latest_progress(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ProgressOut | None:
    latest = await ProgressRepo(session).latest(user.id)
    return ProgressOut.model_validate(latest) if latest else None


@router.post("/progress", response_model=ProgressOut, status_code=201)
async def create_progress(
    body: ProgressCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ProgressOut:
    fields = body.model_dump()
    fields["logged_at"] = to_naive_utc(body.logged_at)
    log = await ProgressRepo(session).add(user.id, **fields)
    await session.commit()
    return ProgressOut.model_validate(log)


@router.get("/progress/export", response_model=ProgressExport)
async def export_progress(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ProgressExport:
    today = local_today(settings.default_tz)
    report = await builders.progress_report(session, user.id, user.name or "User", today, settings.default_tz)
    pdf = render_progress_pdf(report)
    return ProgressExport(
        pdf=base64.b64encode(pdf).decode("ascii"),
        filename=f"metabalance-progress-{today.isoformat()}.pdf",
    )


# ---------------------------------------------------------------------------
# /water
# ---------------------------------------------------------------------------


@router.put("/water", response_model=WaterOut)
async def update_water(
    body: WaterUpdate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> WaterOut:
    water = await WaterRepo(session).upsert(user.id, body.date, body.glasses_consumed)
    if body.glasses_consumed >= WATER_GOAL_GLASSES:
        await DailyGoalRepo(session).upsert(user.id, body.date, DailyGoalUpdate(water_goal_complete=True))
    await session.commit()
    return WaterOut(date=water.date, glasses_consumed=water.glasses_consumed)


@router.get("/water/today", response_model=WaterOut)
async def get_water_today(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    day: date | None = Query(default=None, alias="date"),
) -> WaterOut:
    target = day or local_today(settings.default_tz)
    water = await WaterRepo(session).get(user.id, target)
    return WaterOut(date=target, glasses_consumed=water.glasses_consumed if water else 0)


@router.get("/water/range", response_model=list[WaterOut])
async def get_water_range(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    start: date = Query(...),
    end: date = Query(...),
) -> list[WaterOut]:
    _check_range(start, end)
    rows = await WaterRepo(session).between(user.id, start, end)
    return [WaterOut(date=w.date, glasses_consumed=w.glasses_consumed) for w in rows]
