"""AI coaching endpoints: daily insight, chat and weekly reflections."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from metabalance.auth import get_current_user
from metabalance.config import settings
from metabalance.db import get_session
from metabalance.tracking import builders, coaching
from metabalance.tracking.daily_wins import average_win_score, days_logged
from metabalance.tracking.dates import local_today, week_range
from metabalance.tracking.llm import LLMError
from metabalance.tracking.models import ChatMessageOut, ChatReply, ChatRequest, InsightOut, ReflectionCreate, ReflectionOut
from metabalance.tracking.repositories import (
    ChatRepo,
    DailyGoalRepo,
    InsightRepo,
    ProfileRepo,
    ReflectionRepo,
    day_record,
)
from metabalance.tracking.tables import User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["coach"])


# ---------------------------------------------------------------------------
# /insights
# ---------------------------------------------------------------------------


@router.get("/insights/today", response_model=InsightOut)
async def get_today_insight(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> InsightOut:
    """One insight per user per local day; generated on first request."""
    today = local_today(settings.default_tz)
    repo = InsightRepo(session)
    existing = await repo.for_day(user.id, today)
    if existing is not None:
        return InsightOut.model_validate(existing)

    ctx = await builders.insight_context(session, user.id, today, settings.default_tz)
    generated = await coaching.generate_daily_insight(ctx)
    insight = await repo.add(user.id, today, generated.insight_type, generated.title, generated.content)
    await session.commit()
    return InsightOut.model_validate(insight)


@router.post("/insights/{insight_id}/viewed")
async def mark_insight_viewed(
    insight_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    if not await InsightRepo(session).mark_viewed(user.id, insight_id):
        raise HTTPException(status_code=404, detail=f"Insight {insight_id} not found")
    await session.commit()
    return {"success": True}


# ---------------------------------------------------------------------------
# /chat
# ---------------------------------------------------------------------------


@router.get("/chat/history", response_model=list[ChatMessageOut])
async def get_chat_history(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    limit: int = Query(default=50, ge=1, le=500),
) -> list[ChatMessageOut]:
    return [ChatMessageOut.model_validate(m) for m in await ChatRepo(session).history(user.id, limit)]


@router.post("/chat", response_model=ChatReply)
async def send_chat_message(
    body: ChatRequest,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ChatReply:
    repo = ChatRepo(session)
    history = await repo.history(user.id, coaching.CHAT_CONTEXT_MESSAGES)
    await repo.add(user.id, "user", body.message)
    # The user message is kept even when the model call fails.
    await session.commit()

    profile = await ProfileRepo(session).get(user.id)
    try:
        reply = await coaching.coach_reply(profile, history, body.message)
    except LLMError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    await repo.add(user.id, "assistant", reply)
    await session.commit()
    return ChatReply(message=reply)


@router.delete("/chat/history")
async def clear_chat_history(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    await ChatRepo(session).clear(user.id)
    await session.commit()
    return {"success": True}


# ---------------------------------------------------------------------------
# /reflections
# ---------------------------------------------------------------------------


@router.post("/reflections", response_model=ReflectionOut, status_code=201)
async def create_reflection(
    body: ReflectionCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReflectionOut:
    week_start, week_end = week_range(body.week_start_date)
    goals = await DailyGoalRepo(session).between(user.id, week_start, week_end)
    records = [day_record(g) for g in goals]
    logged = days_logged(records)
    avg = average_win_score([r.win_score for r in records])

    profile = await ProfileRepo(session).get(user.id)
    ai_insights = await coaching.reflection_feedback(
        profile, body.went_well, body.challenges, body.next_week_plan, logged, avg
    )

    reflection = await ReflectionRepo(session).create(
        user.id,
        week_start_date=week_start,
        week_end_date=week_end,
        went_well=body.went_well,
        challenges=body.challenges,
        next_week_plan=body.next_week_plan,
        weight_change=body.weight_change,
        ai_insights=ai_insights,
        days_logged=logged,
        avg_win_score=avg,
    )
    await session.commit()
    return ReflectionOut.model_validate(reflection)


@router.get("/reflections", response_model=ReflectionOut | None)
async def get_reflection(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    week_start: date = Query(...),
) -> ReflectionOut | None:
    start, _ = week_range(week_start)
    reflection = await ReflectionRepo(session).for_week(user.id, start)
    return ReflectionOut.model_validate(reflection) if reflection else None


@router.get("/reflections/recent", response_model=list[ReflectionOut])
async def get_recent_reflections(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
    limit: int = Query(default=10, ge=1, le=100),
) -> list[ReflectionOut]:
    return [ReflectionOut.model_validate(r) for r in await ReflectionRepo(session).recent(user.id, limit)]
