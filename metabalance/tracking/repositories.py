"""Repository classes, one per aggregate and scoped to a user id.

Repositories flush but never commit; the request handler owns the
transaction.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from metabalance.tracking.daily_wins import DailyGoalFlags, DailyGoalUpdate, DayRecord, merge_flags
from metabalance.tracking.tables import (
    Achievement,
    ChatMessage,
    DailyGoal,
    DailyInsight,
    FastingLog,
    FastingSchedule,
    MealLog,
    MetabolicProfile,
    ProgressLog,
    Supplement,
    SupplementLog,
    User,
    WaterIntake,
    WeeklyReflection,
    utcnow,
)


def flags_of(goal: DailyGoal | None) -> DailyGoalFlags | None:
    if goal is None:
        return None
    return DailyGoalFlags(
        meal_logging_complete=bool(goal.meal_logging_complete),
        protein_goal_complete=bool(goal.protein_goal_complete),
        fasting_goal_complete=bool(goal.fasting_goal_complete),
        exercise_goal_complete=bool(goal.exercise_goal_complete),
        water_goal_complete=bool(goal.water_goal_complete),
    )


def day_record(goal: DailyGoal) -> DayRecord:
    return DayRecord(day=goal.date, flags=flags_of(goal) or DailyGoalFlags())


class UserRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        q: Select[tuple[User]] = select(User).where(User.email == email.lower())
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def create(self, email: str, password_hash: str, name: str | None) -> User:
        u = User(email=email.lower(), password_hash=password_hash, name=name)
        self.db.add(u)
        await self.db.flush()
        return u

    async def touch_sign_in(self, user: User) -> None:
        user.last_signed_in = utcnow()
        await self.db.flush()


class ProfileRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> MetabolicProfile | None:
        q = select(MetabolicProfile).where(MetabolicProfile.user_id == user_id)
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def upsert(self, user_id: int, changes: dict[str, Any]) -> MetabolicProfile:
        profile = await self.get(user_id)
        if profile is None:
            profile = MetabolicProfile(user_id=user_id)
            self.db.add(profile)
        for key, value in changes.items():
            setattr(profile, key, value)
        await self.db.flush()
        await self.db.refresh(profile)
        return profile


class MealRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, user_id: int, **fields: Any) -> MealLog:
        m = MealLog(user_id=user_id, **fields)
        self.db.add(m)
        await self.db.flush()
        return m

    async def between(self, user_id: int, start_utc: dt.datetime, end_utc: dt.datetime) -> list[MealLog]:
        q = (
            select(MealLog)
            .where(MealLog.user_id == user_id)
            .where(MealLog.logged_at >= start_utc)
            .where(MealLog.logged_at < end_utc)
            .order_by(MealLog.logged_at.asc())
        )
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def count(self, user_id: int) -> int:
        res = await self.db.execute(select(func.count(MealLog.id)).where(MealLog.user_id == user_id))
        return int(res.scalar_one() or 0)

    async def delete(self, user_id: int, meal_id: int) -> bool:
        res = await self.db.execute(delete(MealLog).where(MealLog.id == meal_id).where(MealLog.user_id == user_id))
        return (res.rowcount or 0) > 0


class FastingRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_schedule(self, user_id: int, **fields: Any) -> FastingSchedule:
        """A new schedule deactivates every schedule the user had active."""
        await self.db.execute(
            update(FastingSchedule)
            .where(FastingSchedule.user_id == user_id)
            .where(FastingSchedule.is_active.is_(True))
            .values(is_active=False)
        )
        s = FastingSchedule(user_id=user_id, is_active=True, **fields)
        self.db.add(s)
        await self.db.flush()
        return s

    async def active_schedule(self, user_id: int) -> FastingSchedule | None:
        q = (
            select(FastingSchedule)
            .where(FastingSchedule.user_id == user_id)
            .where(FastingSchedule.is_active.is_(True))
            .order_by(FastingSchedule.created_at.desc())
            .limit(1)
        )
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def schedules(self, user_id: int) -> list[FastingSchedule]:
        q = select(FastingSchedule).where(FastingSchedule.user_id == user_id).order_by(FastingSchedule.created_at.desc())
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def get_schedule(self, user_id: int, schedule_id: int) -> FastingSchedule | None:
        q = select(FastingSchedule).where(FastingSchedule.id == schedule_id).where(FastingSchedule.user_id == user_id)
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def add_log(self, user_id: int, **fields: Any) -> FastingLog:
        log = FastingLog(user_id=user_id, **fields)
        self.db.add(log)
        await self.db.flush()
        return log

    async def logs(
        self,
        user_id: int,
        schedule_id: int,
        start_utc: dt.datetime | None = None,
        end_utc: dt.datetime | None = None,
    ) -> list[FastingLog]:
        q = select(FastingLog).where(FastingLog.user_id == user_id).where(FastingLog.schedule_id == schedule_id)
        if start_utc is not None:
            q = q.where(FastingLog.date >= start_utc)
        if end_utc is not None:
            q = q.where(FastingLog.date < end_utc)
        res = await self.db.execute(q.order_by(FastingLog.date.desc()))
        return list(res.scalars().all())


class SupplementRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: int, **fields: Any) -> Supplement:
        s = Supplement(user_id=user_id, is_active=True, **fields)
        self.db.add(s)
        await self.db.flush()
        return s

    async def get(self, user_id: int, supplement_id: int) -> Supplement | None:
        q = select(Supplement).where(Supplement.id == supplement_id).where(Supplement.user_id == user_id)
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def find(self, user_id: int, active_only: bool = False) -> list[Supplement]:
        q = select(Supplement).where(Supplement.user_id == user_id)
        if active_only:
            q = q.where(Supplement.is_active.is_(True))
        res = await self.db.execute(q.order_by(Supplement.created_at.desc()))
        return list(res.scalars().all())

    async def update(self, supplement: Supplement, changes: dict[str, Any]) -> Supplement:
        for key, value in changes.items():
            setattr(supplement, key, value)
        await self.db.flush()
        await self.db.refresh(supplement)
        return supplement

    async def delete(self, user_id: int, supplement_id: int) -> bool:
        res = await self.db.execute(
            delete(Supplement).where(Supplement.id == supplement_id).where(Supplement.user_id == user_id)
        )
        return (res.rowcount or 0) > 0

    async def add_log(self, user_id: int, **fields: Any) -> SupplementLog:
        log = SupplementLog(user_id=user_id, **fields)
        self.db.add(log)
        await self.db.flush()
        return log

    async def logs(
        self,
        user_id: int,
        supplement_id: int,
        start_utc: dt.datetime | None = None,
        end_utc: dt.datetime | None = None,
    ) -> list[SupplementLog]:
        q = (
            select(SupplementLog)
            .where(SupplementLog.user_id == user_id)
            .where(SupplementLog.supplement_id == supplement_id)
        )
        if start_utc is not None:
            q = q.where(SupplementLog.taken_at >= start_utc)
        if end_utc is not None:
            q = q.where(SupplementLog.taken_at < end_utc)
        res = await self.db.execute(q.order_by(SupplementLog.taken_at.desc()))
        return list(res.scalars().all())


class ProgressRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, user_id: int, **fields: Any) -> ProgressLog:
        log = ProgressLog(user_id=user_id, **fields)
        self.db.add(log)
        await self.db.flush()
        return log

    async def find(
        self,
        user_id: int,
        start_utc: dt.datetime | None = None,
        end_utc: dt.datetime | None = None,
    ) -> list[ProgressLog]:
        """Most recent first."""
        q = select(ProgressLog).where(ProgressLog.user_id == user_id)
        if start_utc is not None:
            q = q.where(ProgressLog.logged_at >= start_utc)
        if end_utc is not None:
            q = q.where(ProgressLog.logged_at < end_utc)
        res = await self.db.execute(q.order_by(ProgressLog.logged_at.desc()))
        return list(res.scalars().all())

    async def latest(self, user_id: int) -> ProgressLog | None:
        q = select(ProgressLog).where(ProgressLog.user_id == user_id).order_by(ProgressLog.logged_at.desc()).limit(1)
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def latest_weight(self, user_id: int) -> float | None:
        q = (
            select(ProgressLog.weight)
            .where(ProgressLog.user_id == user_id)
            .where(ProgressLog.weight.is_not(None))
            .order_by(ProgressLog.logged_at.desc())
            .limit(1)
        )
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def earliest_weight(self, user_id: int) -> float | None:
        q = (
            select(ProgressLog.weight)
            .where(ProgressLog.user_id == user_id)
            .where(ProgressLog.weight.is_not(None))
            .order_by(ProgressLog.logged_at.asc())
            .limit(1)
        )
        res = await self.db.execute(q)
        return res.scalar_one_or_none()


class DailyGoalRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int, day: dt.date) -> DailyGoal | None:
        q: Select[tuple[DailyGoal]] = select(DailyGoal).where(DailyGoal.user_id == user_id).where(DailyGoal.date == day)
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def upsert(self, user_id: int, day: dt.date, changes: DailyGoalUpdate) -> DailyGoal:
        """Merge the set flags into the (user, day) row and recompute its win score."""
        goal = await self.get(user_id, day)
        merged = merge_flags(flags_of(goal), changes)
        if goal is None:
            goal = DailyGoal(user_id=user_id, date=day)
            self.db.add(goal)
        goal.meal_logging_complete = merged.meal_logging_complete
        goal.protein_goal_complete = merged.protein_goal_complete
        goal.fasting_goal_complete = merged.fasting_goal_complete
        goal.exercise_goal_complete = merged.exercise_goal_complete
        goal.water_goal_complete = merged.water_goal_complete
        goal.win_score = merged.win_score
        await self.db.flush()
        return goal

    async def between(self, user_id: int, start: dt.date, end: dt.date) -> list[DailyGoal]:
        """Inclusive on both ends, oldest first."""
        q = (
            select(DailyGoal)
            .where(DailyGoal.user_id == user_id)
            .where(DailyGoal.date >= start)
            .where(DailyGoal.date <= end)
            .order_by(DailyGoal.date.asc())
        )
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def all_records(self, user_id: int) -> list[DayRecord]:
        q = select(DailyGoal).where(DailyGoal.user_id == user_id).order_by(DailyGoal.date.desc())
        res = await self.db.execute(q)
        return [day_record(g) for g in res.scalars().all()]


class ReflectionRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: int, **fields: Any) -> WeeklyReflection:
        r = WeeklyReflection(user_id=user_id, **fields)
        self.db.add(r)
        await self.db.flush()
        await self.db.refresh(r)
        return r

    async def for_week(self, user_id: int, week_start: dt.date) -> WeeklyReflection | None:
        q = (
            select(WeeklyReflection)
            .where(WeeklyReflection.user_id == user_id)
            .where(WeeklyReflection.week_start_date == week_start)
            .order_by(WeeklyReflection.created_at.desc())
            .limit(1)
        )
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def recent(self, user_id: int, limit: int = 10) -> list[WeeklyReflection]:
        q = (
            select(WeeklyReflection)
            .where(WeeklyReflection.user_id == user_id)
            .order_by(WeeklyReflection.week_start_date.desc())
            .limit(limit)
        )
        res = await self.db.execute(q)
        return list(res.scalars().all())


class WaterRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int, day: dt.date) -> WaterIntake | None:
        q = select(WaterIntake).where(WaterIntake.user_id == user_id).where(WaterIntake.date == day)
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def upsert(self, user_id: int, day: dt.date, glasses: int) -> WaterIntake:
        w = await self.get(user_id, day)
        if w is None:
            w = WaterIntake(user_id=user_id, date=day, glasses_consumed=glasses)
            self.db.add(w)
        else:
            w.glasses_consumed = glasses
        await self.db.flush()
        return w

    async def between(self, user_id: int, start: dt.date, end: dt.date) -> list[WaterIntake]:
        q = (
            select(WaterIntake)
            .where(WaterIntake.user_id == user_id)
            .where(WaterIntake.date >= start)
            .where(WaterIntake.date <= end)
            .order_by(WaterIntake.date.asc())
        )
        res = await self.db.execute(q)
        return list(res.scalars().all())


class AchievementRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(self, user_id: int, unviewed_only: bool = False) -> list[Achievement]:
        q = select(Achievement).where(Achievement.user_id == user_id)
        if unviewed_only:
            q = q.where(Achievement.viewed.is_(False))
        res = await self.db.execute(q.order_by(Achievement.unlocked_at.desc(), Achievement.id.desc()))
        return list(res.scalars().all())

    async def held_ids(self, user_id: int) -> set[str]:
        res = await self.db.execute(select(Achievement.achievement_id).where(Achievement.user_id == user_id))
        return set(res.scalars().all())

    async def unlock(self, user_id: int, achievement_id: str) -> Achievement | None:
        """Insert unless already held. Returns None for a duplicate."""
        if achievement_id in await self.held_ids(user_id):
            return None
        a = Achievement(user_id=user_id, achievement_id=achievement_id, unlocked_at=utcnow(), viewed=False)
        self.db.add(a)
        await self.db.flush()
        return a

    async def mark_viewed(self, user_id: int, achievement_ids: list[str]) -> None:
        if not achievement_ids:
            return
        await self.db.execute(
            update(Achievement)
            .where(Achievement.user_id == user_id)
            .where(Achievement.achievement_id.in_(achievement_ids))
            .values(viewed=True)
        )


class ChatRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, user_id: int, role: str, content: str) -> ChatMessage:
        m = ChatMessage(user_id=user_id, role=role, content=content)
        self.db.add(m)
        await self.db.flush()
        return m

    async def history(self, user_id: int, limit: int = 50) -> list[ChatMessage]:
        """Last ``limit`` messages, oldest first."""
        q = (
            select(ChatMessage)
            .where(ChatMessage.user_id == user_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
        )
        res = await self.db.execute(q)
        return list(reversed(res.scalars().all()))

    async def clear(self, user_id: int) -> None:
        await self.db.execute(delete(ChatMessage).where(ChatMessage.user_id == user_id))


class InsightRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def for_day(self, user_id: int, day: dt.date) -> DailyInsight | None:
        q = (
            select(DailyInsight)
            .where(DailyInsight.user_id == user_id)
            .where(DailyInsight.date == day)
            .order_by(DailyInsight.id.desc())
            .limit(1)
        )
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def add(self, user_id: int, day: dt.date, insight_type: str, title: str, content: str) -> DailyInsight:
        i = DailyInsight(user_id=user_id, date=day, insight_type=insight_type, title=title, content=content)
        self.db.add(i)
        await self.db.flush()
        return i

    async def mark_viewed(self, user_id: int, insight_id: int) -> bool:
        res = await self.db.execute(
            update(DailyInsight)
            .where(DailyInsight.id == insight_id)
            .where(DailyInsight.user_id == user_id)
            .values(viewed=True, viewed_at=utcnow())
        )
        return (res.rowcount or 0) > 0
