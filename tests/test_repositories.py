"""Repository tests against an in-memory SQLite database."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from metabalance.db import Database, DatabaseUnavailable, normalize_url
from metabalance.tracking import builders
from metabalance.tracking.daily_wins import DailyGoalUpdate
from metabalance.tracking.repositories import (
    AchievementRepo,
    ChatRepo,
    DailyGoalRepo,
    FastingRepo,
    MealRepo,
    ProfileRepo,
    ProgressRepo,
    UserRepo,
    WaterRepo,
)


@pytest.fixture()
async def user_id(session) -> int:
    user = await UserRepo(session).create("Sam@Example.com", "hash", "Sam")
    await session.commit()
    return user.id


class TestUserRepo:
    @pytest.mark.asyncio
    async def test_email_lowercased(self, session, user_id):
        user = await UserRepo(session).get_by_email("SAM@example.com")
        assert user is not None
        assert user.id == user_id
        assert user.email == "sam@example.com"


class TestDailyGoalRepo:
    @pytest.mark.asyncio
    async def test_upsert_merges_and_scores(self, session, user_id):
        repo = DailyGoalRepo(session)
        day = date(2026, 3, 10)
        await repo.upsert(user_id, day, DailyGoalUpdate(meal_logging_complete=True, protein_goal_complete=True))
        goal = await repo.upsert(user_id, day, DailyGoalUpdate(meal_logging_complete=False))
        await session.commit()
        assert goal.protein_goal_complete is True
        assert goal.meal_logging_complete is False
        assert goal.win_score == 1
        assert len(await repo.between(user_id, day, day)) == 1

    @pytest.mark.asyncio
    async def test_all_records_newest_first(self, session, user_id):
        repo = DailyGoalRepo(session)
        for d in (1, 3, 2):
            await repo.upsert(user_id, date(2026, 3, d), DailyGoalUpdate(water_goal_complete=True))
        records = await repo.all_records(user_id)
        assert [r.day.day for r in records] == [3, 2, 1]


class TestMealRepo:
    @pytest.mark.asyncio
    async def test_between_and_delete(self, session, user_id):
        repo = MealRepo(session)
        meal = await repo.add(
            user_id, logged_at=datetime(2026, 3, 10, 8, 0), meal_type="breakfast", food_name="Eggs", calories=300
        )
        await repo.add(user_id, logged_at=datetime(2026, 3, 11, 8, 0), meal_type="breakfast", food_name="Oats")
        found = await repo.between(user_id, datetime(2026, 3, 10), datetime(2026, 3, 11))
        assert [m.food_name for m in found] == ["Eggs"]
        assert await repo.count(user_id) == 2
        assert await repo.delete(user_id, meal.id) is True
        assert await repo.delete(user_id, meal.id) is False


class TestFastingRepo:
    @pytest.mark.asyncio
    async def test_new_schedule_deactivates_old(self, session, user_id):
        repo = FastingRepo(session)
        first = await repo.create_schedule(user_id, fasting_type="tre", start_date=datetime(2026, 3, 1))
        second = await repo.create_schedule(user_id, fasting_type="adf", start_date=datetime(2026, 3, 5))
        await session.commit()
        await session.refresh(first)
        assert first.is_active is False
        active = await repo.active_schedule(user_id)
        assert active is not None
        assert active.id == second.id


class TestProgressRepo:
    @pytest.mark.asyncio
    async def test_latest_and_earliest(self, session, user_id):
        repo = ProgressRepo(session)
        await repo.add(user_id, logged_at=datetime(2026, 3, 1), weight=250.0)
        await repo.add(user_id, logged_at=datetime(2026, 3, 8), weight=246.5)
        await repo.add(user_id, logged_at=datetime(2026, 3, 9), notes="no weigh-in")
        latest = await repo.latest(user_id)
        assert latest is not None
        assert latest.notes == "no weigh-in"
        assert await repo.earliest_weight(user_id) == 250.0
        assert [p.logged_at.day for p in await repo.find(user_id)] == [9, 8, 1]


class TestWaterRepo:
    @pytest.mark.asyncio
    async def test_upsert_replaces(self, session, user_id):
        repo = WaterRepo(session)
        await repo.upsert(user_id, date(2026, 3, 10), 3)
        await repo.upsert(user_id, date(2026, 3, 10), 6)
        rows = await repo.between(user_id, date(2026, 3, 1), date(2026, 3, 31))
        assert [(w.date, w.glasses_consumed) for w in rows] == [(date(2026, 3, 10), 6)]


class TestAchievementRepo:
    @pytest.mark.asyncio
    async def test_unlock_once(self, session, user_id):
        repo = AchievementRepo(session)
        assert await repo.unlock(user_id, "streak_7") is not None
        assert await repo.unlock(user_id, "streak_7") is None
        assert await repo.held_ids(user_id) == {"streak_7"}

    @pytest.mark.asyncio
    async def test_mark_viewed(self, session, user_id):
        repo = AchievementRepo(session)
        await repo.unlock(user_id, "streak_7")
        await repo.unlock(user_id, "first_week")
        await repo.mark_viewed(user_id, ["streak_7"])
        await session.commit()
        unviewed = await repo.find(user_id, unviewed_only=True)
        assert [a.achievement_id for a in unviewed] == ["first_week"]


class TestChatRepo:
    @pytest.mark.asyncio
    async def test_history_oldest_first_with_limit(self, session, user_id):
        repo = ChatRepo(session)
        for i in range(5):
            await repo.add(user_id, "user", f"m{i}")
        history = await repo.history(user_id, limit=3)
        assert [m.content for m in history] == ["m2", "m3", "m4"]
        await repo.clear(user_id)
        assert await repo.history(user_id) == []


class TestBuilders:
    @pytest.mark.asyncio
    async def test_user_stats(self, session, user_id):
        await ProfileRepo(session).upsert(user_id, {"current_weight": 260})
        progress = ProgressRepo(session)
        await progress.add(user_id, logged_at=datetime(2026, 3, 1), weight=255.0)
        await progress.add(user_id, logged_at=datetime(2026, 3, 20), weight=244.0)
        goals = DailyGoalRepo(session)
        all_flags = DailyGoalUpdate(True, True, True, True, True)
        for d in range(10, 13):
            await goals.upsert(user_id, date(2026, 3, d), all_flags)
        await MealRepo(session).add(
            user_id, logged_at=datetime(2026, 3, 10, 12), meal_type="lunch", food_name="Salad"
        )

        stats = await builders.user_stats(session, user_id)
        assert stats.starting_weight == 255.0
        assert stats.current_weight == 244.0
        assert stats.weight_lost == 11.0
        assert stats.current_streak == 3
        assert stats.consecutive_perfect_days == 3
        assert stats.total_perfect_days == 3
        assert stats.total_meals_logged == 1
        assert stats.days_tracking == 3

    @pytest.mark.asyncio
    async def test_user_stats_skips_entries_without_weight(self, session, user_id):
        await ProfileRepo(session).upsert(user_id, {"current_weight": 300})
        progress = ProgressRepo(session)
        await progress.add(user_id, logged_at=datetime(2026, 1, 1), weight=300.0)
        await progress.add(user_id, logged_at=datetime(2026, 2, 1), weight=280.0)
        await progress.add(user_id, logged_at=datetime(2026, 2, 2), mood="good")

        assert await progress.latest_weight(user_id) == 280.0
        stats = await builders.user_stats(session, user_id)
        assert stats.current_weight == 280.0
        assert stats.starting_weight == 300.0
        assert stats.weight_lost == 20.0
        unlocked = [a.achievement_id for a in await builders.check_achievements(session, user_id)]
        assert "weight_5lbs" in unlocked
        assert "weight_10lbs" in unlocked

    @pytest.mark.asyncio
    async def test_check_achievements_inserts_new_only(self, session, user_id):
        await MealRepo(session).add(
            user_id, logged_at=datetime(2026, 3, 10, 12), meal_type="lunch", food_name="Salad"
        )
        first = await builders.check_achievements(session, user_id)
        assert [a.achievement_id for a in first] == ["first_meal_logged"]
        assert await builders.check_achievements(session, user_id) == []

    def test_goals_for_missing_profile_default(self):
        goals = builders.goals_for_profile(None)
        assert goals.is_default is True
        assert goals.daily_calories == 2000


class TestDatabase:
    def test_normalize_url(self):
        assert normalize_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
        assert normalize_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
        assert normalize_url("sqlite+aiosqlite://") == "sqlite+aiosqlite://"

    def test_bad_url_unavailable(self):
        db = Database("nosuchdialect://nowhere")
        with pytest.raises(DatabaseUnavailable):
            db.session()

    @pytest.mark.asyncio
    async def test_session_builds_engine_lazily(self):
        db = Database("sqlite+aiosqlite://")
        async with db.session() as s:
            assert s.bind is db.engine
        await db.dispose()
