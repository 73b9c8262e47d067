"""
Integration tests for SqlAlchemyStore.

Runs the store against a throwaway SQLite file through aiosqlite, then drives
the level tracker and plan service over it end to end.
"""

import asyncio
from datetime import date, datetime, timedelta

import pytest
import pytest_asyncio

from prep_engine.core.clock import FixedClock
from prep_engine.core.errors import PersistenceError
from prep_engine.core.models import EnergyLog, MasteryLevel, TopicKey, TopicMasteryRecord
from prep_engine.db.database import create_engine_for, init_db, make_session_factory
from prep_engine.db.sql_store import SqlAlchemyStore
from prep_engine.study.level_tracker import AdaptiveLevelTracker
from prep_engine.study.study_service import StudyPlanService

NOW = datetime(2024, 3, 15, 9, 0, 0)
FRICTION = TopicKey("Physics", "Mechanics", "Friction")


# ============================================================================
# Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine_for(f"sqlite:///{tmp_path / 'prep.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sql_store(engine):
    return SqlAlchemyStore(make_session_factory(engine))


# ============================================================================
# Tests
# ============================================================================


class TestMasteryRows:
    @pytest.mark.asyncio
    async def test_missing_record(self, sql_store):
        assert await sql_store.load_mastery_record("alice", FRICTION) is None

    @pytest.mark.asyncio
    async def test_save_and_load(self, sql_store):
        record = TopicMasteryRecord(
            user_id="alice",
            key=FRICTION,
            current_level=2,
            accuracy=82.5,
            questions_attempted=16,
            last_practiced=NOW,
            stuck_days=1,
        )

        await sql_store.save_mastery_record(record)
        loaded = await sql_store.load_mastery_record("alice", FRICTION)

        assert loaded == record
        assert loaded.current_level is MasteryLevel.INTERMEDIATE

    @pytest.mark.asyncio
    async def test_save_upserts(self, sql_store):
        record = TopicMasteryRecord.fresh("alice", FRICTION)
        await sql_store.save_mastery_record(record)

        record.accuracy = 60.0
        record.questions_attempted = 5
        await sql_store.save_mastery_record(record)

        records = await sql_store.list_mastery_records("alice")
        assert len(records) == 1
        assert records[0].questions_attempted == 5

    @pytest.mark.asyncio
    async def test_list_sorted_and_scoped(self, sql_store):
        for user, topic in (("alice", "Waves"), ("alice", "Heat"), ("bob", "Optics")):
            key = TopicKey("Physics", "General", topic)
            await sql_store.save_mastery_record(TopicMasteryRecord.fresh(user, key))

        records = await sql_store.list_mastery_records("alice")

        assert [r.topic for r in records] == ["Heat", "Waves"]


class TestEnergyRows:
    @pytest.mark.asyncio
    async def test_window(self, sql_store):
        today = date(2024, 3, 15)
        for offset in range(9):
            log = EnergyLog(today - timedelta(days=offset), 5, 30, 70, offset % 2 == 0)
            await sql_store.append_energy_log("alice", log)

        logs = await sql_store.load_recent_energy_logs("alice", 7, today)

        assert len(logs) == 7
        assert logs[0].day == today - timedelta(days=6)
        assert logs[-1].day == today
        assert logs[-1].late_night_study is True

    @pytest.mark.asyncio
    async def test_duplicate_day_is_persistence_error(self, sql_store):
        log = EnergyLog(date(2024, 3, 15), 5, 30, 70)
        await sql_store.append_energy_log("alice", log)

        with pytest.raises(PersistenceError):
            await sql_store.append_energy_log("alice", log)


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_tracker_over_sql(self, sql_store):
        tracker = AdaptiveLevelTracker(sql_store, clock=FixedClock(NOW), persistence_timeout=5)

        await asyncio.gather(*(tracker.record_answer("alice", FRICTION, True) for _ in range(10)))

        saved = await sql_store.load_mastery_record("alice", FRICTION)
        assert saved.questions_attempted == 10
        assert saved.accuracy == 100.0
        assert saved.last_practiced == NOW

    @pytest.mark.asyncio
    async def test_level_up_persisted(self, sql_store):
        tracker = AdaptiveLevelTracker(sql_store, clock=FixedClock(NOW))

        for _ in range(25):
            result = await tracker.record_answer("alice", FRICTION, True)

        assert result.leveled_up
        assert await tracker.get_level("alice", FRICTION) == MasteryLevel.INTERMEDIATE

    @pytest.mark.asyncio
    async def test_plan_over_sql(self, sql_store):
        clock = FixedClock(NOW)
        tracker = AdaptiveLevelTracker(sql_store, clock=clock)
        for i in range(6):
            await tracker.record_answer("alice", FRICTION, i % 3 == 0)

        service = StudyPlanService(sql_store, clock)
        await service.log_day("alice", EnergyLog(NOW.date(), 6, 40, 35))
        plan = await service.build_plan("alice", daily_hours=5, days_to_exam=60)

        assert len(plan.weekly_plan) == 7
        assert FRICTION in plan.per_topic_minutes
