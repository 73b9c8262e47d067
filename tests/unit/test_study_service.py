"""
Unit tests for StudyPlanService.

Tests:
- Plan building from stored mastery and energy data
- Rest day insertion when burnout is detected
- Rank projection and motivation in the plan bundle
- Revisions due and day logging
"""

from datetime import timedelta

import pytest

from prep_engine.core.errors import InvalidInputError, PersistenceError
from prep_engine.core.models import EnergyLog, MotivationKind, TaskType
from prep_engine.study.study_service import StudyPlanService, overall_accuracy, study_streak


@pytest.fixture
def service(store, clock):
    return StudyPlanService(store, clock)


async def seed_topics(store, make_record, now):
    for record in (
        make_record(topic="Friction", accuracy=45, attempts=12, last_practiced=now - timedelta(days=3)),
        make_record(topic="Waves", accuracy=72, attempts=20, last_practiced=now - timedelta(days=1)),
        make_record(topic="Optics", accuracy=91, attempts=35, last_practiced=now - timedelta(days=40)),
        make_record(topic="Heat", accuracy=88, attempts=3, last_practiced=now),
    ):
        await store.save_mastery_record(record)


async def seed_week(store, today, **overrides):
    for i in range(7):
        values = {
            "study_hours": 6,
            "questions_attempted": 40,
            "accuracy": 80,
            "late_night_study": False,
        }
        values.update({k: v[i] for k, v in overrides.items()})
        await store.append_energy_log("alice", EnergyLog(today - timedelta(days=6 - i), **values))


class TestBuildPlan:
    """Tests for plan building."""

    @pytest.mark.asyncio
    async def test_builds_week_from_store(self, service, store, make_record, now):
        await seed_topics(store, make_record, now)
        await seed_week(store, now.date())

        plan = await service.build_plan("alice", daily_hours=6, days_to_exam=45)

        assert len(plan.weekly_plan) == 7
        assert plan.weekly_plan[0].date == now.date()
        assert not plan.burnout.suggest_rest
        assert plan.burnout.energy_score == 100.0
        assert plan.time_allocation.study_time == 0.45
        assert plan.total_minutes == sum(d.total_minutes for d in plan.weekly_plan)
        assert [t.key.topic for t in plan.categorized.weak] == ["Friction"]

    @pytest.mark.asyncio
    async def test_revision_schedule_included(self, service, store, make_record, now):
        await seed_topics(store, make_record, now)

        plan = await service.build_plan("alice", daily_hours=6, days_to_exam=45)

        # Heat has too few attempts to schedule; Optics is the most urgent
        topics = [e.key.topic for e in plan.revision_schedule]
        assert "Heat" not in topics
        assert topics[0] == "Optics"

    @pytest.mark.asyncio
    async def test_rest_day_when_burnout_detected(self, service, store, make_record, now):
        await seed_topics(store, make_record, now)
        await seed_week(
            store,
            now.date(),
            accuracy=(90, 90, 90, 90, 40, 40, 40),
            late_night_study=(True,) * 5 + (False,) * 2,
        )

        plan = await service.build_plan("alice", daily_hours=6, days_to_exam=45)

        assert plan.burnout.suggest_rest
        assert plan.weekly_plan[0].is_rest_day
        assert all(t.type is TaskType.REVISION for t in plan.weekly_plan[0].tasks)
        assert not plan.weekly_plan[1].is_rest_day

    @pytest.mark.asyncio
    async def test_new_user_gets_mock_only_plan(self, service):
        plan = await service.build_plan("newbie", daily_hours=4, days_to_exam=10)

        assert plan.per_topic_minutes == {}
        assert plan.burnout.energy_score == 100.0
        assert all(
            t.type is TaskType.MOCK_TEST for d in plan.weekly_plan for t in d.tasks
        )

    @pytest.mark.asyncio
    async def test_strong_topics_only(self, service, store, make_record, now):
        await store.save_mastery_record(
            make_record(topic="Kinematics", accuracy=92, attempts=30, last_practiced=now)
        )

        plan = await service.build_plan("alice", daily_hours=4, days_to_exam=45)

        tasks = [t for d in plan.weekly_plan for t in d.tasks]
        assert not any(t.type is TaskType.STUDY for t in tasks)
        assert {t.topic for t in tasks if t.type is TaskType.REVISION} == {"Kinematics"}
        assert sum(1 for t in tasks if t.type is TaskType.MOCK_TEST) == 7

    @pytest.mark.asyncio
    async def test_rank_and_motivation_included(self, service, store, make_record, now):
        await seed_topics(store, make_record, now)
        await seed_week(store, now.date())

        plan = await service.build_plan("alice", daily_hours=6, days_to_exam=45, target_exam="NEET")

        # 70 questions at a weighted 77.6% accuracy, thin-history factor 1.3
        assert plan.rank.current_rank == pytest.approx(525_163, abs=1)
        assert plan.rank.percentile_range == "Top 50%"
        assert plan.rank.improvement_weeks == 7
        assert plan.motivation.kind is MotivationKind.CELEBRATION
        assert "7-day streak" in plan.motivation.message

    @pytest.mark.asyncio
    async def test_new_user_motivation(self, service):
        plan = await service.build_plan("newbie", daily_hours=4, days_to_exam=10)

        assert plan.rank.percentile_range == "Below 50%"
        assert plan.motivation.message == "Start strong! Every question counts."

    @pytest.mark.asyncio
    async def test_rejects_unknown_exam(self, service):
        with pytest.raises(InvalidInputError):
            await service.build_plan("alice", daily_hours=6, days_to_exam=45, target_exam="SAT")

    @pytest.mark.asyncio
    async def test_rejects_negative_days(self, service):
        with pytest.raises(InvalidInputError):
            await service.build_plan("alice", daily_hours=6, days_to_exam=-3)


class TestRevisionsAndLogs:
    @pytest.mark.asyncio
    async def test_revisions_due(self, service, store, make_record, now):
        await seed_topics(store, make_record, now)

        due = await service.revisions_due("alice")

        assert [e.key.topic for e in due] == ["Optics", "Friction"]

    @pytest.mark.asyncio
    async def test_log_day_returns_assessment(self, service, now):
        log = EnergyLog(now.date(), study_hours=5, questions_attempted=10, accuracy=65)

        assessment = await service.log_day("alice", log)

        assert assessment.energy_score == 90.0
        assert assessment.signals == ()

    @pytest.mark.asyncio
    async def test_log_day_twice_fails(self, service, now):
        log = EnergyLog(now.date(), study_hours=5, questions_attempted=30, accuracy=65)
        await service.log_day("alice", log)

        with pytest.raises(PersistenceError):
            await service.log_day("alice", log)


class TestProgressHelpers:
    def test_overall_accuracy_weighted_by_attempts(self, make_record):
        records = [
            make_record(topic="Friction", accuracy=50, attempts=10),
            make_record(topic="Waves", accuracy=80, attempts=30),
        ]
        assert overall_accuracy(records) == 72.5

    def test_overall_accuracy_without_attempts(self, make_record):
        assert overall_accuracy([]) == 0.0
        assert overall_accuracy([make_record(accuracy=90, attempts=0)]) == 0.0

    def test_streak_counts_back_from_today(self, now):
        today = now.date()
        days = {today - timedelta(days=i) for i in (0, 1, 2, 4)}
        assert study_streak(days, today) == 3

    def test_streak_survives_unlogged_today(self, now):
        today = now.date()
        days = {today - timedelta(days=i) for i in (1, 2)}
        assert study_streak(days, today) == 2

    def test_no_streak(self, now):
        today = now.date()
        assert study_streak(set(), today) == 0
        assert study_streak({today - timedelta(days=2)}, today) == 0
