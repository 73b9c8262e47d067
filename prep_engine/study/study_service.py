"""
Study Plan Service.

Provides high-level operations for the CLI:
- Build the weekly plan from stored mastery and energy data, with rank
  projection and a motivation message
- List revisions due today
- Log a day of study aggregates
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

from loguru import logger

from prep_engine.core.clock import Clock, SystemClock
from prep_engine.core.errors import InvalidInputError, require_non_negative
from prep_engine.core.models import (
    BurnoutAssessment,
    CategorizedTopics,
    DailyPlan,
    EnergyLog,
    RevisionScheduleEntry,
    TimeAllocation,
    TopicKey,
    TopicMasteryRecord,
)
from prep_engine.core.thresholds import (
    DEFAULT_BURNOUT_CONFIG,
    DEFAULT_MASTERY_CONFIG,
    DEFAULT_PLANNER_CONFIG,
    DEFAULT_SPACED_REPETITION_CONFIG,
    BurnoutConfig,
    MasteryConfig,
    PlannerConfig,
    SpacedRepetitionConfig,
)
from prep_engine.db.store import MasteryStore
from prep_engine.study import burnout_detector
from prep_engine.study.plan_allocator import (
    Motivation,
    RankPrediction,
    SWOTAnalysis,
    allocate,
    categorize_topics,
    motivation,
    predict_rank,
    swot_analysis,
    time_allocation,
)
from prep_engine.study.spaced_repetition import SpacedRepetitionScheduler


@dataclass
class StudyPlan:
    """Everything the planner produced for one request."""

    user_id: str
    days_to_exam: int
    daily_hours: float
    time_allocation: TimeAllocation
    weekly_plan: tuple[DailyPlan, ...]
    per_topic_minutes: dict[TopicKey, int]
    burnout: BurnoutAssessment
    categorized: CategorizedTopics
    swot: SWOTAnalysis
    rank: RankPrediction
    motivation: Motivation
    revision_schedule: list[RevisionScheduleEntry] = field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return sum(day.total_minutes for day in self.weekly_plan)


def overall_accuracy(records: list[TopicMasteryRecord]) -> float:
    """Accuracy across all topics, weighted by questions attempted."""
    attempted = sum(r.questions_attempted for r in records)
    if attempted == 0:
        return 0.0
    return min(100.0, sum(r.accuracy * r.questions_attempted for r in records) / attempted)


def study_streak(logged_days: set[date], today: date) -> int:
    """
    Consecutive logged days ending today.

    A streak still counts from yesterday when today has not been logged yet.
    """
    day = today if today in logged_days else today - timedelta(days=1)
    streak = 0
    while day in logged_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


class StudyPlanService:
    """
    High-level service for planning operations.

    Coordinates between the store, burnout detector, revision scheduler and
    plan allocator. Holds no state of its own beyond its collaborators.
    """

    def __init__(
        self,
        store: MasteryStore,
        clock: Clock | None = None,
        mastery_config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
        revision_config: SpacedRepetitionConfig = DEFAULT_SPACED_REPETITION_CONFIG,
        burnout_config: BurnoutConfig = DEFAULT_BURNOUT_CONFIG,
        planner_config: PlannerConfig = DEFAULT_PLANNER_CONFIG,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.mastery_config = mastery_config
        self.burnout_config = burnout_config
        self.planner_config = planner_config
        self.scheduler = SpacedRepetitionScheduler(self.clock, revision_config)

    async def assess_energy(self, user_id: str) -> BurnoutAssessment:
        """Burnout assessment over the user's last logged week."""
        logs = await self.store.load_recent_energy_logs(
            user_id, self.burnout_config.window_days, self.clock.now().date()
        )
        return burnout_detector.assess(logs, self.burnout_config)

    async def build_plan(
        self, user_id: str, daily_hours: float, days_to_exam: int, target_exam: str = "JEE"
    ) -> StudyPlan:
        """
        Build a 7-day plan starting today.

        Args:
            user_id: Learner id
            daily_hours: Hours available per study day
            days_to_exam: Days remaining until the exam
            target_exam: Exam whose candidate pool the rank projection uses

        Returns:
            StudyPlan bundle; the first day is a rest day when burnout is detected
        """
        if not user_id:
            raise InvalidInputError("user_id must be a non-empty string")
        require_non_negative("days_to_exam", days_to_exam)

        now = self.clock.now()
        today = now.date()
        records = await self.store.list_mastery_records(user_id)
        burnout = await self.assess_energy(user_id)
        history = await self.store.load_recent_energy_logs(
            user_id, self.planner_config.streak_lookback_days, today
        )

        accuracy = overall_accuracy(records)
        rank = predict_rank(
            accuracy,
            sum(r.questions_attempted for r in records),
            target_exam,
            self.planner_config,
        )
        questions_today = next(
            (log.questions_attempted for log in history if log.day == today), 0
        )
        cheer = motivation(
            study_streak({log.day for log in history}, today),
            accuracy,
            questions_today,
            self.planner_config,
        )

        allocation = time_allocation(days_to_exam, self.planner_config)
        categorized = categorize_topics(records, now, self.planner_config, self.mastery_config)
        result = allocate(
            daily_hours,
            allocation,
            categorized,
            start=now.date(),
            rest_day=burnout.suggest_rest,
            config=self.planner_config,
        )

        logger.info(
            f"Plan for {user_id}: {len(records)} topics, {days_to_exam} days to exam, "
            f"energy {burnout.energy_score:.0f}"
        )
        return StudyPlan(
            user_id=user_id,
            days_to_exam=days_to_exam,
            daily_hours=daily_hours,
            time_allocation=allocation,
            weekly_plan=result.weekly_plan,
            per_topic_minutes=result.per_topic_minutes,
            burnout=burnout,
            categorized=categorized,
            swot=swot_analysis(categorized),
            rank=rank,
            motivation=cheer,
            revision_schedule=self.scheduler.schedule(records),
        )

    async def revision_schedule(self, user_id: str) -> list[RevisionScheduleEntry]:
        records = await self.store.list_mastery_records(user_id)
        return self.scheduler.schedule(records)

    async def revisions_due(self, user_id: str) -> list[RevisionScheduleEntry]:
        """Scheduled revisions whose next review date is today or earlier."""
        return self.scheduler.due_today(await self.revision_schedule(user_id))

    async def log_day(self, user_id: str, log: EnergyLog) -> BurnoutAssessment:
        """Store one day of study aggregates and return the refreshed assessment."""
        if not user_id:
            raise InvalidInputError("user_id must be a non-empty string")
        await self.store.append_energy_log(user_id, log)
        logger.info(
            f"Logged {log.day} for {user_id}: {log.study_hours}h, "
            f"{log.questions_attempted} questions at {log.accuracy:.0f}%"
        )
        return await self.assess_energy(user_id)
