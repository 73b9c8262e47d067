"""
Study Plan Allocator - exam-proximity time split and weekly plan generation.

Pipeline:
1. time_allocation(days_to_exam) - study / revision / mock-test split
2. categorize_topics(records) - weak (<60%), medium (<80%), strong, ranked
   by priority score
3. allocate(...) - 7-day plan; study minutes go to weak and medium topics
   in proportion to priority, revision minutes to strong topics

Insights alongside the plan: SWOT, adaptive daily target, rank projection
and a motivation message.

The plan is regenerated wholesale from its inputs and contains no
randomness: identical inputs give an identical plan.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from loguru import logger

from prep_engine.core.clock import whole_days_between
from prep_engine.core.errors import InvalidInputError, require_non_negative, require_percentage
from prep_engine.core.models import (
    CategorizedTopics,
    DailyPlan,
    DailyTask,
    MotivationKind,
    TaskPriority,
    TaskType,
    TimeAllocation,
    TimeSlot,
    TopicKey,
    TopicMasteryRecord,
    TopicPriority,
    TopicStatus,
)
from prep_engine.core.thresholds import (
    DEFAULT_MASTERY_CONFIG,
    DEFAULT_PLANNER_CONFIG,
    MasteryConfig,
    PlannerConfig,
)

MOCK_TEST_TOPIC = "Full Syllabus Mock Test"


@dataclass(frozen=True)
class AllocationResult:
    weekly_plan: tuple[DailyPlan, ...]
    per_topic_minutes: dict[TopicKey, int]
    time_allocation: TimeAllocation


@dataclass(frozen=True)
class SWOTAnalysis:
    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...]
    opportunities: tuple[str, ...]
    threats: tuple[str, ...]


@dataclass(frozen=True)
class AdaptiveTarget:
    current_target: int
    suggested_target: int
    reason: str

    @property
    def should_adjust(self) -> bool:
        return self.suggested_target != self.current_target


@dataclass(frozen=True)
class RankPrediction:
    current_rank: int
    target_rank: int
    improvement_weeks: int
    weekly_accuracy_target: float
    percentile_range: str


@dataclass(frozen=True)
class Motivation:
    message: str
    emoji: str
    kind: MotivationKind


# =============================================================================
# Time allocation
# =============================================================================


def time_allocation(
    days_to_exam: int, config: PlannerConfig = DEFAULT_PLANNER_CONFIG
) -> TimeAllocation:
    """
    Split a study day by exam proximity.

    Far from the exam most time goes to new study; close to it, revision and
    mock tests dominate. Steps are checked top-down, first match wins.
    """
    require_non_negative("days_to_exam", days_to_exam)
    for step in config.allocation_steps:
        if days_to_exam > step.above_days:
            return TimeAllocation(step.study_time, step.revision_time, step.mock_test_time)
    raise InvalidInputError(f"No allocation step covers {days_to_exam} days")


# =============================================================================
# Topic categorisation
# =============================================================================


def priority_score(
    accuracy: float,
    days_since_practice: int,
    questions_attempted: int,
    config: PlannerConfig = DEFAULT_PLANNER_CONFIG,
) -> float:
    """
    Planning urgency of a topic; higher is more urgent.

    Components:
        weakness    (100 - accuracy) * 0.5
        forgetting  min(days, 30) * 0.3
        practice    max(0, 20 - attempts) * 0.2
    """
    require_percentage("accuracy", accuracy)
    require_non_negative("days_since_practice", days_since_practice)
    require_non_negative("questions_attempted", questions_attempted)

    weakness = (100 - accuracy) * config.weakness_weight
    forgetting = min(days_since_practice, config.forgetting_cap_days) * config.forgetting_weight
    practice = max(0, config.practice_target_attempts - questions_attempted) * config.practice_weight
    return weakness + forgetting + practice


def topic_status(
    accuracy: float, mastery_config: MasteryConfig = DEFAULT_MASTERY_CONFIG
) -> TopicStatus:
    if accuracy < mastery_config.weak_accuracy_threshold:
        return TopicStatus.WEAK
    if accuracy < mastery_config.strong_accuracy_threshold:
        return TopicStatus.MEDIUM
    return TopicStatus.STRONG


def categorize_topics(
    records: Iterable[TopicMasteryRecord],
    now: datetime,
    config: PlannerConfig = DEFAULT_PLANNER_CONFIG,
    mastery_config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
) -> CategorizedTopics:
    """Rank records into weak / medium / strong buckets, highest priority first."""
    buckets: dict[TopicStatus, list[TopicPriority]] = defaultdict(list)

    for record in records:
        last = record.last_practiced or now - timedelta(days=config.unpracticed_age_days)
        days = whole_days_between(last, now)
        status = topic_status(record.accuracy, mastery_config)
        buckets[status].append(
            TopicPriority(
                record=record,
                days_since_practice=days,
                status=status,
                priority_score=priority_score(
                    record.accuracy, days, record.questions_attempted, config
                ),
            )
        )

    def ranked(status: TopicStatus) -> tuple[TopicPriority, ...]:
        return tuple(sorted(buckets[status], key=lambda t: (-t.priority_score, t.key)))

    return CategorizedTopics(
        weak=ranked(TopicStatus.WEAK),
        medium=ranked(TopicStatus.MEDIUM),
        strong=ranked(TopicStatus.STRONG),
    )


# =============================================================================
# Weekly plan
# =============================================================================


def _rotation(pool: Sequence[TopicPriority], day: int, per_day: int) -> list[TopicPriority]:
    """Distinct topics for ``day``, walking the pool in order and wrapping."""
    if not pool:
        return []
    count = min(per_day, len(pool))
    start = day * count
    return [pool[(start + i) % len(pool)] for i in range(count)]


def _split_by_weight(total: float, weights: Sequence[float]) -> list[int]:
    if not weights:
        return []
    weight_sum = sum(weights)
    if weight_sum <= 0:
        return [round(total / len(weights))] * len(weights)
    return [round(total * w / weight_sum) for w in weights]


def _task(
    topic: TopicPriority,
    minutes: int,
    task_type: TaskType,
    slot: TimeSlot,
    priority: TaskPriority,
) -> DailyTask:
    return DailyTask(
        topic=topic.key.topic,
        subject=topic.key.subject,
        chapter=topic.key.chapter,
        duration=minutes,
        type=task_type,
        time_slot=slot,
        priority=priority,
    )


def _study_tasks(chosen: list[TopicPriority], study_minutes: float) -> list[DailyTask]:
    tasks = []
    shares = _split_by_weight(study_minutes, [t.priority_score for t in chosen])
    for topic, minutes in zip(chosen, shares):
        if minutes <= 0:
            continue
        if topic.status is TopicStatus.WEAK:
            tasks.append(_task(topic, minutes, TaskType.STUDY, TimeSlot.MORNING, TaskPriority.HIGH))
        else:
            tasks.append(
                _task(topic, minutes, TaskType.STUDY, TimeSlot.AFTERNOON, TaskPriority.MEDIUM)
            )
    return tasks


def _revision_tasks(
    chosen: list[TopicPriority], revision_minutes: float, slot: TimeSlot
) -> list[DailyTask]:
    if not chosen:
        return []
    minutes = round(revision_minutes / len(chosen))
    if minutes <= 0:
        return []
    return [_task(t, minutes, TaskType.REVISION, slot, TaskPriority.LOW) for t in chosen]


def allocate(
    daily_hours: float,
    allocation: TimeAllocation,
    categorized: CategorizedTopics,
    start: date,
    rest_day: bool = False,
    config: PlannerConfig = DEFAULT_PLANNER_CONFIG,
) -> AllocationResult:
    """
    Build a 7-day plan starting at ``start``.

    Args:
        daily_hours: Study hours available per day
        allocation: Study / revision / mock split for the day
        categorized: Ranked weak / medium / strong topics
        start: First day of the plan
        rest_day: Mark the first day as a light rest day (burnout recovery)

    Returns:
        AllocationResult with the weekly plan and weekly minutes per topic
    """
    require_non_negative("daily_hours", daily_hours)
    if daily_hours > 24:
        raise InvalidInputError(f"daily_hours cannot exceed 24, got {daily_hours}")

    daily_minutes = daily_hours * 60
    study_minutes = daily_minutes * allocation.study_time
    revision_minutes = daily_minutes * allocation.revision_time
    mock_minutes = round(daily_minutes * allocation.mock_test_time)

    study_pool = sorted(
        categorized.weak + categorized.medium, key=lambda t: (-t.priority_score, t.key)
    )
    revision_pool = list(categorized.strong) or study_pool

    plan: list[DailyPlan] = []
    for offset in range(config.plan_days):
        day = start + timedelta(days=offset)
        is_rest = rest_day and offset == 0

        if is_rest:
            chosen = revision_pool[: config.rest_day_revision_topics]
            tasks = _revision_tasks(
                chosen, config.rest_day_revision_minutes * len(chosen), TimeSlot.AFTERNOON
            )
        else:
            tasks = _study_tasks(
                _rotation(study_pool, offset, config.study_topics_per_day), study_minutes
            )
            tasks += _revision_tasks(
                _rotation(revision_pool, offset, config.revision_topics_per_day),
                revision_minutes,
                TimeSlot.EVENING,
            )
            if mock_minutes >= config.min_mock_minutes:
                tasks.append(
                    DailyTask(
                        topic=MOCK_TEST_TOPIC,
                        subject="Mixed",
                        chapter="All Chapters",
                        duration=mock_minutes,
                        type=TaskType.MOCK_TEST,
                        time_slot=TimeSlot.AFTERNOON,
                        priority=TaskPriority.HIGH,
                    )
                )

        plan.append(
            DailyPlan(
                date=day,
                day_name=day.strftime("%a"),
                is_rest_day=is_rest,
                total_minutes=sum(t.duration for t in tasks),
                tasks=tuple(tasks),
            )
        )

    per_topic: dict[TopicKey, int] = defaultdict(int)
    for daily in plan:
        for task in daily.tasks:
            if task.type is not TaskType.MOCK_TEST:
                per_topic[TopicKey(task.subject, task.chapter, task.topic)] += task.duration

    logger.debug(
        f"Allocated {len(per_topic)} topics over {config.plan_days} days "
        f"({daily_minutes:.0f} min/day, rest_day={rest_day})"
    )
    return AllocationResult(
        weekly_plan=tuple(plan),
        per_topic_minutes=dict(per_topic),
        time_allocation=allocation,
    )


# =============================================================================
# Insights
# =============================================================================


def swot_analysis(categorized: CategorizedTopics) -> SWOTAnalysis:
    """Strengths, weaknesses, opportunities and threats from ranked topics."""

    def label(t: TopicPriority) -> str:
        return f"{t.key.subject}: {t.key.topic} ({round(t.accuracy)}%)"

    strengths = [label(t) for t in categorized.strong if t.questions_attempted >= 10][:4]
    weaknesses = [label(t) for t in categorized.weak][:4]
    opportunities = [
        f"{t.key.topic} is close to mastery ({round(t.accuracy)}%)"
        for t in categorized.medium
        if t.accuracy >= 65
    ][:3]
    threats = [
        f"{t.key.topic} not revised in {t.days_since_practice} days"
        for t in categorized.strong
        if t.days_since_practice >= 7
    ][:3]

    return SWOTAnalysis(
        strengths=tuple(strengths) or ("Keep practicing to identify strengths",),
        weaknesses=tuple(weaknesses) or ("No critical weaknesses found",),
        opportunities=tuple(opportunities) or ("Focus on building foundation",),
        threats=tuple(threats) or ("Maintain regular revision schedule",),
    )


def adaptive_target(
    current_target: int,
    avg_accuracy: float,
    completion_rate: float,
    config: PlannerConfig = DEFAULT_PLANNER_CONFIG,
) -> AdaptiveTarget:
    """
    Suggest a new daily question target.

    Args:
        current_target: Current questions/day target
        avg_accuracy: Recent accuracy (0-100)
        completion_rate: Fraction of recent targets completed (0-1)
    """
    require_percentage("avg_accuracy", avg_accuracy)
    if not 0 <= completion_rate <= 1:
        raise InvalidInputError(f"completion_rate must be within [0, 1], got {completion_rate!r}")

    if completion_rate >= 0.8 and avg_accuracy >= 80:
        suggested = min(config.target_max, -(-current_target * 6 // 5))  # ceil(x * 1.2)
        reason = "Performing great! Time to level up."
    elif completion_rate < 0.5:
        suggested = max(config.target_min, current_target * 4 // 5)
        reason = "Adjusting to build consistency first."
    elif avg_accuracy < 60 and completion_rate >= 0.7:
        suggested = max(config.target_min, current_target * 9 // 10)
        reason = "Focus on quality over quantity."
    else:
        suggested = current_target
        reason = "Target is appropriate"

    return AdaptiveTarget(current_target, suggested, reason)


def predict_rank(
    avg_accuracy: float,
    questions_attempted: int,
    target_exam: str,
    config: PlannerConfig = DEFAULT_PLANNER_CONFIG,
) -> RankPrediction:
    """
    Project an all-India rank from overall accuracy and practice volume.

    The rank scales the exam's candidate pool by the error rate, then by an
    experience factor: thin practice history inflates the projection, a deep
    one shrinks it. The target rank is the projection at 90% accuracy with
    full experience, reached at 2 accuracy points per week.

    Args:
        avg_accuracy: Overall accuracy (0-100)
        questions_attempted: Total questions answered
        target_exam: Exam name, one of the configured candidate pools (JEE, NEET)
    """
    require_percentage("avg_accuracy", avg_accuracy)
    require_non_negative("questions_attempted", questions_attempted)
    candidates = config.exam_candidates.get(target_exam.strip().upper())
    if candidates is None:
        known = ", ".join(sorted(config.exam_candidates))
        raise InvalidInputError(f"Unknown exam {target_exam!r}, expected one of: {known}")

    experience = next(
        (factor for below, factor in config.experience_steps if questions_attempted < below),
        config.experienced_factor,
    )
    current_rank = round(candidates * (100 - avg_accuracy) / 100 * experience)
    target_rank = round(
        candidates * (100 - config.rank_target_accuracy) / 100 * config.experienced_factor
    )
    gap = max(0.0, config.rank_target_accuracy - avg_accuracy)

    percentile = (candidates - current_rank) / candidates * 100
    band = next(
        (label for floor, label in config.percentile_bands if percentile >= floor),
        config.below_percentile_label,
    )

    return RankPrediction(
        current_rank=current_rank,
        target_rank=target_rank,
        improvement_weeks=math.ceil(gap / config.weekly_accuracy_gain),
        weekly_accuracy_target=min(100.0, avg_accuracy + config.weekly_accuracy_gain),
        percentile_range=band,
    )


def motivation(
    streak: int,
    avg_accuracy: float,
    questions_today: int,
    config: PlannerConfig = DEFAULT_PLANNER_CONFIG,
) -> Motivation:
    """Pick a message tier from the study streak and today's effort."""
    require_non_negative("streak", streak)
    require_percentage("avg_accuracy", avg_accuracy)
    require_non_negative("questions_today", questions_today)

    if streak >= config.long_streak_days:
        return Motivation(
            f"Amazing {streak}-day streak! You're unstoppable!", "🔥", MotivationKind.CELEBRATION
        )
    if avg_accuracy >= config.outstanding_accuracy and questions_today >= config.outstanding_questions:
        return Motivation(
            "Outstanding performance today! Keep crushing it!", "🌟", MotivationKind.CELEBRATION
        )
    if streak >= config.steady_streak_days:
        return Motivation(
            f"Great consistency with {streak}-day streak!", "⚡", MotivationKind.CELEBRATION
        )
    if avg_accuracy >= config.good_accuracy:
        return Motivation(
            "Good progress! Push for 85%+ accuracy.", "💪", MotivationKind.ENCOURAGEMENT
        )
    # Checked before the busy-day tier, which would otherwise shadow it
    if avg_accuracy < config.struggling_accuracy and questions_today > config.busy_day_questions:
        return Motivation(
            "Focus needed. Review mistakes carefully.", "⚠️", MotivationKind.WARNING
        )
    if questions_today >= config.busy_day_questions:
        return Motivation(
            "Nice work today! Keep the momentum going.", "👍", MotivationKind.ENCOURAGEMENT
        )
    return Motivation("Start strong! Every question counts.", "🚀", MotivationKind.ENCOURAGEMENT)
