"""
Spaced Repetition Scheduler - Forgetting-curve revision planning.

Implements:
1. Fixed review ladder - 1, 3, 7, 15, 30, 60 days
2. Weak-topic pull-back - one step back below 75%, two below 60%
3. Ebbinghaus retention - R = e^(-t/S) with S growing with accuracy and reviews
4. Urgency buckets - critical / high / medium / low, first match wins

Schedule entries are computed on demand from mastery records and are never
stored.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from loguru import logger

from prep_engine.core.clock import Clock, SystemClock, whole_days_between
from prep_engine.core.errors import require_non_negative, require_percentage
from prep_engine.core.models import RevisionScheduleEntry, TopicMasteryRecord, Urgency
from prep_engine.core.thresholds import (
    DEFAULT_SPACED_REPETITION_CONFIG,
    SpacedRepetitionConfig,
)


# =============================================================================
# Formulas
# =============================================================================


def interval_index(
    review_number: int,
    accuracy: float,
    config: SpacedRepetitionConfig = DEFAULT_SPACED_REPETITION_CONFIG,
) -> int:
    """Position on the interval ladder after the weak-topic pull-back."""
    require_non_negative("review_number", review_number)
    require_percentage("accuracy", accuracy)

    index = min(review_number, len(config.intervals) - 1)
    if accuracy < config.two_steps_back_below:
        index -= 2
    elif accuracy < config.one_step_back_below:
        index -= 1
    return max(0, index)


def next_review_date(
    last_reviewed: datetime,
    review_number: int,
    accuracy: float,
    config: SpacedRepetitionConfig = DEFAULT_SPACED_REPETITION_CONFIG,
) -> datetime:
    """
    Calculate the next review date.

    Args:
        last_reviewed: When the topic was last practiced
        review_number: Completed reviews (attempts // 10)
        accuracy: Topic accuracy (0-100)

    Returns:
        last_reviewed plus the interval for this review step
    """
    days = config.intervals[interval_index(review_number, accuracy, config)]
    return last_reviewed + timedelta(days=days)


def memory_strength(
    accuracy: float,
    review_count: int,
    config: SpacedRepetitionConfig = DEFAULT_SPACED_REPETITION_CONFIG,
) -> float:
    """Memory strength S in days: base + accuracy bonus + review bonus."""
    return (
        config.base_strength_days
        + accuracy / 100 * config.accuracy_strength_days
        + review_count * config.review_strength_days
    )


def retention_probability(
    days_since_review: float,
    accuracy: float,
    review_count: int,
    config: SpacedRepetitionConfig = DEFAULT_SPACED_REPETITION_CONFIG,
) -> float:
    """
    Ebbinghaus retention estimate (0-100).

    R = 100 * e^(-t/S), S = 5 + accuracy/100 * 10 + reviews * 2
    """
    require_non_negative("days_since_review", days_since_review)
    require_percentage("accuracy", accuracy)
    require_non_negative("review_count", review_count)

    strength = memory_strength(accuracy, review_count, config)
    retention = math.exp(-days_since_review / strength) * 100
    return max(0.0, min(100.0, retention))


def determine_urgency(
    retention: float,
    days_since_review: int,
    config: SpacedRepetitionConfig = DEFAULT_SPACED_REPETITION_CONFIG,
) -> Urgency:
    """Bucket a topic by retention and age; rules checked in priority order."""
    for urgency, (retention_below, days_above) in (
        (Urgency.CRITICAL, config.critical),
        (Urgency.HIGH, config.high),
        (Urgency.MEDIUM, config.medium),
    ):
        if retention < retention_below or days_since_review > days_above:
            return urgency
    return Urgency.LOW


def revision_duration(
    retention: float,
    questions_attempted: int,
    config: SpacedRepetitionConfig = DEFAULT_SPACED_REPETITION_CONFIG,
) -> int:
    """Recommended revision minutes: longer for faded topics, shorter for drilled ones."""
    minutes = config.base_revision_minutes
    if retention < 30:
        minutes += 20
    elif retention < 50:
        minutes += 10
    elif retention < 70:
        minutes += 5

    if questions_attempted > config.well_practiced_attempts:
        minutes = max(5, minutes - 5)
    return minutes


# =============================================================================
# Scheduler
# =============================================================================


class SpacedRepetitionScheduler:
    """Builds the revision schedule for a learner's mastery records."""

    def __init__(
        self,
        clock: Clock | None = None,
        config: SpacedRepetitionConfig = DEFAULT_SPACED_REPETITION_CONFIG,
    ):
        self.clock = clock or SystemClock()
        self.config = config

    def is_eligible(self, record: TopicMasteryRecord) -> bool:
        return record.questions_attempted >= self.config.min_attempts

    def entry_for(self, record: TopicMasteryRecord, now: datetime) -> RevisionScheduleEntry:
        cfg = self.config
        last_reviewed = record.last_practiced or now - timedelta(days=cfg.default_review_age_days)
        review_number = record.questions_attempted // cfg.attempts_per_review
        days_since = whole_days_between(last_reviewed, now)

        retention = retention_probability(days_since, record.accuracy, review_number, cfg)
        return RevisionScheduleEntry(
            key=record.key,
            last_reviewed=last_reviewed,
            next_review=next_review_date(last_reviewed, review_number, record.accuracy, cfg),
            review_number=review_number,
            retention_probability=retention,
            days_since_review=days_since,
            urgency=determine_urgency(retention, days_since, cfg),
            recommended_minutes=revision_duration(retention, record.questions_attempted, cfg),
        )

    def schedule(self, records: Iterable[TopicMasteryRecord]) -> list[RevisionScheduleEntry]:
        """
        Revision schedule for all eligible topics.

        Topics with fewer than ``min_attempts`` attempts are left out entirely.
        Sorted by urgency, then lowest retention first.
        """
        now = self.clock.now()
        records = list(records)
        entries = [self.entry_for(r, now) for r in records if self.is_eligible(r)]
        entries.sort(key=lambda e: (e.urgency.rank, e.retention_probability, e.key))

        skipped = len(records) - len(entries)
        if skipped:
            logger.debug(f"Skipped {skipped} topics with too few attempts to schedule")
        return entries

    def due_today(
        self, entries: Iterable[RevisionScheduleEntry], today: date | None = None
    ) -> list[RevisionScheduleEntry]:
        """Entries whose next review falls on or before today."""
        today = today or self.clock.now().date()
        return [e for e in entries if e.next_review.date() <= today]
