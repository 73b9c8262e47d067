"""
Mastery Model for topic-level difficulty progression.

Maps (accuracy, attempts) to one of four mastery levels and decides level
transitions:

    Level 4 Mastered      90% accuracy, 60 attempts
    Level 3 Advanced      85% accuracy, 40 attempts
    Level 2 Intermediate  70% accuracy, 25 attempts
    Level 1 Foundation    fallback

Transitions only ever consider the adjacent level, so a learner moves at
most one level per evaluation.
"""

from __future__ import annotations

from prep_engine.core.errors import InvalidInputError, require_non_negative, require_percentage
from prep_engine.core.models import MasteryLevel, TopicMasteryRecord
from prep_engine.core.thresholds import DEFAULT_MASTERY_CONFIG, MasteryConfig


def classify_level(
    accuracy: float,
    questions_attempted: int,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
) -> MasteryLevel:
    """
    Classify accuracy and attempt count into a mastery level.

    Levels are checked highest first; the first level whose accuracy and
    attempt requirements are both met wins. Level 1 is the fallback.

    Args:
        accuracy: Percentage of correct answers (0-100)
        questions_attempted: Number of attempts
        config: Level table

    Returns:
        MasteryLevel 1-4
    """
    require_percentage("accuracy", accuracy)
    require_non_negative("questions_attempted", questions_attempted)

    for level in sorted(config.levels, reverse=True):
        if level == config.min_level:
            break
        threshold = config.threshold(level)
        if (
            accuracy >= threshold.min_accuracy
            and questions_attempted >= threshold.questions_needed
        ):
            return MasteryLevel(level)
    return MasteryLevel(config.min_level)


def should_level_up(
    record: TopicMasteryRecord, config: MasteryConfig = DEFAULT_MASTERY_CONFIG
) -> bool:
    """
    Check whether a record meets the next level's requirements.

    Only the immediately next level is consulted, never the one after it.
    """
    if record.current_level >= config.max_level:
        return False
    nxt = config.threshold(record.current_level + 1)
    return (
        record.accuracy >= nxt.min_accuracy
        and record.questions_attempted >= nxt.questions_needed
    )


def should_level_down(
    record: TopicMasteryRecord, config: MasteryConfig = DEFAULT_MASTERY_CONFIG
) -> bool:
    """
    Check whether a record has fallen below its level's accuracy floor.

    Requires ``level_down_quorum`` attempts at the current level. Levels with
    no configured floor (Foundation, Mastered) never drop.
    """
    floor = config.level_down_floors.get(int(record.current_level))
    if floor is None:
        return False
    return (
        record.questions_attempted >= config.level_down_quorum
        and record.accuracy < floor
    )


def is_stuck(
    record: TopicMasteryRecord, config: MasteryConfig = DEFAULT_MASTERY_CONFIG
) -> bool:
    """True if the topic is weak and has not improved for a week or more."""
    return (
        record.accuracy < config.weak_accuracy_threshold
        and record.stuck_days >= config.stuck_threshold_days
    )


def questions_needed_for_next_level(
    record: TopicMasteryRecord, config: MasteryConfig = DEFAULT_MASTERY_CONFIG
) -> int:
    if record.current_level >= config.max_level:
        return 0
    nxt = config.threshold(record.current_level + 1)
    return max(0, nxt.questions_needed - record.questions_attempted)


def accuracy_needed_for_next_level(
    record: TopicMasteryRecord, config: MasteryConfig = DEFAULT_MASTERY_CONFIG
) -> float:
    if record.current_level >= config.max_level:
        return 0.0
    nxt = config.threshold(record.current_level + 1)
    return max(0.0, nxt.min_accuracy - record.accuracy)


def recommended_questions_per_day(
    level: int, config: MasteryConfig = DEFAULT_MASTERY_CONFIG
) -> int:
    if level not in config.levels:
        raise InvalidInputError(f"Unknown mastery level: {level!r}")
    return config.threshold(level).questions_per_day


def progress_percentage(
    record: TopicMasteryRecord, config: MasteryConfig = DEFAULT_MASTERY_CONFIG
) -> float:
    """
    Progress through the current level (0-100).

    Half comes from accuracy relative to the level's minimum, half from
    attempts relative to the level's question count.
    """
    threshold = config.threshold(record.current_level)

    if threshold.min_accuracy > 0:
        accuracy_progress = record.accuracy / threshold.min_accuracy * 50
    else:
        accuracy_progress = 50.0
    questions_progress = record.questions_attempted / threshold.questions_needed * 50

    return min(100.0, accuracy_progress + questions_progress)
