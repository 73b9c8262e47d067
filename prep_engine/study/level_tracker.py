"""
Adaptive Level Tracker.

Tracks per-(user, topic) mastery as questions are answered:
- Running accuracy reconstructed from the stored percentage
- Level-up once the quorum is met and the next level's thresholds pass
- Level-down when accuracy falls below the current level's floor
- Stuck-day counting for weak topics that stop improving

Accuracy is stored as a percentage, not as a correct-answer counter, so the
correct count is recovered with round(accuracy/100 * attempts). This drifts
slightly on long runs and is kept as-is for compatibility with stored data.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import replace
from datetime import datetime
from typing import TypeVar

from loguru import logger

from prep_engine.core.clock import Clock, SystemClock, whole_days_between
from prep_engine.core.errors import InvalidInputError, PersistenceError
from prep_engine.core.locks import KeyedLock
from prep_engine.core.models import LevelTransition, MasteryLevel, TopicKey, TopicMasteryRecord
from prep_engine.core.thresholds import DEFAULT_MASTERY_CONFIG, MasteryConfig
from prep_engine.db.store import MasteryStore
from prep_engine.study.mastery_model import (
    is_stuck,
    questions_needed_for_next_level,
    should_level_down,
    should_level_up,
)

T = TypeVar("T")

LEVEL_UP_MESSAGES = {
    MasteryLevel.INTERMEDIATE: "Leveled up to Intermediate! Questions get tougher from here.",
    MasteryLevel.ADVANCED: "Leveled up to Advanced! You're crushing it.",
    MasteryLevel.MASTERED: "Topic mastered! Switching to maintenance practice.",
}

LEVEL_DOWN_MESSAGES = {
    MasteryLevel.INTERMEDIATE: "Moved to Intermediate for more practice.",
    MasteryLevel.FOUNDATION: "Building your foundation with easier questions.",
}


class AdaptiveLevelTracker:
    """
    Record answers and move learners between mastery levels.

    Updates for the same (user, topic) are serialized through a KeyedLock;
    updates for different keys run independently.
    """

    def __init__(
        self,
        store: MasteryStore,
        clock: Clock | None = None,
        config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
        persistence_timeout: float | None = None,
    ):
        """
        Initialize tracker.

        Args:
            store: Persistence collaborator for mastery records
            clock: Time source (defaults to wall clock)
            config: Level thresholds and quorums
            persistence_timeout: Seconds allowed per store call (None = no limit)
        """
        self.store = store
        self.clock = clock or SystemClock()
        self.config = config
        self.persistence_timeout = persistence_timeout
        self._locks = KeyedLock()

    async def record_answer(
        self, user_id: str, key: TopicKey, is_correct: bool
    ) -> LevelTransition:
        """
        Apply one answered question to the learner's mastery record.

        Args:
            user_id: Opaque learner id
            key: Topic answered
            is_correct: Whether the answer was correct

        Returns:
            LevelTransition with the new level, flags and a user-facing message
        """
        if not user_id:
            raise InvalidInputError("user_id must be a non-empty string")

        async with self._locks.hold((user_id, key)):
            current = await self._call(self.store.load_mastery_record(user_id, key))
            if current is None:
                logger.debug(f"No mastery record for {user_id} / {key} - starting fresh")
                current = TopicMasteryRecord.fresh(user_id, key)

            transition = self.apply_answer(current, is_correct, self.clock.now())
            await self._call(self.store.save_mastery_record(transition.record))

        if transition.changed:
            direction = "up" if transition.leveled_up else "down"
            logger.info(
                f"{user_id} / {key}: level {direction} "
                f"{transition.previous_level} -> {transition.new_level}"
            )
        if is_stuck(transition.record, self.config):
            logger.warning(
                f"{user_id} / {key} stuck for {transition.record.stuck_days} days "
                f"at {transition.record.accuracy:.1f}% accuracy"
            )
        return transition

    async def get_level(self, user_id: str, key: TopicKey) -> MasteryLevel:
        """Current level for a topic; Foundation if never practiced."""
        record = await self._call(self.store.load_mastery_record(user_id, key))
        return MasteryLevel(record.current_level) if record else MasteryLevel.FOUNDATION

    def apply_answer(
        self, record: TopicMasteryRecord, is_correct: bool, now: datetime
    ) -> LevelTransition:
        """Pure update step: compute the next record state for one answer."""
        cfg = self.config
        attempts = record.questions_attempted

        correct_so_far = round(record.accuracy / 100 * attempts)
        new_attempts = attempts + 1
        new_accuracy = (correct_so_far + (1 if is_correct else 0)) / new_attempts * 100

        if new_accuracy >= cfg.weak_accuracy_threshold or new_accuracy > record.accuracy:
            stuck_days = 0
        elif record.last_practiced is not None:
            stuck_days = record.stuck_days + whole_days_between(record.last_practiced, now)
        else:
            stuck_days = record.stuck_days

        updated = replace(
            record,
            accuracy=new_accuracy,
            questions_attempted=new_attempts,
            last_practiced=now,
            stuck_days=stuck_days,
        )

        previous_level = MasteryLevel(record.current_level)
        new_level = previous_level
        leveled_up = leveled_down = False

        if new_attempts >= cfg.level_up_quorum and should_level_up(updated, cfg):
            new_level = MasteryLevel(previous_level + 1)
            leveled_up = True
            message = LEVEL_UP_MESSAGES.get(new_level, f"Leveled up to {new_level.display_name}!")
        elif should_level_down(updated, cfg):
            new_level = MasteryLevel(previous_level - 1)
            leveled_down = True
            message = LEVEL_DOWN_MESSAGES.get(
                new_level, f"Moved to {new_level.display_name} for more practice."
            )
        else:
            message = self._progress_message(updated)

        if new_level != previous_level:
            updated = replace(
                updated,
                current_level=new_level,
                accuracy=0.0,
                questions_attempted=0,
                stuck_days=0,
            )

        return LevelTransition(
            previous_level=previous_level,
            new_level=new_level,
            leveled_up=leveled_up,
            leveled_down=leveled_down,
            message=message,
            record=updated,
        )

    def _progress_message(self, record: TopicMasteryRecord) -> str:
        if record.current_level >= self.config.max_level:
            return "Mastered - keep revising to stay sharp."
        nxt = self.config.threshold(record.current_level + 1)
        remaining = questions_needed_for_next_level(record, self.config)
        if remaining > 0:
            return (
                f"{remaining} more questions at {nxt.min_accuracy:.0f}%+ accuracy "
                f"to reach {MasteryLevel(nxt.level).display_name}."
            )
        return (
            f"Raise accuracy to {nxt.min_accuracy:.0f}% "
            f"to reach {MasteryLevel(nxt.level).display_name}."
        )

    async def _call(self, operation: Awaitable[T]) -> T:
        if self.persistence_timeout is None:
            return await operation
        try:
            return await asyncio.wait_for(operation, timeout=self.persistence_timeout)
        except asyncio.TimeoutError as e:
            raise PersistenceError(
                f"Store call timed out after {self.persistence_timeout}s"
            ) from e
