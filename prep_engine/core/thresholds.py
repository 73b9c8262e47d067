"""
Rule tables for mastery, revision, burnout and planning.

Each table is a frozen dataclass with a module-level default. Functions take
the table as an explicit ``config`` argument so alternate tables can be
substituted without touching shared state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


# ============================================================================
# Mastery levels
# ============================================================================


@dataclass(frozen=True)
class LevelThreshold:
    """Requirements for one mastery level."""

    level: int
    min_accuracy: float
    questions_needed: int
    questions_per_day: int
    description: str


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class MasteryConfig:
    """Level thresholds and transition quorums."""

    levels: Mapping[int, LevelThreshold] = field(
        default_factory=lambda: _frozen(
            {
                1: LevelThreshold(1, 0, 15, 5, "Foundation Building"),
                2: LevelThreshold(2, 70, 25, 10, "Intermediate Practice"),
                3: LevelThreshold(3, 85, 40, 15, "Advanced Mastery"),
                4: LevelThreshold(4, 90, 60, 3, "Maintenance Mode"),
            }
        )
    )
    weak_accuracy_threshold: float = 60
    strong_accuracy_threshold: float = 80
    stuck_threshold_days: int = 7
    level_up_quorum: int = 5  # attempts at current level before any level-up
    level_down_quorum: int = 10  # attempts at current level before any level-down
    # current level -> accuracy floor below which the learner drops one level
    level_down_floors: Mapping[int, float] = field(
        default_factory=lambda: _frozen({3: 60, 2: 50})
    )

    @property
    def min_level(self) -> int:
        return min(self.levels)

    @property
    def max_level(self) -> int:
        return max(self.levels)

    def threshold(self, level: int) -> LevelThreshold:
        return self.levels[level]


# ============================================================================
# Spaced repetition
# ============================================================================


@dataclass(frozen=True)
class SpacedRepetitionConfig:
    """Review intervals and the Ebbinghaus memory-strength model."""

    intervals: tuple[int, ...] = (1, 3, 7, 15, 30, 60)  # days
    min_attempts: int = 5  # topics below this are not scheduled
    attempts_per_review: int = 10
    one_step_back_below: float = 75
    two_steps_back_below: float = 60
    base_strength_days: float = 5
    accuracy_strength_days: float = 10  # scaled by accuracy / 100
    review_strength_days: float = 2  # per completed review
    default_review_age_days: int = 30  # assumed age of never-practiced topics

    # Urgency: (retention below, days since review above), first match wins
    critical: tuple[float, int] = (30, 30)
    high: tuple[float, int] = (50, 15)
    medium: tuple[float, int] = (70, 7)

    # Revision duration (minutes)
    base_revision_minutes: int = 10
    well_practiced_attempts: int = 50


# ============================================================================
# Burnout detection
# ============================================================================


@dataclass(frozen=True)
class BurnoutConfig:
    """Energy score penalties and burnout signal thresholds."""

    window_days: int = 7
    recent_days: int = 3

    # Energy score penalties
    accuracy_drop_points: float = 15
    accuracy_drop_penalty: int = 15
    severe_accuracy_drop_points: float = 25
    severe_accuracy_drop_penalty: int = 25
    time_drop_ratio: float = 0.30
    time_drop_penalty: int = 20
    late_night_days: int = 4
    late_night_penalty: int = 15
    min_avg_questions: float = 20
    low_questions_penalty: int = 10

    # Signal thresholds
    min_logs_for_signals: int = 3
    signal_accuracy_drop: float = 15
    signal_accuracy_drop_high: float = 25
    signal_time_decrease_pct: float = 30
    signal_time_decrease_high_pct: float = 40
    signal_night_study_days: int = 5
    signal_incomplete_questions: float = 15
    signal_incomplete_questions_high: float = 10
    daily_question_target: int = 30

    rest_day_threshold: float = 30
    high_severity_signals_for_rest: int = 2


# ============================================================================
# Study planner
# ============================================================================


@dataclass(frozen=True)
class AllocationStep:
    """Time split applied when days-to-exam is above ``above_days``."""

    above_days: int
    study_time: float
    revision_time: float
    mock_test_time: float


@dataclass(frozen=True)
class PlannerConfig:
    """Exam-proximity allocation table and weekly plan shape."""

    # Evaluated top-down; the last step (above_days=-1) catches everything else
    allocation_steps: tuple[AllocationStep, ...] = (
        AllocationStep(180, 0.70, 0.20, 0.10),
        AllocationStep(90, 0.60, 0.25, 0.15),
        AllocationStep(30, 0.45, 0.35, 0.20),
        AllocationStep(15, 0.30, 0.40, 0.30),
        AllocationStep(-1, 0.15, 0.45, 0.40),
    )

    # Priority score weights
    weakness_weight: float = 0.5
    forgetting_weight: float = 0.3
    forgetting_cap_days: int = 30
    practice_weight: float = 0.2
    practice_target_attempts: int = 20
    unpracticed_age_days: int = 30

    plan_days: int = 7
    study_topics_per_day: int = 4
    revision_topics_per_day: int = 2
    min_mock_minutes: int = 15
    rest_day_revision_topics: int = 2
    rest_day_revision_minutes: int = 20

    # Adaptive daily question target
    target_min: int = 10
    target_max: int = 75

    # Rank projection
    exam_candidates: Mapping[str, int] = field(
        default_factory=lambda: _frozen({"JEE": 1_200_000, "NEET": 1_800_000})
    )
    # (attempts below, factor), first match wins; experienced_factor otherwise
    experience_steps: tuple[tuple[int, float], ...] = ((100, 1.3), (500, 1.1), (1000, 1.0))
    experienced_factor: float = 0.9
    rank_target_accuracy: float = 90
    weekly_accuracy_gain: float = 2
    # (percentile at least, label), first match wins; below_percentile_label otherwise
    percentile_bands: tuple[tuple[float, str], ...] = (
        (99, "Top 1%"),
        (95, "Top 5%"),
        (90, "Top 10%"),
        (80, "Top 20%"),
        (50, "Top 50%"),
    )
    below_percentile_label: str = "Below 50%"

    # Motivation tiers
    streak_lookback_days: int = 60
    long_streak_days: int = 30
    steady_streak_days: int = 7
    outstanding_accuracy: float = 85
    outstanding_questions: int = 20
    good_accuracy: float = 70
    struggling_accuracy: float = 50
    busy_day_questions: int = 10


DEFAULT_MASTERY_CONFIG = MasteryConfig()
DEFAULT_SPACED_REPETITION_CONFIG = SpacedRepetitionConfig()
DEFAULT_BURNOUT_CONFIG = BurnoutConfig()
DEFAULT_PLANNER_CONFIG = PlannerConfig()
