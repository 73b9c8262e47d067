"""
Core Module - Shared domain models and interfaces.

Components:
- models: TopicKey, TopicMasteryRecord, EnergyLog, DailyPlan and friends
- thresholds: Immutable rule tables (levels, intervals, penalties, allocation)
- errors: InvalidInputError / PersistenceError taxonomy
- clock: Injectable clocks
- locks: Per-key async serialization
"""

from prep_engine.core.clock import Clock, FixedClock, SystemClock
from prep_engine.core.errors import InvalidInputError, PersistenceError, PrepEngineError
from prep_engine.core.locks import KeyedLock
from prep_engine.core.models import (
    BurnoutAssessment,
    BurnoutSignal,
    CategorizedTopics,
    DailyPlan,
    DailyTask,
    EnergyLog,
    LevelTransition,
    MasteryLevel,
    RevisionScheduleEntry,
    Severity,
    SignalType,
    TaskPriority,
    TaskType,
    TimeAllocation,
    TimeSlot,
    TopicKey,
    TopicMasteryRecord,
    TopicPriority,
    TopicStatus,
    Urgency,
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

__all__ = [
    # Models
    "BurnoutAssessment",
    "BurnoutSignal",
    "CategorizedTopics",
    "DailyPlan",
    "DailyTask",
    "EnergyLog",
    "LevelTransition",
    "MasteryLevel",
    "RevisionScheduleEntry",
    "Severity",
    "SignalType",
    "TaskPriority",
    "TaskType",
    "TimeAllocation",
    "TimeSlot",
    "TopicKey",
    "TopicMasteryRecord",
    "TopicPriority",
    "TopicStatus",
    "Urgency",
    # Config
    "BurnoutConfig",
    "MasteryConfig",
    "PlannerConfig",
    "SpacedRepetitionConfig",
    "DEFAULT_BURNOUT_CONFIG",
    "DEFAULT_MASTERY_CONFIG",
    "DEFAULT_PLANNER_CONFIG",
    "DEFAULT_SPACED_REPETITION_CONFIG",
    # Infrastructure
    "Clock",
    "FixedClock",
    "SystemClock",
    "KeyedLock",
    "InvalidInputError",
    "PersistenceError",
    "PrepEngineError",
]
