"""
Core domain models shared by the study components.

Design:
- TopicKey: (subject, chapter, topic) identity of a study topic
- TopicMasteryRecord: persisted per-user mastery state for one topic
- RevisionScheduleEntry: derived revision view, never persisted
- EnergyLog / BurnoutSignal: daily study aggregates and what they signal
- DailyTask / DailyPlan: one day of a generated weekly plan
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum

from prep_engine.core.errors import (
    InvalidInputError,
    require_non_negative,
    require_percentage,
)


class MasteryLevel(IntEnum):
    """Discrete proficiency on one topic."""

    FOUNDATION = 1
    INTERMEDIATE = 2
    ADVANCED = 3
    MASTERED = 4

    @property
    def display_name(self) -> str:
        return self.name.title()


class Urgency(str, Enum):
    """How soon a topic needs revision."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort order, most urgent first."""
        return _URGENCY_ORDER[self]


_URGENCY_ORDER = {
    Urgency.CRITICAL: 0,
    Urgency.HIGH: 1,
    Urgency.MEDIUM: 2,
    Urgency.LOW: 3,
}


class SignalType(str, Enum):
    ACCURACY_DROP = "accuracy_drop"
    TIME_DECREASE = "time_decrease"
    NIGHT_STUDY = "night_study"
    INCOMPLETE_TARGETS = "incomplete_targets"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TopicStatus(str, Enum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


class TaskType(str, Enum):
    STUDY = "study"
    REVISION = "revision"
    MOCK_TEST = "mock_test"


class TimeSlot(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class TaskPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MotivationKind(str, Enum):
    CELEBRATION = "celebration"
    ENCOURAGEMENT = "encouragement"
    WARNING = "warning"


# =============================================================================
# Mastery
# =============================================================================


@dataclass(frozen=True, order=True)
class TopicKey:
    """Identity of a topic within a subject and chapter."""

    subject: str
    chapter: str
    topic: str

    def __post_init__(self) -> None:
        for name in ("subject", "chapter", "topic"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidInputError(f"{name} must be a non-empty string, got {value!r}")

    def __str__(self) -> str:
        return f"{self.subject} / {self.chapter} / {self.topic}"


@dataclass
class TopicMasteryRecord:
    """Mastery state for one (user, topic) pair."""

    user_id: str
    key: TopicKey
    current_level: int = MasteryLevel.FOUNDATION
    accuracy: float = 0.0  # 0-100, over attempts at the current level
    questions_attempted: int = 0  # since the last level change
    last_practiced: datetime | None = None
    stuck_days: int = 0

    def __post_init__(self) -> None:
        if not self.user_id:
            raise InvalidInputError("user_id must be a non-empty string")
        try:
            self.current_level = MasteryLevel(self.current_level)
        except ValueError:
            raise InvalidInputError(
                f"current_level must be 1-4, got {self.current_level!r}"
            ) from None
        self.accuracy = require_percentage("accuracy", self.accuracy)
        require_non_negative("questions_attempted", self.questions_attempted)
        require_non_negative("stuck_days", self.stuck_days)

    @classmethod
    def fresh(cls, user_id: str, key: TopicKey) -> TopicMasteryRecord:
        """State for a topic the user has never answered."""
        return cls(user_id=user_id, key=key)

    @property
    def subject(self) -> str:
        return self.key.subject

    @property
    def chapter(self) -> str:
        return self.key.chapter

    @property
    def topic(self) -> str:
        return self.key.topic


@dataclass(frozen=True)
class LevelTransition:
    """Outcome of recording one answer."""

    previous_level: int
    new_level: int
    leveled_up: bool
    leveled_down: bool
    message: str
    record: TopicMasteryRecord

    @property
    def changed(self) -> bool:
        return self.new_level != self.previous_level


# =============================================================================
# Revision
# =============================================================================


@dataclass(frozen=True)
class RevisionScheduleEntry:
    """Computed revision view of a mastery record."""

    key: TopicKey
    last_reviewed: datetime
    next_review: datetime
    review_number: int
    retention_probability: float  # 0-100
    days_since_review: int
    urgency: Urgency
    recommended_minutes: int

    @property
    def subject(self) -> str:
        return self.key.subject

    @property
    def topic(self) -> str:
        return self.key.topic


# =============================================================================
# Energy / burnout
# =============================================================================


@dataclass(frozen=True)
class EnergyLog:
    """One day of study aggregates."""

    day: date
    study_hours: float
    questions_attempted: int
    accuracy: float
    late_night_study: bool = False

    def __post_init__(self) -> None:
        require_non_negative("study_hours", self.study_hours)
        require_non_negative("questions_attempted", self.questions_attempted)
        require_percentage("accuracy", self.accuracy)


@dataclass(frozen=True)
class BurnoutSignal:
    type: SignalType
    severity: Severity
    message: str


@dataclass(frozen=True)
class BurnoutAssessment:
    """Energy score, signals and the resulting rest recommendation."""

    energy_score: float
    signals: tuple[BurnoutSignal, ...]
    suggest_rest: bool
    message: str

    @property
    def high_severity_count(self) -> int:
        return sum(1 for s in self.signals if s.severity is Severity.HIGH)


# =============================================================================
# Planning
# =============================================================================


@dataclass(frozen=True)
class TimeAllocation:
    """Share of a study day for new study, revision and mock tests."""

    study_time: float
    revision_time: float
    mock_test_time: float

    def __post_init__(self) -> None:
        parts = (self.study_time, self.revision_time, self.mock_test_time)
        if any(p < 0 for p in parts) or abs(sum(parts) - 1.0) > 1e-6:
            raise InvalidInputError(f"time allocation must be non-negative and sum to 1, got {parts}")


@dataclass(frozen=True)
class TopicPriority:
    """A mastery record ranked for planning."""

    record: TopicMasteryRecord
    days_since_practice: int
    status: TopicStatus
    priority_score: float

    @property
    def key(self) -> TopicKey:
        return self.record.key

    @property
    def accuracy(self) -> float:
        return self.record.accuracy

    @property
    def questions_attempted(self) -> int:
        return self.record.questions_attempted


@dataclass(frozen=True)
class CategorizedTopics:
    weak: tuple[TopicPriority, ...] = ()
    medium: tuple[TopicPriority, ...] = ()
    strong: tuple[TopicPriority, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.weak or self.medium or self.strong)


@dataclass(frozen=True)
class DailyTask:
    topic: str
    subject: str
    chapter: str
    duration: int  # minutes
    type: TaskType
    time_slot: TimeSlot
    priority: TaskPriority


@dataclass(frozen=True)
class DailyPlan:
    date: date
    day_name: str
    is_rest_day: bool
    total_minutes: int
    tasks: tuple[DailyTask, ...] = field(default_factory=tuple)
