"""
Mastery and energy-log tables.

- TopicMasteryRow: one row per (user, subject, chapter, topic), upserted on
  every answered question, never deleted
- EnergyLogRow: one append-only row per user per day
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, Float, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from prep_engine.core.models import EnergyLog, TopicKey, TopicMasteryRecord

from .base import Base


class TopicMasteryRow(Base):
    """Persisted TopicMasteryRecord."""

    __tablename__ = "topic_mastery"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(128), nullable=False)
    chapter: Mapped[str] = mapped_column(String(256), nullable=False)
    topic: Mapped[str] = mapped_column(String(256), nullable=False)

    current_level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    accuracy: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    questions_attempted: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_practiced: Mapped[datetime | None] = mapped_column()
    stuck_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "subject", "chapter", "topic", name="uq_user_topic"),
    )

    def __repr__(self) -> str:
        return (
            f"<TopicMasteryRow user={self.user_id} topic={self.subject}/{self.chapter}/{self.topic} "
            f"level={self.current_level} accuracy={self.accuracy:.1f}>"
        )

    def to_record(self) -> TopicMasteryRecord:
        return TopicMasteryRecord(
            user_id=self.user_id,
            key=TopicKey(self.subject, self.chapter, self.topic),
            current_level=self.current_level,
            accuracy=self.accuracy,
            questions_attempted=self.questions_attempted,
            last_practiced=self.last_practiced,
            stuck_days=self.stuck_days,
        )

    def apply(self, record: TopicMasteryRecord) -> None:
        """Copy mutable state from a domain record onto this row."""
        self.current_level = int(record.current_level)
        self.accuracy = record.accuracy
        self.questions_attempted = record.questions_attempted
        self.last_practiced = record.last_practiced
        self.stuck_days = record.stuck_days


class EnergyLogRow(Base):
    """Persisted daily EnergyLog."""

    __tablename__ = "energy_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    day: Mapped[date] = mapped_column(Date, nullable=False)
    study_hours: Mapped[float] = mapped_column(Float, nullable=False)
    questions_attempted: Mapped[int] = mapped_column(Integer, nullable=False)
    accuracy: Mapped[float] = mapped_column(Float, nullable=False)
    late_night_study: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "day", name="uq_energy_user_day"),
        Index("idx_energy_user_day", "user_id", "day"),
    )

    def __repr__(self) -> str:
        return f"<EnergyLogRow user={self.user_id} day={self.day} hours={self.study_hours}>"

    @classmethod
    def from_log(cls, user_id: str, log: EnergyLog) -> EnergyLogRow:
        return cls(
            user_id=user_id,
            day=log.day,
            study_hours=log.study_hours,
            questions_attempted=log.questions_attempted,
            accuracy=log.accuracy,
            late_night_study=log.late_night_study,
        )

    def to_log(self) -> EnergyLog:
        return EnergyLog(
            day=self.day,
            study_hours=self.study_hours,
            questions_attempted=self.questions_attempted,
            accuracy=self.accuracy,
            late_night_study=self.late_night_study,
        )
