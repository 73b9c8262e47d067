"""
SQLAlchemy-backed MasteryStore.

Works against any async SQLAlchemy URL (SQLite via aiosqlite by default,
PostgreSQL via asyncpg). Driver errors are re-raised as PersistenceError;
nothing is retried here.
"""

from __future__ import annotations

from datetime import date

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prep_engine.core.errors import PersistenceError
from prep_engine.core.models import EnergyLog, TopicKey, TopicMasteryRecord
from prep_engine.db.database import async_session_scope, get_async_session_factory
from prep_engine.db.models import EnergyLogRow, TopicMasteryRow
from prep_engine.db.store import window_start


class SqlAlchemyStore:
    """MasteryStore over an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self._factory = session_factory or get_async_session_factory()

    @staticmethod
    def _by_key(user_id: str, key: TopicKey):
        return select(TopicMasteryRow).where(
            TopicMasteryRow.user_id == user_id,
            TopicMasteryRow.subject == key.subject,
            TopicMasteryRow.chapter == key.chapter,
            TopicMasteryRow.topic == key.topic,
        )

    async def load_mastery_record(
        self, user_id: str, key: TopicKey
    ) -> TopicMasteryRecord | None:
        try:
            async with async_session_scope(self._factory) as session:
                row = (await session.execute(self._by_key(user_id, key))).scalar_one_or_none()
                return row.to_record() if row is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load mastery for {user_id} / {key}: {e}") from e

    async def save_mastery_record(self, record: TopicMasteryRecord) -> None:
        try:
            async with async_session_scope(self._factory) as session:
                stmt = self._by_key(record.user_id, record.key)
                row = (await session.execute(stmt)).scalar_one_or_none()
                if row is None:
                    row = TopicMasteryRow(
                        user_id=record.user_id,
                        subject=record.subject,
                        chapter=record.chapter,
                        topic=record.topic,
                    )
                    session.add(row)
                row.apply(record)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to save mastery for {record.user_id} / {record.key}: {e}"
            ) from e
        logger.debug(f"Saved mastery {record.user_id} / {record.key} level={record.current_level}")

    async def list_mastery_records(self, user_id: str) -> list[TopicMasteryRecord]:
        stmt = (
            select(TopicMasteryRow)
            .where(TopicMasteryRow.user_id == user_id)
            .order_by(TopicMasteryRow.subject, TopicMasteryRow.chapter, TopicMasteryRow.topic)
        )
        try:
            async with async_session_scope(self._factory) as session:
                rows = (await session.execute(stmt)).scalars().all()
                return [row.to_record() for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list mastery for {user_id}: {e}") from e

    async def append_energy_log(self, user_id: str, log: EnergyLog) -> None:
        try:
            async with async_session_scope(self._factory) as session:
                session.add(EnergyLogRow.from_log(user_id, log))
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to append energy log for {user_id} on {log.day}: {e}"
            ) from e

    async def load_recent_energy_logs(
        self, user_id: str, days: int, today: date
    ) -> list[EnergyLog]:
        stmt = (
            select(EnergyLogRow)
            .where(
                EnergyLogRow.user_id == user_id,
                EnergyLogRow.day >= window_start(days, today),
                EnergyLogRow.day <= today,
            )
            .order_by(EnergyLogRow.day)
        )
        try:
            async with async_session_scope(self._factory) as session:
                rows = (await session.execute(stmt)).scalars().all()
                return [row.to_log() for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load energy logs for {user_id}: {e}") from e
