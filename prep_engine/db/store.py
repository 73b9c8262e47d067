"""
Persistence boundary for mastery records and energy logs.

The core only talks to a MasteryStore. Stores raise PersistenceError on
read/write failure and return None for records that do not exist yet.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import Protocol

from loguru import logger

from prep_engine.core.errors import PersistenceError
from prep_engine.core.models import EnergyLog, TopicKey, TopicMasteryRecord


class MasteryStore(Protocol):
    async def load_mastery_record(
        self, user_id: str, key: TopicKey
    ) -> TopicMasteryRecord | None: ...

    async def save_mastery_record(self, record: TopicMasteryRecord) -> None: ...

    async def list_mastery_records(self, user_id: str) -> list[TopicMasteryRecord]: ...

    async def append_energy_log(self, user_id: str, log: EnergyLog) -> None: ...

    async def load_recent_energy_logs(
        self, user_id: str, days: int, today: date
    ) -> list[EnergyLog]: ...


def window_start(days: int, today: date) -> date:
    """First day of a ``days``-long window ending on ``today``."""
    return today - timedelta(days=max(days, 1) - 1)


class InMemoryStore:
    """
    Dict-backed store for tests and offline runs.

    Records are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[str, TopicKey], TopicMasteryRecord] = {}
        self._energy: dict[str, dict[date, EnergyLog]] = {}

    async def load_mastery_record(
        self, user_id: str, key: TopicKey
    ) -> TopicMasteryRecord | None:
        record = self._records.get((user_id, key))
        return replace(record) if record is not None else None

    async def save_mastery_record(self, record: TopicMasteryRecord) -> None:
        self._records[(record.user_id, record.key)] = replace(record)

    async def list_mastery_records(self, user_id: str) -> list[TopicMasteryRecord]:
        return [
            replace(record)
            for (owner, key), record in sorted(self._records.items(), key=lambda kv: kv[0][1])
            if owner == user_id
        ]

    async def append_energy_log(self, user_id: str, log: EnergyLog) -> None:
        days = self._energy.setdefault(user_id, {})
        if log.day in days:
            raise PersistenceError(f"Energy log for {user_id} on {log.day} already recorded")
        days[log.day] = log
        logger.debug(f"Energy log appended for {user_id} on {log.day}")

    async def load_recent_energy_logs(
        self, user_id: str, days: int, today: date
    ) -> list[EnergyLog]:
        start = window_start(days, today)
        logs = self._energy.get(user_id, {})
        return [logs[d] for d in sorted(logs) if start <= d <= today]
