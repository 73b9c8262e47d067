"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from prep_engine.core.clock import FixedClock
from prep_engine.core.models import TopicKey, TopicMasteryRecord
from prep_engine.db.store import InMemoryStore


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite via aiosqlite)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


NOW = datetime(2024, 3, 15, 9, 0, 0)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    """Clock frozen at 2024-03-15 09:00."""
    return FixedClock(NOW)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def friction():
    return TopicKey("Physics", "Mechanics", "Friction")


@pytest.fixture
def make_record():
    """Factory for mastery records with sensible defaults."""

    def _make(
        topic: str = "Friction",
        accuracy: float = 0.0,
        attempts: int = 0,
        level: int = 1,
        last_practiced: datetime | None = None,
        subject: str = "Physics",
        chapter: str = "Mechanics",
        user_id: str = "alice",
        stuck_days: int = 0,
    ) -> TopicMasteryRecord:
        return TopicMasteryRecord(
            user_id=user_id,
            key=TopicKey(subject, chapter, topic),
            current_level=level,
            accuracy=accuracy,
            questions_attempted=attempts,
            last_practiced=last_practiced,
            stuck_days=stuck_days,
        )

    return _make
