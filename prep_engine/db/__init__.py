"""
Persistence for mastery records and energy logs.

- store: MasteryStore protocol and the in-memory implementation
- sql_store: Async SQLAlchemy implementation
- database: Engine/session management
"""

from prep_engine.db.store import InMemoryStore, MasteryStore

__all__ = ["InMemoryStore", "MasteryStore"]
