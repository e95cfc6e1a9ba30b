"""Storage collaborators: protocol, in-memory and SQLAlchemy implementations."""

from fitforge.store.base import EngineStore
from fitforge.store.memory import MemoryStore
from fitforge.store.sql import SQLAlchemyStore

__all__ = ["EngineStore", "MemoryStore", "SQLAlchemyStore"]
