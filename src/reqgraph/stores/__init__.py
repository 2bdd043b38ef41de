"""Store implementations."""

from reqgraph.stores.memory import MemoryStore
from reqgraph.stores.sqlite import SQLiteStore

__all__ = ["MemoryStore", "SQLiteStore"]
