"""Event stores: in-process TTL cache and the shared SQL cache table."""

from .memory import MemoryEventStore
from .sql import SqlEventStore

__all__ = ["MemoryEventStore", "SqlEventStore"]
