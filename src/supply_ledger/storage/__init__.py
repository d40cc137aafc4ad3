"""World-state storage backends implementing ``IStateStore``."""

from __future__ import annotations

from supply_ledger.storage.file_store import FileStateStore
from supply_ledger.storage.memory_store import MemoryStateIterator, MemoryStateStore
from supply_ledger.storage.redis_store import RedisStateStore

__all__ = [
    "FileStateStore",
    "MemoryStateIterator",
    "MemoryStateStore",
    "RedisStateStore",
]
