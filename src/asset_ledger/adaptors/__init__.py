from .memory import MemoryStateStore, memory_ledger_factory
from .sqlite import SQLiteStateStore, sqlite_ledger_factory

__all__ = [
    "MemoryStateStore",
    "memory_ledger_factory",
    "SQLiteStateStore",
    "sqlite_ledger_factory",
]
