from .factory import sqlite_ledger_factory
from .handle import SQLiteStateStore

__all__ = ["sqlite_ledger_factory", "SQLiteStateStore"]
