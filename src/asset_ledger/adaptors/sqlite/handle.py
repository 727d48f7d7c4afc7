from typing import AsyncIterator, List, Tuple

import aiosqlite
import logging

from asset_ledger.errors import ReadOnlyInvocationError, StoreFailureError

SCHEMA = """
    CREATE TABLE IF NOT EXISTS world_state (
        key BLOB PRIMARY KEY,
        value BLOB NOT NULL
    ) WITHOUT ROWID
"""


class SQLiteStateStore:
    """
    A concrete implementation of the `StateStore` protocol for SQLite.

    Keys are stored as UTF-8 encoded BLOBs so that SQLite's ordering is a plain
    byte comparison. The store does not manage transactions: the invocation
    that owns the connection begins, commits and rolls back around it.
    """

    def __init__(self, conn: aiosqlite.Connection, read_only: bool = False):
        self.conn = conn
        self.read_only = read_only

    async def get_state(self, key: str) -> bytes | None:
        logging.debug(f"get_state {key!r}")
        try:
            async with self.conn.execute(
                "SELECT value FROM world_state WHERE key = ?", (key.encode("utf-8"),)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreFailureError(f"failed to read key {key!r} from world state: {e}") from e
        return bytes(row[0]) if row else None

    async def put_state(self, key: str, value: bytes) -> None:
        if self.read_only:
            raise ReadOnlyInvocationError(key)
        try:
            await self.conn.execute(
                "INSERT OR REPLACE INTO world_state (key, value) VALUES (?, ?)",
                (key.encode("utf-8"), value),
            )
        except aiosqlite.Error as e:
            raise StoreFailureError(f"failed to put key {key!r} to world state: {e}") from e

    async def del_state(self, key: str) -> None:
        if self.read_only:
            raise ReadOnlyInvocationError(key)
        try:
            await self.conn.execute(
                "DELETE FROM world_state WHERE key = ?", (key.encode("utf-8"),)
            )
        except aiosqlite.Error as e:
            raise StoreFailureError(f"failed to delete key {key!r} from world state: {e}") from e

    async def get_state_by_range(
        self, start_key: str, end_key: str
    ) -> AsyncIterator[Tuple[str, bytes]]:
        """An async generator over `start_key <= key < end_key`; empty bounds are open."""
        conditions: List[str] = []
        params: List[bytes] = []
        if start_key:
            conditions.append("key >= ?")
            params.append(start_key.encode("utf-8"))
        if end_key:
            conditions.append("key < ?")
            params.append(end_key.encode("utf-8"))
        where = "WHERE " + " AND ".join(conditions) if conditions else ""

        logging.debug(f"get_state_by_range {start_key!r} {end_key!r}")
        try:
            async with self.conn.execute(
                f"SELECT key, value FROM world_state {where} ORDER BY key", params
            ) as cursor:
                async for key, value in cursor:
                    yield bytes(key).decode("utf-8"), bytes(value)
        except aiosqlite.Error as e:
            raise StoreFailureError(f"failed to scan world state: {e}") from e
