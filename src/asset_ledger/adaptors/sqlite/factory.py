from typing import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
import aiosqlite
import asyncio
import logging
import os
import tempfile
import urllib.parse

from asset_ledger.errors import StoreFailureError
from asset_ledger.invocation import Invocation, invocation_timestamp, new_tx_id
from asset_ledger.adaptors.sqlite.handle import SCHEMA, SQLiteStateStore


def read_only_uri(db_path: str) -> str:
    """The `file:` URI of `db_path` opened read-only, with a single leading slash."""
    path = os.path.abspath(db_path).replace(os.sep, "/")
    # "//host/..." would be read as a URI authority.
    path = "/" + path.lstrip("/")
    return f"file:{urllib.parse.quote(path)}?mode=ro"


@asynccontextmanager
async def sqlite_ledger_factory(
    db_path: str,
    *,
    cache_size_kib: int = -16384,
    pool_size: int = 10,
):
    """
    A factory for invocations against a world state backed by a SQLite database.
    When used as an async context manager it yields an `open_invocation`
    function. Write invocations share one dedicated write connection and run
    one at a time, each inside its own transaction. Read-only invocations
    borrow a connection from a pool and read a WAL snapshot, so readers and
    the writer never block each other.

    `":memory:"` gives the factory a private database in a temporary
    directory that is removed on exit.
    """
    if not db_path:
        raise ValueError("`db_path` must be provided in the configuration.")

    tmpdir: tempfile.TemporaryDirectory | None = None
    if db_path == ":memory:":
        tmpdir = tempfile.TemporaryDirectory(prefix="ledger_")
        db_path = os.path.join(tmpdir.name, "ledger.db")

    write_lock = asyncio.Lock()
    read_pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
    write_conn: aiosqlite.Connection | None = None

    async def _initialize_db_resources():
        nonlocal write_conn
        write_conn = await aiosqlite.connect(db_path)
        await write_conn.execute("PRAGMA journal_mode=WAL;")
        await write_conn.execute("PRAGMA synchronous = NORMAL;")
        await write_conn.execute(f"PRAGMA cache_size = {cache_size_kib};")
        await write_conn.execute("PRAGMA busy_timeout = 5000;")
        await write_conn.execute(SCHEMA)
        await write_conn.commit()

        for _ in range(pool_size):
            conn = await aiosqlite.connect(read_only_uri(db_path), uri=True)
            await conn.execute(f"PRAGMA cache_size = {cache_size_kib};")
            await conn.execute("PRAGMA busy_timeout = 5000;")
            await conn.execute("PRAGMA query_only = ON;")
            await read_pool.put(conn)

    async def cleanup():
        """Closes all database connections and removes a temporary database."""
        connection_tasks = []
        if write_conn is not None:
            connection_tasks.append(write_conn.close())
        while not read_pool.empty():
            conn = await read_pool.get()
            connection_tasks.append(conn.close())
        await asyncio.gather(*connection_tasks)
        if tmpdir is not None:
            tmpdir.cleanup()

    @asynccontextmanager
    async def _read_invocation(tx_id: str, timestamp: datetime) -> AsyncIterator[Invocation]:
        conn = await read_pool.get()
        try:
            # A read transaction pins one snapshot for every read in the invocation.
            await conn.execute("BEGIN")
            try:
                yield Invocation(
                    store=SQLiteStateStore(conn, read_only=True),
                    tx_id=tx_id,
                    timestamp=timestamp,
                    read_only=True,
                )
            finally:
                await conn.rollback()
        finally:
            await read_pool.put(conn)

    @asynccontextmanager
    async def _write_invocation(tx_id: str, timestamp: datetime) -> AsyncIterator[Invocation]:
        async with write_lock:
            try:
                await write_conn.execute("BEGIN")
            except aiosqlite.Error as e:
                raise StoreFailureError(f"failed to begin invocation {tx_id}: {e}") from e

            try:
                yield Invocation(
                    store=SQLiteStateStore(write_conn),
                    tx_id=tx_id,
                    timestamp=timestamp,
                )
            except BaseException as e:
                await write_conn.rollback()
                logging.error(f"Rolled back invocation {tx_id}: {e!r}")
                raise

            try:
                await write_conn.commit()
            except aiosqlite.Error as e:
                await write_conn.rollback()
                logging.error(f"Failed to commit invocation {tx_id}: {e}")
                raise StoreFailureError(f"failed to commit invocation {tx_id}: {e}") from e

    @asynccontextmanager
    async def open_invocation(
        tx_id: str | None = None,
        timestamp: datetime | None = None,
        *,
        read_only: bool = False,
    ) -> AsyncIterator[Invocation]:
        tx_id = tx_id or new_tx_id()
        timestamp = invocation_timestamp(timestamp)
        invocation = _read_invocation if read_only else _write_invocation
        async with invocation(tx_id, timestamp) as ctx:
            yield ctx

    try:
        await _initialize_db_resources()
        yield open_invocation
    finally:
        await cleanup()
