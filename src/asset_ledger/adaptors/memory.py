"""
An in-memory world state.

Committed state is an immutable-by-convention dict that is swapped, never
edited, on commit. An invocation reads the dict it started with plus its own
pending writes, so reads are snapshot-consistent, and nothing it writes is
visible to anyone else until it exits cleanly.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Dict, Tuple

from asset_ledger.errors import ReadOnlyInvocationError
from asset_ledger.invocation import Invocation, invocation_timestamp, new_tx_id

_DELETED = None


class MemoryStateStore:
    """The `StateStore` view of one invocation over a committed snapshot."""

    def __init__(self, committed: Dict[str, bytes], read_only: bool = False):
        self.committed = committed
        self.read_only = read_only
        self.pending: Dict[str, bytes | None] = {}

    async def get_state(self, key: str) -> bytes | None:
        if key in self.pending:
            return self.pending[key]
        return self.committed.get(key)

    async def put_state(self, key: str, value: bytes) -> None:
        if self.read_only:
            raise ReadOnlyInvocationError(key)
        self.pending[key] = bytes(value)

    async def del_state(self, key: str) -> None:
        if self.read_only:
            raise ReadOnlyInvocationError(key)
        self.pending[key] = _DELETED

    async def get_state_by_range(
        self, start_key: str, end_key: str
    ) -> AsyncIterator[Tuple[str, bytes]]:
        merged = dict(self.committed)
        for key, value in self.pending.items():
            if value is _DELETED:
                merged.pop(key, None)
            else:
                merged[key] = value

        # str ordering is code point ordering, which matches UTF-8 byte ordering.
        for key in sorted(merged):
            if start_key and key < start_key:
                continue
            if end_key and key >= end_key:
                break
            yield key, merged[key]

    def apply_to(self, committed: Dict[str, bytes]) -> Dict[str, bytes]:
        updated = dict(committed)
        for key, value in self.pending.items():
            if value is _DELETED:
                updated.pop(key, None)
            else:
                updated[key] = value
        return updated


@asynccontextmanager
async def memory_ledger_factory():
    """
    Yields an `open_invocation` function bound to a fresh, empty world state.
    Write invocations are serialized; read-only invocations never wait.
    """
    state: Dict[str, Dict[str, bytes]] = {"committed": {}}
    write_lock = asyncio.Lock()

    @asynccontextmanager
    async def open_invocation(
        tx_id: str | None = None,
        timestamp: datetime | None = None,
        *,
        read_only: bool = False,
    ) -> AsyncIterator[Invocation]:
        tx_id = tx_id or new_tx_id()
        timestamp = invocation_timestamp(timestamp)

        if read_only:
            store = MemoryStateStore(state["committed"], read_only=True)
            yield Invocation(store=store, tx_id=tx_id, timestamp=timestamp, read_only=True)
            return

        async with write_lock:
            store = MemoryStateStore(state["committed"])
            try:
                yield Invocation(store=store, tx_id=tx_id, timestamp=timestamp)
            except Exception as e:
                logging.error(f"Rolling back invocation {tx_id}: {e}")
                raise
            state["committed"] = store.apply_to(state["committed"])

    yield open_invocation
