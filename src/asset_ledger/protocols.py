"""
This module defines the abstract protocols for the world state and the
invocation that operates on it.

The registry, history recorder and query engine only ever talk to these
`Protocol`-based interfaces, so the same contract logic runs against the
in-memory fake used in tests and against the SQLite backend. Atomicity and
serialization of invocations belong to the backend, not to the core.
"""
from datetime import datetime
from typing import AsyncIterator, Protocol, Set, Tuple


class StateStore(Protocol):
    """
    Defines the contract that all world-state backends must implement.
    Keys are ordered lexicographically by their UTF-8 bytes.
    """

    async def get_state(self, key: str) -> bytes | None:
        ...

    async def put_state(self, key: str, value: bytes) -> None:
        ...

    async def del_state(self, key: str) -> None:
        ...

    def get_state_by_range(
        self, start_key: str, end_key: str
    ) -> AsyncIterator[Tuple[str, bytes]]:
        """
        Yields `(key, value)` pairs with `start_key <= key < end_key` in key
        order. An empty bound is open-ended. Callers must close the iterator.
        """
        ...


class InvocationContext(Protocol):
    """
    The view of one invocation handed to contract operations: the store the
    invocation reads and writes, the identifiers the environment assigned,
    and the assets the invocation has already mutated.
    """

    store: StateStore
    tx_id: str
    timestamp: datetime
    mutated_assets: Set[str]
