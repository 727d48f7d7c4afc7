"""Invocation context shared by the storage backends."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Set

from .protocols import StateStore


def new_tx_id() -> str:
    """Generate a unique transaction id for an invocation."""
    return uuid.uuid4().hex


def now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def invocation_timestamp(timestamp: datetime | None) -> datetime:
    """Defaults to the current UTC time; rejects naive datetimes."""
    if timestamp is None:
        return now()
    if timestamp.tzinfo is None or timestamp.utcoffset() is None:
        raise ValueError(f"invocation timestamp must be timezone-aware, got {timestamp!r}")
    return timestamp


@dataclass(frozen=True)
class Invocation:
    store: StateStore
    tx_id: str
    timestamp: datetime
    read_only: bool = False
    # Ids of assets that already have a history record under this tx_id.
    mutated_assets: Set[str] = field(default_factory=set)
