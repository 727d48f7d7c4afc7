"""
asset_ledger - an asset registry with a built-in audit trail over a flat,
ordered key-value world state.
"""
from .errors import (
    AssetAlreadyExistsError,
    AssetNotFoundError,
    DecodeFailureError,
    DuplicateMutationError,
    InvalidAssetError,
    InvalidAssetIdError,
    LedgerError,
    ReadOnlyInvocationError,
    StoreFailureError,
)
from .factories import ledger_factory
from .history import HistoryRecorder
from .invocation import Invocation
from .models import Asset, AssetHistory, AssetSpec, HistoryAction
from .protocols import InvocationContext, StateStore
from .queries import QueryEngine
from .registry import AssetRegistry
from .adaptors.memory import memory_ledger_factory
from .adaptors.sqlite import sqlite_ledger_factory

__all__ = [
    "Asset",
    "AssetHistory",
    "AssetSpec",
    "HistoryAction",
    "AssetRegistry",
    "HistoryRecorder",
    "QueryEngine",
    "Invocation",
    "InvocationContext",
    "StateStore",
    "ledger_factory",
    "memory_ledger_factory",
    "sqlite_ledger_factory",
    "LedgerError",
    "AssetAlreadyExistsError",
    "AssetNotFoundError",
    "InvalidAssetIdError",
    "DecodeFailureError",
    "InvalidAssetError",
    "DuplicateMutationError",
    "StoreFailureError",
    "ReadOnlyInvocationError",
]
