"""
This module implements the read-only aggregate queries over the world state.

There is no secondary index: each query is a full ordered scan of the key
space, so its cost grows with the store rather than with the result. Entries
are classified by key prefix first and by value shape second. A value that
does not decode as the expected record is skipped with a warning, so one
malformed entry cannot fail an aggregate query.
"""
import logging
from contextlib import aclosing
from typing import AsyncIterator, List, Type, TypeVar

import pydantic_core
from pydantic import BaseModel

from .keys import is_history_key
from .models import Asset, AssetHistory
from .protocols import StateStore

RecordT = TypeVar("RecordT", bound=BaseModel)


class QueryEngine:
    def __init__(self, store: StateStore):
        self.store = store

    async def _scan(
        self, history: bool, model: Type[RecordT]
    ) -> AsyncIterator[RecordT]:
        async with aclosing(self.store.get_state_by_range("", "")) as entries:
            async for key, value in entries:
                if is_history_key(key) != history:
                    continue
                try:
                    record = model.model_validate_json(value)
                except pydantic_core.ValidationError as e:
                    logging.warning(
                        f"Skipping entry {key!r} that is not a valid {model.__name__}: {e}"
                    )
                    continue
                yield record

    async def get_all_assets(self) -> List[Asset]:
        async with aclosing(self._scan(False, Asset)) as assets:
            return [asset async for asset in assets]

    async def get_assets_by_owner(self, owner: str) -> List[Asset]:
        """Returns the assets whose owner equals `owner` exactly (case-sensitive)."""
        async with aclosing(self._scan(False, Asset)) as assets:
            return [asset async for asset in assets if asset.owner == owner]

    async def get_asset_history(
        self, asset_id: str, *, chronological: bool = False
    ) -> List[AssetHistory]:
        """
        Returns the audit records of `asset_id`, including those of an asset
        that has since been deleted.

        Records come back in key order, which follows the `tx_id` values and is
        not necessarily the order the mutations happened in. Pass
        `chronological=True` to sort them by timestamp instead.
        """
        async with aclosing(self._scan(True, AssetHistory)) as records:
            history = [
                record async for record in records if record.asset_id == asset_id
            ]
        if chronological:
            history.sort(key=lambda record: record.timestamp)
        return history

    async def get_asset_count(self) -> int:
        count = 0
        async with aclosing(self._scan(False, Asset)) as assets:
            async for _ in assets:
                count += 1
        return count
