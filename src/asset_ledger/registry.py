"""
This module implements the asset registry: create, read, update, delete and
transfer of assets in the world state.

Every operation runs inside one invocation. Mutations write the asset and then
append one history record through the `HistoryRecorder`; the invocation
boundary is what makes those two writes land together or not at all.
"""
import logging
from typing import Iterable, List

import pydantic_core

from .errors import (
    AssetAlreadyExistsError,
    AssetNotFoundError,
    DecodeFailureError,
    DuplicateMutationError,
    InvalidAssetError,
)
from .history import HistoryRecorder
from .keys import asset_key
from .models import Asset, AssetSpec, HistoryAction
from .protocols import InvocationContext

SAMPLE_ASSETS = [
    AssetSpec(id="asset1", color="blue", size=5, owner="Tomoko", appraised_value=300),
    AssetSpec(id="asset2", color="red", size=5, owner="Brad", appraised_value=400),
    AssetSpec(id="asset3", color="green", size=10, owner="Jin Soo", appraised_value=500),
    AssetSpec(id="asset4", color="yellow", size=10, owner="Max", appraised_value=600),
    AssetSpec(id="asset5", color="black", size=15, owner="Adriana", appraised_value=700),
    AssetSpec(id="asset6", color="white", size=15, owner="Michel", appraised_value=800),
    AssetSpec(id="asset7", color="purple", size=20, owner="Aarav", appraised_value=900),
    AssetSpec(id="asset8", color="orange", size=20, owner="Lili", appraised_value=1000),
    AssetSpec(id="asset9", color="pink", size=25, owner="Yu", appraised_value=1100),
    AssetSpec(id="asset10", color="brown", size=25, owner="Karim", appraised_value=1200),
]


class AssetRegistry:
    def __init__(self, ctx: InvocationContext):
        self.ctx = ctx
        self.store = ctx.store
        self.history = HistoryRecorder(ctx.store)

    async def asset_exists(self, asset_id: str) -> bool:
        """Returns True when an asset is stored under `asset_id`, without decoding it."""
        value = await self.store.get_state(asset_key(asset_id))
        return value is not None

    async def create_asset(
        self,
        asset_id: str,
        color: str,
        size: int,
        owner: str,
        appraised_value: int,
    ) -> Asset:
        if await self.asset_exists(asset_id):
            raise AssetAlreadyExistsError(asset_id)

        asset = _build_asset(
            asset_id,
            id=asset_id,
            color=color,
            size=size,
            owner=owner,
            appraised_value=appraised_value,
            created_at=self.ctx.timestamp,
            updated_at=self.ctx.timestamp,
        )
        await self._write(asset, HistoryAction.CREATE)
        return asset

    async def read_asset(self, asset_id: str) -> Asset:
        key = asset_key(asset_id)
        value = await self.store.get_state(key)
        if value is None:
            raise AssetNotFoundError(asset_id)
        try:
            return Asset.model_validate_json(value)
        except pydantic_core.ValidationError as e:
            raise DecodeFailureError(key, str(e)) from e

    async def update_asset(
        self,
        asset_id: str,
        color: str,
        size: int,
        owner: str,
        appraised_value: int,
    ) -> Asset:
        """
        Overwrites every attribute of an existing asset except `created_at`.
        The history record carries the new owner even when it did not change.
        """
        existing = await self.read_asset(asset_id)

        asset = _build_asset(
            asset_id,
            id=asset_id,
            color=color,
            size=size,
            owner=owner,
            appraised_value=appraised_value,
            created_at=existing.created_at,
            updated_at=self.ctx.timestamp,
        )
        await self._write(asset, HistoryAction.UPDATE)
        return asset

    async def delete_asset(self, asset_id: str) -> None:
        """Removes the asset. Deletions are not recorded in the asset's history."""
        if not await self.asset_exists(asset_id):
            raise AssetNotFoundError(asset_id)

        await self.store.del_state(asset_key(asset_id))
        logging.info(f"Deleted asset {asset_id} in tx {self.ctx.tx_id}")

    async def transfer_asset(self, asset_id: str, new_owner: str) -> Asset:
        asset = await self.read_asset(asset_id)
        transferred = _build_asset(
            asset_id,
            **{**asset.model_dump(), "owner": new_owner, "updated_at": self.ctx.timestamp},
        )
        await self._write(transferred, HistoryAction.TRANSFER)
        return transferred

    async def init_ledger(self, assets: Iterable[AssetSpec] | None = None) -> List[Asset]:
        """Seeds the world state, by default with the sample asset set."""
        specs = SAMPLE_ASSETS if assets is None else list(assets)
        created = []
        for spec in specs:
            created.append(
                await self.create_asset(
                    spec.id, spec.color, spec.size, spec.owner, spec.appraised_value
                )
            )
        return created

    async def _write(self, asset: Asset, action: HistoryAction):
        # One history key per (asset, tx): a second mutation would overwrite the first record.
        if asset.id in self.ctx.mutated_assets:
            raise DuplicateMutationError(asset.id, self.ctx.tx_id)

        await self.store.put_state(asset_key(asset.id), asset.to_json())
        await self.history.record_history(
            asset.id, action, asset.owner, self.ctx.tx_id, self.ctx.timestamp
        )
        self.ctx.mutated_assets.add(asset.id)
        logging.info(f"{action.value} asset {asset.id} in tx {self.ctx.tx_id}")


def _build_asset(asset_id: str, **fields) -> Asset:
    try:
        return Asset(**fields)
    except pydantic_core.ValidationError as e:
        raise InvalidAssetError(asset_id, str(e)) from e
