from datetime import datetime

from .keys import history_key
from .models import AssetHistory, HistoryAction
from .protocols import StateStore


class HistoryRecorder:
    """
    Appends audit records to the world state.

    Records are written blind: there is no read-before-write, so uniqueness of
    `tx_id` per invocation is what keeps one record from overwriting another.
    """

    def __init__(self, store: StateStore):
        self.store = store

    async def record_history(
        self,
        asset_id: str,
        action: HistoryAction,
        owner: str,
        tx_id: str,
        timestamp: datetime,
    ) -> AssetHistory:
        record = AssetHistory(
            asset_id=asset_id,
            action=action,
            owner=owner,
            tx_id=tx_id,
            timestamp=timestamp,
        )
        await self.store.put_state(history_key(asset_id, tx_id), record.to_json())
        return record
