"""
Key scheme for the flat world-state namespace.

Assets live under their id verbatim so a lookup is a single key read. History
records live under `HISTORY_<assetId>\\x00<txId>`. Asset ids that could be
mistaken for a history key are rejected up front.
"""
from .errors import InvalidAssetIdError

HISTORY_PREFIX = "HISTORY_"
HISTORY_KEY_SEPARATOR = "\x00"


def validate_asset_id(asset_id: str) -> str:
    if not asset_id:
        raise InvalidAssetIdError(asset_id, "id must be a non-empty string")
    if asset_id.startswith(HISTORY_PREFIX):
        raise InvalidAssetIdError(
            asset_id, f"ids starting with {HISTORY_PREFIX!r} are reserved"
        )
    if HISTORY_KEY_SEPARATOR in asset_id:
        raise InvalidAssetIdError(asset_id, "id must not contain NUL characters")
    return asset_id


def asset_key(asset_id: str) -> str:
    return validate_asset_id(asset_id)


def history_key(asset_id: str, tx_id: str) -> str:
    if not tx_id:
        raise ValueError("tx_id must be a non-empty string")
    return f"{HISTORY_PREFIX}{validate_asset_id(asset_id)}{HISTORY_KEY_SEPARATOR}{tx_id}"


def is_history_key(key: str) -> bool:
    # Keys shorter than the prefix can never match and are asset keys.
    return key.startswith(HISTORY_PREFIX)
