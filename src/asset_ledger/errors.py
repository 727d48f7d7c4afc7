"""Exceptions raised by the ledger core and its storage backends."""


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    pass


class AssetAlreadyExistsError(LedgerError):
    """Raised when creating an asset whose id is already live."""

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"the asset {asset_id} already exists")


class AssetNotFoundError(LedgerError):
    """Raised when an asset cannot be found in the world state."""

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"the asset {asset_id} does not exist")


class InvalidAssetIdError(LedgerError):
    """Raised when an asset id cannot be mapped to an asset key."""

    def __init__(self, asset_id: str, reason: str):
        self.asset_id = asset_id
        self.reason = reason
        super().__init__(f"invalid asset id {asset_id!r}: {reason}")


class DecodeFailureError(LedgerError):
    """Raised when a stored value does not deserialize into the expected record."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"failed to decode value at key {key!r}: {message}")


class StoreFailureError(LedgerError):
    """Raised when the underlying state store fails a read, write or scan."""

    pass


class ReadOnlyInvocationError(StoreFailureError):
    """Raised when a write is attempted inside a read-only invocation."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"cannot write key {key!r} in a read-only invocation")


class InvalidAssetError(LedgerError):
    """Raised when asset attributes fail validation."""

    def __init__(self, asset_id: str, message: str):
        self.asset_id = asset_id
        super().__init__(f"invalid attributes for asset {asset_id}: {message}")


class DuplicateMutationError(LedgerError):
    """
    Raised when an invocation mutates the same asset twice. Both mutations
    would share one history key, so the second record would replace the first.
    """

    def __init__(self, asset_id: str, tx_id: str):
        self.asset_id = asset_id
        self.tx_id = tx_id
        super().__init__(f"the asset {asset_id} was already mutated in tx {tx_id}")
