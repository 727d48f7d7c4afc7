"""
This module defines the ledger's data models using Pydantic.

The models double as the wire codec: attribute names are snake_case, while the
JSON stored in the world state uses the field names of the ledger contract
(`ID`, `appraisedValue`, `createdAt`, ...). Validation failures are what the
query engine uses to tell assets apart from anything else in the key space.
"""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class HistoryAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    TRANSFER = "TRANSFER"


class Asset(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="ID", min_length=1)
    color: str
    size: int = Field(strict=True)
    owner: str
    appraised_value: int = Field(alias="appraisedValue", strict=True)
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


class AssetHistory(BaseModel):
    """An immutable audit record. `owner` is the owner as of `action`."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    asset_id: str = Field(alias="assetId")
    action: HistoryAction
    owner: str
    tx_id: str = Field(alias="txId")
    timestamp: datetime

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


class AssetSpec(BaseModel):
    """The caller-supplied attributes of an asset, used to seed the ledger."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="ID")
    color: str
    size: int = Field(strict=True)
    owner: str
    appraised_value: int = Field(alias="appraisedValue", strict=True)
