"""Pydantic schemas for the /network API and /call."""

from typing import Any

from pydantic import BaseModel

from src.rk_common.schemas import BlockIdentifier, NetworkIdentifier


class NetworkListResponse(BaseModel):
    network_identifiers: list[NetworkIdentifier]


# ---------------------------------------------------------------------------
# /network/options
# ---------------------------------------------------------------------------


class Version(BaseModel):
    rosetta_version: str
    node_version: str
    middleware_version: str | None = None


class OperationStatusModel(BaseModel):
    status: str
    successful: bool


class ErrorModel(BaseModel):
    code: int
    message: str
    retriable: bool
    description: str | None = None


class Allow(BaseModel):
    operation_statuses: list[OperationStatusModel]
    operation_types: list[str]
    errors: list[ErrorModel]
    historical_balance_lookup: bool
    call_methods: list[str]
    balance_exemptions: list[dict[str, Any]]
    mempool_coins: bool


class NetworkOptionsResponse(BaseModel):
    version: Version
    allow: Allow


# ---------------------------------------------------------------------------
# /network/status
# ---------------------------------------------------------------------------


class SyncStatus(BaseModel):
    current_index: int
    target_index: int | None = None
    stage: str | None = None
    synced: bool


class PeerModel(BaseModel):
    peer_id: str
    metadata: dict[str, Any] | None = None


class NetworkStatusResponse(BaseModel):
    current_block_identifier: BlockIdentifier
    current_block_timestamp: int
    genesis_block_identifier: BlockIdentifier
    oldest_block_identifier: BlockIdentifier | None = None
    sync_status: SyncStatus | None = None
    peers: list[PeerModel]


# ---------------------------------------------------------------------------
# /call
# ---------------------------------------------------------------------------


class CallRequest(BaseModel):
    network_identifier: NetworkIdentifier
    method: str
    parameters: dict[str, Any] = {}
