"""Pydantic schemas for the /construction API."""

from typing import Any

from pydantic import BaseModel, Field

from src.rk_common.schemas import (
    AccountIdentifier,
    Amount,
    NetworkIdentifier,
    OperationModel,
    PublicKey,
    Signature,
    SigningPayload,
    TransactionIdentifier,
)

# ---------------------------------------------------------------------------
# Derive
# ---------------------------------------------------------------------------


class ConstructionDeriveRequest(BaseModel):
    network_identifier: NetworkIdentifier
    public_key: PublicKey
    metadata: dict[str, Any] | None = None


class ConstructionDeriveResponse(BaseModel):
    account_identifier: AccountIdentifier
    metadata: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Preprocess / Metadata
# ---------------------------------------------------------------------------


class ConstructionPreprocessRequest(BaseModel):
    network_identifier: NetworkIdentifier
    operations: list[OperationModel]
    metadata: dict[str, Any] | None = None
    max_fee: list[Amount] | None = None
    suggested_fee_multiplier: float | None = Field(None, ge=0, allow_inf_nan=False)


class ConstructionPreprocessResponse(BaseModel):
    options: dict[str, Any]
    required_public_keys: list[AccountIdentifier]


class ConstructionMetadataRequest(BaseModel):
    network_identifier: NetworkIdentifier
    options: dict[str, Any] | None = None
    public_keys: list[PublicKey] | None = None


class ConstructionMetadataResponse(BaseModel):
    metadata: dict[str, Any]
    suggested_fee: list[Amount]


# ---------------------------------------------------------------------------
# Payloads / Parse / Combine
# ---------------------------------------------------------------------------


class ConstructionPayloadsRequest(BaseModel):
    network_identifier: NetworkIdentifier
    operations: list[OperationModel]
    metadata: dict[str, Any] | None = None
    public_keys: list[PublicKey] | None = None


class ConstructionPayloadsResponse(BaseModel):
    unsigned_transaction: str
    payloads: list[SigningPayload]


class ConstructionParseRequest(BaseModel):
    network_identifier: NetworkIdentifier
    signed: bool
    transaction: str


class ConstructionParseResponse(BaseModel):
    operations: list[OperationModel]
    account_identifier_signers: list[AccountIdentifier]
    metadata: dict[str, Any] | None = None


class ConstructionCombineRequest(BaseModel):
    network_identifier: NetworkIdentifier
    unsigned_transaction: str
    signatures: list[Signature]


class ConstructionCombineResponse(BaseModel):
    signed_transaction: str


# ---------------------------------------------------------------------------
# Hash / Submit
# ---------------------------------------------------------------------------


class ConstructionHashRequest(BaseModel):
    network_identifier: NetworkIdentifier
    signed_transaction: str


class ConstructionSubmitRequest(BaseModel):
    network_identifier: NetworkIdentifier
    signed_transaction: str


class TransactionIdentifierResponse(BaseModel):
    transaction_identifier: TransactionIdentifier
    metadata: dict[str, Any] | None = None
