"""Pydantic models for the Rosetta objects shared by every API group."""

from typing import Any

from pydantic import BaseModel, Field

from src.rk_common.currency import Currency
from src.rk_operations.domain.models import Operation

# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


class NetworkIdentifier(BaseModel):
    blockchain: str
    network: str


class SubAccountIdentifier(BaseModel):
    address: str
    metadata: dict[str, Any] | None = None


class AccountIdentifier(BaseModel):
    address: str
    sub_account: SubAccountIdentifier | None = None
    metadata: dict[str, Any] | None = None


class BlockIdentifier(BaseModel):
    index: int = Field(..., ge=0)
    hash: str


class PartialBlockIdentifier(BaseModel):
    index: int | None = Field(None, ge=0)
    hash: str | None = None


class TransactionIdentifier(BaseModel):
    hash: str


class OperationIdentifier(BaseModel):
    index: int = Field(..., ge=0)
    network_index: int | None = Field(None, ge=0)


# ---------------------------------------------------------------------------
# Amounts and operations
# ---------------------------------------------------------------------------


class CurrencyModel(BaseModel):
    symbol: str
    decimals: int = Field(..., ge=0)
    metadata: dict[str, Any] | None = None

    @classmethod
    def from_domain(cls, currency: Currency) -> "CurrencyModel":
        return cls(symbol=currency.symbol, decimals=currency.decimals)


class Amount(BaseModel):
    value: str
    currency: CurrencyModel
    metadata: dict[str, Any] | None = None


class OperationModel(BaseModel):
    operation_identifier: OperationIdentifier
    related_operations: list[OperationIdentifier] | None = None
    type: str
    status: str | None = None
    account: AccountIdentifier | None = None
    amount: Amount | None = None
    metadata: dict[str, Any] | None = None

    @classmethod
    def from_domain(cls, op: Operation) -> "OperationModel":
        return cls(
            operation_identifier=OperationIdentifier(index=op.index),
            related_operations=[
                OperationIdentifier(index=i) for i in op.related_operations
            ] or None,
            type=op.type.value,
            status=op.status.value if op.status is not None else None,
            account=AccountIdentifier(address=op.account),
            amount=Amount(value=str(op.amount), currency=CurrencyModel.from_domain(op.currency)),
        )


class Transaction(BaseModel):
    transaction_identifier: TransactionIdentifier
    operations: list[OperationModel]
    metadata: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Keys and signatures
# ---------------------------------------------------------------------------


class PublicKey(BaseModel):
    hex_bytes: str
    curve_type: str


class SigningPayload(BaseModel):
    address: str | None = None
    account_identifier: AccountIdentifier | None = None
    hex_bytes: str
    signature_type: str | None = None


class Signature(BaseModel):
    signing_payload: SigningPayload
    public_key: PublicKey
    signature_type: str
    hex_bytes: str


# ---------------------------------------------------------------------------
# Requests shared by several endpoints
# ---------------------------------------------------------------------------


class MetadataRequest(BaseModel):
    metadata: dict[str, Any] | None = None


class NetworkRequest(BaseModel):
    network_identifier: NetworkIdentifier
    metadata: dict[str, Any] | None = None
