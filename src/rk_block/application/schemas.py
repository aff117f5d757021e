"""Pydantic schemas for the /block and /mempool API."""

from pydantic import BaseModel

from src.rk_block.domain.models import MappedTransaction
from src.rk_common.schemas import (
    BlockIdentifier,
    NetworkIdentifier,
    OperationModel,
    PartialBlockIdentifier,
    Transaction,
    TransactionIdentifier,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BlockRequest(BaseModel):
    network_identifier: NetworkIdentifier
    block_identifier: PartialBlockIdentifier


class BlockTransactionRequest(BaseModel):
    network_identifier: NetworkIdentifier
    block_identifier: BlockIdentifier
    transaction_identifier: TransactionIdentifier


class MempoolTransactionRequest(BaseModel):
    network_identifier: NetworkIdentifier
    transaction_identifier: TransactionIdentifier


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


def transaction_from_domain(mapped: MappedTransaction) -> Transaction:
    return Transaction(
        transaction_identifier=TransactionIdentifier(hash=mapped.hash),
        operations=[OperationModel.from_domain(op) for op in mapped.operations],
        metadata=mapped.metadata,
    )


class BlockModel(BaseModel):
    block_identifier: BlockIdentifier
    parent_block_identifier: BlockIdentifier
    timestamp: int
    transactions: list[Transaction]


class BlockResponse(BaseModel):
    block: BlockModel | None = None
    other_transactions: list[TransactionIdentifier] | None = None


class BlockTransactionResponse(BaseModel):
    transaction: Transaction
