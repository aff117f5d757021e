"""Pydantic schemas for the /account API."""

from typing import Any

from pydantic import BaseModel

from src.rk_common.schemas import (
    AccountIdentifier,
    Amount,
    BlockIdentifier,
    CurrencyModel,
    NetworkIdentifier,
    PartialBlockIdentifier,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AccountBalanceRequest(BaseModel):
    network_identifier: NetworkIdentifier
    account_identifier: AccountIdentifier
    block_identifier: PartialBlockIdentifier | None = None
    currencies: list[CurrencyModel] | None = None


class AccountCoinsRequest(BaseModel):
    network_identifier: NetworkIdentifier
    account_identifier: AccountIdentifier
    include_mempool: bool = False
    currencies: list[CurrencyModel] | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountBalanceResponse(BaseModel):
    block_identifier: BlockIdentifier
    balances: list[Amount]
    metadata: dict[str, Any] | None = None
