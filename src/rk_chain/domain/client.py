"""ChainClient Protocol — dependency inversion for testability.

Unit tests inject an AsyncMock conforming to this Protocol.
Infrastructure provides the httpx implementation.

Height-scoped reads take a concrete height, or None for "latest".
Every method raises ChainClientError (or a subclass) on failure and never
retries; cancelling the awaiting task aborts the in-flight request.
"""

import logging
from typing import Protocol

from src.rk_account.domain.models import Account
from src.rk_chain.domain.models import (
    Block,
    BlockResults,
    BroadcastResult,
    ChainClientError,
    Delegation,
    NoBlockResultsError,
    NodeStatus,
    UnbondingDelegation,
)
from src.rk_common.errors import AppError, ChainError

logger = logging.getLogger(__name__)


class ChainClient(Protocol):
    async def get_account(self, address: str, height: int | None) -> Account:
        """Raises UnknownAddressError when the chain has never seen the address."""
        ...

    async def get_delegations(
        self, address: str, height: int | None
    ) -> list[Delegation]: ...

    async def get_unbonding_delegations(
        self, address: str, height: int | None
    ) -> list[UnbondingDelegation]: ...

    async def get_block(
        self, height: int | None = None, block_hash: str | None = None
    ) -> Block: ...

    async def get_block_results(self, height: int | None) -> BlockResults:
        """Raises NoBlockResultsError when the height is not fully committed."""
        ...

    async def broadcast(self, tx_bytes: bytes) -> BroadcastResult: ...

    async def simulate(self, tx_bytes: bytes) -> int:
        """Return gas used by a dry run of the transaction."""
        ...

    async def status(self) -> NodeStatus: ...


def chain_error(exc: ChainClientError) -> AppError:
    """Wrap a node failure as the Rosetta chain error, keeping the node's text.

    Missing results for a just-produced height clear up on their own, so that
    case is marked retriable.
    """
    logger.warning("Chain client error: %s", exc)
    err = ChainError(str(exc))
    if isinstance(exc, NoBlockResultsError):
        err.retriable = True
    return err
