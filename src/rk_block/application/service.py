"""BlockApplicationService — block and block-transaction reads.

One block is pinned per request (see resolver.py); mapping is pure and runs
on the fetched block and results.
"""

from src.rk_block.application.resolver import resolve_block
from src.rk_block.application.schemas import (
    BlockModel,
    BlockRequest,
    BlockResponse,
    BlockTransactionRequest,
    BlockTransactionResponse,
    MempoolTransactionRequest,
    transaction_from_domain,
)
from src.rk_block.domain.models import MappedTransaction
from src.rk_block.domain.transactions import InconsistentBlockError, map_block_transactions
from src.rk_chain.domain.client import ChainClient
from src.rk_chain.domain.models import Block, BlockResults
from src.rk_common.chain_params import ChainParameters
from src.rk_common.datetime_utils import to_unix_millis
from src.rk_common.enums import Mode
from src.rk_common.errors import ChainError, TransactionNotFoundError, UnimplementedError
from src.rk_common.schemas import BlockIdentifier, NetworkRequest, PartialBlockIdentifier
from src.rk_common.validation import check_network, require_online
from src.rk_operations.domain.mapper import MalformedEventError


def parent_identifier(block: Block) -> BlockIdentifier:
    """The genesis block (height 1) is its own parent."""
    if block.header.height == 1:
        return BlockIdentifier(index=block.header.height, hash=block.hash)
    return BlockIdentifier(index=block.header.height - 1, hash=block.header.last_block_hash)


class BlockApplicationService:
    def __init__(self, params: ChainParameters, mode: Mode, client: ChainClient | None) -> None:
        self._params = params
        self._mode = mode
        self._client = client

    def _map(self, block: Block, results: BlockResults) -> list[MappedTransaction]:
        try:
            return map_block_transactions(block, results, self._params)
        except (InconsistentBlockError, MalformedEventError) as exc:
            raise ChainError(str(exc)) from exc

    async def block(self, req: BlockRequest) -> BlockResponse:
        require_online(self._mode)
        check_network(self._params, req.network_identifier)

        block, results = await resolve_block(self._client, req.block_identifier)  # type: ignore[arg-type]
        transactions = self._map(block, results)  # type: ignore[arg-type]
        return BlockResponse(
            block=BlockModel(
                block_identifier=BlockIdentifier(index=block.header.height, hash=block.hash),
                parent_block_identifier=parent_identifier(block),
                timestamp=to_unix_millis(block.header.time),
                transactions=[transaction_from_domain(t) for t in transactions],
            )
        )

    async def block_transaction(self, req: BlockTransactionRequest) -> BlockTransactionResponse:
        require_online(self._mode)
        check_network(self._params, req.network_identifier)

        selector = PartialBlockIdentifier(
            index=req.block_identifier.index, hash=req.block_identifier.hash
        )
        block, results = await resolve_block(self._client, selector)  # type: ignore[arg-type]
        wanted = req.transaction_identifier.hash.upper()
        for mapped in self._map(block, results):  # type: ignore[arg-type]
            if mapped.hash == wanted:
                return BlockTransactionResponse(transaction=transaction_from_domain(mapped))
        raise TransactionNotFoundError(req.transaction_identifier.hash)

    async def mempool(self, req: NetworkRequest) -> None:
        require_online(self._mode)
        check_network(self._params, req.network_identifier)
        raise UnimplementedError()

    async def mempool_transaction(self, req: MempoolTransactionRequest) -> None:
        require_online(self._mode)
        check_network(self._params, req.network_identifier)
        raise UnimplementedError()
