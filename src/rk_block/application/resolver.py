"""Block selection: pin one block per request.

Latest is resolved through block results: the node may report a height
whose results are not committed yet, in which case the block just below it
is used. Every later read of the request uses the returned block's height.
"""

import logging
import re

from src.rk_chain.domain.client import ChainClient, chain_error
from src.rk_chain.domain.models import (
    Block,
    BlockResults,
    BlockUnavailableError,
    ChainClientError,
    NoBlockResultsError,
)
from src.rk_common.errors import BlockNotFoundError, ChainError
from src.rk_common.schemas import PartialBlockIdentifier

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


async def _latest_results(client: ChainClient) -> BlockResults:
    try:
        return await client.get_block_results(None)
    except NoBlockResultsError as exc:
        logger.info("No results yet for height %d, using %d", exc.height, exc.height - 1)
        return await client.get_block_results(exc.height - 1)


async def resolve_block(
    client: ChainClient,
    selector: PartialBlockIdentifier | None,
    with_results: bool = True,
) -> tuple[Block, BlockResults | None]:
    """Return the selected block and, when asked, its results.

    Raises BlockNotFoundError for a malformed hash or a block the node does
    not have, ChainError for any other node failure or mismatch.
    """
    index = selector.index if selector is not None else None
    block_hash = selector.hash if selector is not None else None
    if block_hash is not None and not _HEX_RE.match(block_hash):
        raise BlockNotFoundError(f"invalid block hash: {block_hash}")

    results: BlockResults | None = None
    try:
        if block_hash is not None:
            block = await client.get_block(block_hash=block_hash.upper())
        elif index is not None:
            block = await client.get_block(height=index)
        else:
            results = await _latest_results(client)
            block = await client.get_block(height=results.height)

        if with_results and results is None:
            results = await client.get_block_results(block.header.height)
    except BlockUnavailableError as exc:
        raise BlockNotFoundError(str(exc)) from exc
    except ChainClientError as exc:
        raise chain_error(exc) from exc

    if index is not None and index != block.header.height:
        raise ChainError(
            f"requested index {index} does not match returned index {block.header.height}"
        )
    if block_hash is not None and block_hash.upper() != block.hash:
        raise ChainError(f"requested hash {block_hash} does not match returned hash {block.hash}")
    return block, results
