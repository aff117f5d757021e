"""NetworkApplicationService — network discovery, capabilities and node status."""

import logging

from src.rk_block.application.resolver import resolve_block
from src.rk_chain.domain.client import ChainClient, chain_error
from src.rk_chain.domain.models import ChainClientError
from src.rk_common.chain_params import (
    MIDDLEWARE_VERSION,
    NODE_VERSION,
    ROSETTA_VERSION,
    ChainParameters,
)
from src.rk_common.datetime_utils import to_unix_millis
from src.rk_common.enums import Mode, OperationStatus, OperationType
from src.rk_common.errors import ALL_ERRORS, UnimplementedError
from src.rk_common.schemas import (
    BlockIdentifier,
    MetadataRequest,
    NetworkIdentifier,
    NetworkRequest,
)
from src.rk_common.validation import check_network, require_online
from src.rk_network.application.schemas import (
    Allow,
    CallRequest,
    ErrorModel,
    NetworkListResponse,
    NetworkOptionsResponse,
    NetworkStatusResponse,
    OperationStatusModel,
    PeerModel,
    SyncStatus,
    Version,
)

logger = logging.getLogger(__name__)


class NetworkApplicationService:
    def __init__(self, params: ChainParameters, mode: Mode, client: ChainClient | None) -> None:
        self._params = params
        self._mode = mode
        self._client = client

    def _network_identifier(self) -> NetworkIdentifier:
        return NetworkIdentifier(blockchain=self._params.blockchain, network=self._params.network)

    async def list(self, req: MetadataRequest) -> NetworkListResponse:
        return NetworkListResponse(network_identifiers=[self._network_identifier()])

    async def options(self, req: NetworkRequest) -> NetworkOptionsResponse:
        check_network(self._params, req.network_identifier)
        return NetworkOptionsResponse(
            version=Version(
                rosetta_version=ROSETTA_VERSION,
                node_version=NODE_VERSION,
                middleware_version=MIDDLEWARE_VERSION,
            ),
            allow=Allow(
                operation_statuses=[
                    OperationStatusModel(status=OperationStatus.SUCCESS.value, successful=True),
                    OperationStatusModel(status=OperationStatus.FAILURE.value, successful=False),
                ],
                operation_types=[t.value for t in OperationType],
                errors=[
                    ErrorModel(code=e.code, message=e.message, retriable=e.retriable)
                    for e in ALL_ERRORS
                ],
                historical_balance_lookup=True,
                call_methods=[],
                balance_exemptions=[],
                mempool_coins=False,
            ),
        )

    async def status(self, req: NetworkRequest) -> NetworkStatusResponse:
        require_online(self._mode)
        check_network(self._params, req.network_identifier)

        block, _ = await resolve_block(self._client, None, with_results=False)  # type: ignore[arg-type]
        try:
            node = await self._client.status()  # type: ignore[union-attr]
        except ChainClientError as exc:
            raise chain_error(exc) from exc

        genesis = BlockIdentifier(index=node.earliest_height, hash=node.earliest_hash)
        return NetworkStatusResponse(
            current_block_identifier=BlockIdentifier(index=block.header.height, hash=block.hash),
            current_block_timestamp=to_unix_millis(block.header.time),
            genesis_block_identifier=genesis,
            oldest_block_identifier=genesis,
            sync_status=SyncStatus(
                current_index=block.header.height,
                target_index=node.latest_height,
                synced=not node.catching_up,
            ),
            peers=[PeerModel(peer_id=p.node_id, metadata=p.metadata or None) for p in node.peers],
        )

    async def call(self, req: CallRequest) -> None:
        require_online(self._mode)
        check_network(self._params, req.network_identifier)
        raise UnimplementedError()
