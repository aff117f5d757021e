"""Unit tests for NetworkApplicationService."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from src.rk_chain.domain.models import Block, BlockHeader, BlockResults, NodeStatus, Peer
from src.rk_common.enums import Mode
from src.rk_common.errors import ALL_ERRORS, UnavailableOfflineError, UnimplementedError
from src.rk_common.schemas import MetadataRequest, NetworkIdentifier, NetworkRequest
from src.rk_network.application.schemas import CallRequest
from src.rk_network.application.service import NetworkApplicationService


def _network(params) -> NetworkIdentifier:
    return NetworkIdentifier(blockchain=params.blockchain, network=params.network)


def _client() -> AsyncMock:
    client = AsyncMock()
    client.get_block_results.return_value = BlockResults(height=100)
    client.get_block.return_value = Block(
        hash="BB" * 32, header=BlockHeader(height=100, time=datetime(2023, 1, 1, tzinfo=UTC))
    )
    client.status.return_value = NodeStatus(
        latest_height=101,
        earliest_height=1,
        earliest_hash="EE" * 32,
        catching_up=False,
        peers=(Peer("peer1", {"moniker": "m"}),),
    )
    return client


class TestList:
    async def test_single_network_offline(self, params) -> None:
        svc = NetworkApplicationService(params, Mode.OFFLINE, None)
        resp = await svc.list(MetadataRequest())
        assert resp.network_identifiers == [_network(params)]


class TestOptions:
    async def test_capabilities(self, params) -> None:
        svc = NetworkApplicationService(params, Mode.OFFLINE, None)
        resp = await svc.options(NetworkRequest(network_identifier=_network(params)))

        allow = resp.allow
        assert [e.code for e in allow.errors] == list(range(len(ALL_ERRORS)))
        assert set(allow.operation_types) == {"fee", "transfer", "mint", "burn"}
        assert {s.status: s.successful for s in allow.operation_statuses} == {
            "success": True, "failure": False,
        }
        assert allow.historical_balance_lookup is True
        assert resp.version.rosetta_version


class TestStatus:
    async def test_status(self, params) -> None:
        svc = NetworkApplicationService(params, Mode.ONLINE, _client())
        resp = await svc.status(NetworkRequest(network_identifier=_network(params)))

        assert resp.current_block_identifier.index == 100
        assert resp.genesis_block_identifier.index == 1
        assert resp.sync_status.synced is True
        assert resp.sync_status.target_index == 101
        assert resp.peers[0].peer_id == "peer1"

    async def test_offline(self, params) -> None:
        svc = NetworkApplicationService(params, Mode.OFFLINE, None)
        with pytest.raises(UnavailableOfflineError):
            await svc.status(NetworkRequest(network_identifier=_network(params)))


class TestCall:
    async def test_unimplemented(self, params) -> None:
        svc = NetworkApplicationService(params, Mode.ONLINE, _client())
        with pytest.raises(UnimplementedError):
            await svc.call(CallRequest(network_identifier=_network(params), method="x"))
