"""Unit tests for AccountApplicationService using a mock chain client."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from src.rk_account.application.schemas import AccountBalanceRequest, AccountCoinsRequest
from src.rk_account.application.service import AccountApplicationService, balances_for
from src.rk_account.domain.models import BaseAccount
from src.rk_chain.domain.models import (
    Block,
    BlockHeader,
    ChainClientError,
    Delegation,
    UnknownAddressError,
)
from src.rk_common.bech32 import encode_address
from src.rk_common.chain_params import ChainParameters
from src.rk_common.coins import Coin, Coins
from src.rk_common.enums import Mode
from src.rk_common.errors import (
    ChainError,
    InvalidAddressError,
    InvalidNetworkError,
    UnavailableOfflineError,
    UnimplementedError,
)
from src.rk_common.schemas import (
    AccountIdentifier,
    CurrencyModel,
    NetworkIdentifier,
    PartialBlockIdentifier,
    SubAccountIdentifier,
)

ADDRESS = encode_address("kava", b"\x07" * 20)


def _client(coins: Coins = Coins.of("ukava", 1_000_000)) -> AsyncMock:
    client = AsyncMock()
    client.get_block.return_value = Block(
        hash="AA" * 32, header=BlockHeader(height=42, time=datetime(2023, 1, 1, tzinfo=UTC))
    )
    client.get_account.return_value = BaseAccount(address=ADDRESS, coins=coins, sequence=9)
    client.get_delegations.return_value = [Delegation("kavavaloper1v", Coin("ukava", 300))]
    return client


def _request(params: ChainParameters, sub_account: str | None = None, **kwargs) -> AccountBalanceRequest:
    return AccountBalanceRequest(
        network_identifier=NetworkIdentifier(blockchain=params.blockchain, network=params.network),
        account_identifier=AccountIdentifier(
            address=kwargs.pop("address", ADDRESS),
            sub_account=SubAccountIdentifier(address=sub_account) if sub_account else None,
        ),
        block_identifier=kwargs.pop("block_identifier", PartialBlockIdentifier(index=42)),
        **kwargs,
    )


class TestBalancesFor:
    def test_all_registry_currencies(self) -> None:
        amounts = balances_for(Coins.of("hard", 5), None)
        values = {a.currency.symbol: a.value for a in amounts}
        assert values == {"KAVA": "0", "HARD": "5", "USDX": "0", "SWP": "0"}

    def test_filter(self) -> None:
        amounts = balances_for(Coins.of("hard", 5), [CurrencyModel(symbol="HARD", decimals=6)])
        assert [(a.currency.symbol, a.value) for a in amounts] == [("HARD", "5")]

    def test_unknown_currency_skipped(self) -> None:
        assert balances_for(Coins(), [CurrencyModel(symbol="ATOM", decimals=6)]) == []


class TestBalance:
    async def test_total_balance_at_pinned_block(self, params) -> None:
        client = _client()
        svc = AccountApplicationService(params, Mode.ONLINE, client)

        resp = await svc.balance(_request(params, currencies=[CurrencyModel(symbol="KAVA", decimals=6)]))

        assert resp.block_identifier.index == 42
        assert resp.block_identifier.hash == "AA" * 32
        assert [(a.currency.symbol, a.value) for a in resp.balances] == [("KAVA", "1000000")]
        assert resp.metadata == {"sequence": 9}
        client.get_account.assert_awaited_once_with(ADDRESS, 42)

    async def test_sub_account_category(self, params) -> None:
        client = _client()
        svc = AccountApplicationService(params, Mode.ONLINE, client)

        resp = await svc.balance(_request(params, "liquid_delegated"))

        kava = next(a for a in resp.balances if a.currency.symbol == "KAVA")
        assert kava.value == "300"
        client.get_delegations.assert_awaited_once_with(ADDRESS, 42)

    async def test_vesting_of_base_account_is_zero(self, params) -> None:
        svc = AccountApplicationService(params, Mode.ONLINE, _client())
        resp = await svc.balance(_request(params, "vesting"))
        assert all(a.value == "0" for a in resp.balances)

    async def test_unknown_address_is_empty_account(self, params) -> None:
        client = _client()
        client.get_account.side_effect = UnknownAddressError("account not found")
        svc = AccountApplicationService(params, Mode.ONLINE, client)

        resp = await svc.balance(_request(params))

        assert all(a.value == "0" for a in resp.balances)
        assert resp.metadata == {"sequence": 0}

    async def test_chain_failure(self, params) -> None:
        client = _client()
        client.get_account.side_effect = ChainClientError("connection reset")
        svc = AccountApplicationService(params, Mode.ONLINE, client)
        with pytest.raises(ChainError):
            await svc.balance(_request(params))

    async def test_invalid_address(self, params) -> None:
        svc = AccountApplicationService(params, Mode.ONLINE, _client())
        with pytest.raises(InvalidAddressError):
            await svc.balance(_request(params, address=encode_address("cosmos", b"\x07" * 20)))

    async def test_wrong_network(self, params) -> None:
        svc = AccountApplicationService(params, Mode.ONLINE, _client())
        req = _request(params)
        req.network_identifier.network = "other"
        with pytest.raises(InvalidNetworkError):
            await svc.balance(req)

    async def test_offline(self, params) -> None:
        svc = AccountApplicationService(params, Mode.OFFLINE, None)
        with pytest.raises(UnavailableOfflineError):
            await svc.balance(_request(params))


class TestCoins:
    async def test_unimplemented(self, params) -> None:
        svc = AccountApplicationService(params, Mode.ONLINE, _client())
        with pytest.raises(UnimplementedError):
            await svc.coins(AccountCoinsRequest(
                network_identifier=NetworkIdentifier(blockchain=params.blockchain, network=params.network),
                account_identifier=AccountIdentifier(address=ADDRESS),
            ))
