"""AccountApplicationService — historical balance lookups.

The block is pinned first; the account snapshot and every staking read of
the decomposition are taken at that block's height.
"""

import logging

from src.rk_account.application.schemas import (
    AccountBalanceRequest,
    AccountBalanceResponse,
    AccountCoinsRequest,
)
from src.rk_account.domain.decomposer import BalanceDecomposer
from src.rk_account.domain.models import Account, BaseAccount
from src.rk_block.application.resolver import resolve_block
from src.rk_chain.domain.client import ChainClient, chain_error
from src.rk_chain.domain.models import ChainClientError, UnknownAddressError
from src.rk_common.chain_params import ChainParameters
from src.rk_common.coins import Coins
from src.rk_common.currency import CURRENCIES, resolve_currency
from src.rk_common.enums import Mode
from src.rk_common.errors import UnimplementedError
from src.rk_common.schemas import Amount, BlockIdentifier, CurrencyModel
from src.rk_common.validation import check_address, check_network, require_online

logger = logging.getLogger(__name__)


def balances_for(coins: Coins, currencies: list[CurrencyModel] | None) -> list[Amount]:
    """One amount per requested registry currency, zero when not held.

    With no filter every registry currency is listed. Requested currencies
    outside the registry are skipped.
    """
    if currencies is None:
        denoms = list(CURRENCIES)
    else:
        denoms = []
        for currency in currencies:
            denom = resolve_currency(currency.symbol, currency.decimals)
            if denom is not None and denom not in denoms:
                denoms.append(denom)
    return [
        Amount(
            value=str(coins.amount_of(denom)),
            currency=CurrencyModel.from_domain(CURRENCIES[denom]),
        )
        for denom in denoms
    ]


class AccountApplicationService:
    def __init__(self, params: ChainParameters, mode: Mode, client: ChainClient | None) -> None:
        self._params = params
        self._mode = mode
        self._client = client

    async def _account_at(self, address: str, height: int) -> Account:
        try:
            return await self._client.get_account(address, height)  # type: ignore[union-attr]
        except UnknownAddressError:
            logger.debug("Unknown address %s at height %d, treating as empty", address, height)
            return BaseAccount(address=address)
        except ChainClientError as exc:
            raise chain_error(exc) from exc

    async def balance(self, req: AccountBalanceRequest) -> AccountBalanceResponse:
        require_online(self._mode)
        check_network(self._params, req.network_identifier)
        address = check_address(self._params, req.account_identifier.address)

        block, _ = await resolve_block(
            self._client, req.block_identifier, with_results=False  # type: ignore[arg-type]
        )
        account = await self._account_at(address, block.header.height)

        sub_account = req.account_identifier.sub_account
        category = sub_account.address if sub_account is not None else None
        decomposer = BalanceDecomposer(self._client, self._params.staking_denom)  # type: ignore[arg-type]
        try:
            coins = await decomposer.decompose(account, block.header, category)
        except ChainClientError as exc:
            raise chain_error(exc) from exc

        return AccountBalanceResponse(
            block_identifier=BlockIdentifier(index=block.header.height, hash=block.hash),
            balances=balances_for(coins, req.currencies),
            metadata={"sequence": account.sequence},
        )

    async def coins(self, req: AccountCoinsRequest) -> None:
        require_online(self._mode)
        check_network(self._params, req.network_identifier)
        raise UnimplementedError()
