"""Balance decomposition into sub-account categories.

Owned coins of a native account split into liquid / vesting, and the
staking-denom stake held outside the bank balance splits into liquid and
vesting portions of delegated and unbonding funds.

Invariants:
  liquid + vesting                         == owned coins
  liquid_delegated + vesting_delegated     == total delegated   (staking denom)
  liquid_unbonding + vesting_unbonding     == total unbonding   (staking denom)
  no component is ever negative

All arithmetic is exact integer arithmetic on the staking denomination.
"""

import asyncio
import logging

from src.rk_account.domain.models import Account, BaseAccount, VestingAccount
from src.rk_account.domain.vesting import locked_coins
from src.rk_chain.domain.client import ChainClient
from src.rk_chain.domain.models import BlockHeader, Delegation, UnbondingDelegation
from src.rk_common.coins import Coins
from src.rk_common.enums import SubAccount

logger = logging.getLogger(__name__)

_DELEGATED = (SubAccount.LIQUID_DELEGATED, SubAccount.VESTING_DELEGATED)
_UNBONDING = (SubAccount.LIQUID_UNBONDING, SubAccount.VESTING_UNBONDING)


def split_delegated(delegated: int, unbonding: int, delegated_free: int) -> tuple[int, int]:
    """Return (staked_free, staked_vesting) for the bonded stake.

    Free capacity goes to the combined stake first; whatever is not free is
    vesting, capped at what is actually delegated.
    """
    total_staked = delegated + unbonding
    total_free = min(total_staked, delegated_free)
    staked_vesting = min(total_staked - total_free, delegated)
    staked_free = delegated - staked_vesting
    return staked_free, staked_vesting


def split_unbonding(unbonding: int, delegated_free: int) -> tuple[int, int]:
    """Return (unbonding_free, unbonding_vesting) for the unbonding stake."""
    unbonding_free = min(delegated_free, unbonding)
    return unbonding_free, unbonding - unbonding_free


def sum_delegations(delegations: list[Delegation], denom: str) -> int:
    return sum(d.balance.amount for d in delegations if d.balance.denom == denom)


def sum_unbonding(unbonding_delegations: list[UnbondingDelegation]) -> int:
    # unbonding entries are always denominated in the staking denom
    return sum(sum(u.entry_balances) for u in unbonding_delegations)


def spendable_coins(account: Account, header: BlockHeader) -> Coins:
    if isinstance(account, VestingAccount):
        return account.coins.sub_saturating(locked_coins(account.schedule, header.time))
    return account.coins


class BalanceDecomposer:
    """Computes the coins attributable to one sub-account category.

    Stateless: every call reads the stake at header.height, so concurrent
    calls for different accounts or categories never interfere.
    """

    def __init__(self, client: ChainClient, staking_denom: str) -> None:
        self._client = client
        self._denom = staking_denom

    async def decompose(
        self,
        account: Account,
        header: BlockHeader,
        category: SubAccount | str | None,
    ) -> Coins:
        if category is None:
            return account.coins

        try:
            category = SubAccount(category)
        except ValueError:
            return Coins()

        if category == SubAccount.LIQUID:
            return spendable_coins(account, header)
        if category == SubAccount.VESTING:
            return account.coins - spendable_coins(account, header)
        if category in _DELEGATED:
            return await self._delegated(account, header, category)
        if category in _UNBONDING:
            return await self._unbonding(account, header, category)
        return Coins()

    async def _delegated(
        self, account: Account, header: BlockHeader, category: SubAccount
    ) -> Coins:
        if isinstance(account, BaseAccount):
            if category == SubAccount.VESTING_DELEGATED:
                return Coins()
            delegations = await self._client.get_delegations(account.address, header.height)
            return Coins.of(self._denom, sum_delegations(delegations, self._denom))

        delegations, unbonding_delegations = await asyncio.gather(
            self._client.get_delegations(account.address, header.height),
            self._client.get_unbonding_delegations(account.address, header.height),
        )
        staked_free, staked_vesting = split_delegated(
            sum_delegations(delegations, self._denom),
            sum_unbonding(unbonding_delegations),
            account.schedule.delegated_free.amount_of(self._denom),
        )
        logger.debug(
            "delegated split: account=%s height=%d free=%d vesting=%d",
            account.address, header.height, staked_free, staked_vesting,
        )
        if category == SubAccount.LIQUID_DELEGATED:
            return Coins.of(self._denom, staked_free)
        return Coins.of(self._denom, staked_vesting)

    async def _unbonding(
        self, account: Account, header: BlockHeader, category: SubAccount
    ) -> Coins:
        if isinstance(account, BaseAccount) and category == SubAccount.VESTING_UNBONDING:
            return Coins()

        unbonding_delegations = await self._client.get_unbonding_delegations(
            account.address, header.height
        )
        unbonding = sum_unbonding(unbonding_delegations)

        if isinstance(account, BaseAccount):
            return Coins.of(self._denom, unbonding)

        unbonding_free, unbonding_vesting = split_unbonding(
            unbonding, account.schedule.delegated_free.amount_of(self._denom)
        )
        if category == SubAccount.LIQUID_UNBONDING:
            return Coins.of(self._denom, unbonding_free)
        return Coins.of(self._denom, unbonding_vesting)
