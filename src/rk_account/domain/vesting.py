"""Vesting math, evaluated at a block time in whole unix seconds.

vested(t)  = delayed:    nothing before end, everything from end
             continuous: linear in (t - start) / (end - start)
             periodic:   sum of periods whose cumulative unlock time is <= t
             (continuous and periodic: nothing up to start, everything from end)
vesting(t) = original_vesting - vested(t)
locked(t)  = max(vesting(t) - delegated_vesting, 0) per denom
"""

from datetime import datetime

from src.rk_account.domain.models import VestingKind, VestingPeriod, VestingSchedule
from src.rk_common.coins import Coins

# Fixed-point precision of the chain's decimal type
_DEC_ONE = 10**18


def _round_half_even(numerator: int, denominator: int) -> int:
    quotient, remainder = divmod(numerator, denominator)
    if 2 * remainder > denominator or (2 * remainder == denominator and quotient % 2 == 1):
        quotient += 1
    return quotient


def _unix(t: datetime) -> int:
    return int(t.timestamp())


def _continuous_vested(original: Coins, elapsed: int, duration: int) -> Coins:
    # scalar = elapsed / duration as an 18-decimal fixed-point value
    scalar = _round_half_even(elapsed * _DEC_ONE * _DEC_ONE // duration, _DEC_ONE)
    return Coins({c.denom: _round_half_even(c.amount * scalar, _DEC_ONE) for c in original})


def _periodic_vested(periods: tuple[VestingPeriod, ...], elapsed: int) -> Coins:
    unlock_at = 0
    vested = Coins()
    for period in periods:
        unlock_at += period.length_seconds
        if unlock_at > elapsed:
            break
        vested = vested + period.amount
    return vested


def vested_coins(schedule: VestingSchedule, block_time: datetime) -> Coins:
    now, start, end = _unix(block_time), _unix(schedule.start_time), _unix(schedule.end_time)
    if schedule.kind == VestingKind.DELAYED:
        return schedule.original_vesting if now >= end else Coins()
    if now <= start:
        return Coins()
    if now >= end:
        return schedule.original_vesting
    if schedule.kind == VestingKind.CONTINUOUS:
        return _continuous_vested(schedule.original_vesting, now - start, end - start)
    return _periodic_vested(schedule.periods, now - start)


def vesting_coins(schedule: VestingSchedule, block_time: datetime) -> Coins:
    return schedule.original_vesting.sub_saturating(vested_coins(schedule, block_time))


def locked_coins(schedule: VestingSchedule, block_time: datetime) -> Coins:
    return vesting_coins(schedule, block_time).sub_saturating(schedule.delegated_vesting)
