"""Gas and fee arithmetic for construction.

gas_wanted  = round(gas_used * (1 + gas_adjustment)), halves away from zero
gas_price   = piecewise-linear in the suggested fee multiplier
fee         = ceil(gas_price * gas_wanted)

Products are taken in Decimal over the shortest repr of the float price so
that metadata and payloads compute the same fee from the same JSON value.
"""

import math
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal

DEFAULT_GAS_ADJUSTMENT = 0.5
DEFAULT_SUGGESTED_FEE_MULTIPLIER = 1.0


def gas_price_from_multiplier(multiplier: float) -> float:
    if multiplier < 1:
        return multiplier * 0.001
    if multiplier < 2:
        return (multiplier - 1) * 0.049 + 0.001
    if multiplier < 3:
        return (multiplier - 2) * 0.2 + 0.05
    return 0.25


def gas_wanted_from_used(gas_used: int, gas_adjustment: float) -> int:
    wanted = Decimal(gas_used) * (1 + Decimal(repr(gas_adjustment)))
    return int(wanted.to_integral_value(rounding=ROUND_HALF_UP))


def fee_amount(gas_price: float, gas_wanted: int) -> int:
    fee = Decimal(repr(gas_price)) * Decimal(gas_wanted)
    return int(fee.to_integral_value(rounding=ROUND_CEILING))


def suggested_fee(
    gas_price: float, gas_wanted: int, max_fee: int | None
) -> tuple[int, float]:
    """Return (fee, gas_price), capping the fee at max_fee when given.

    A capped fee gets the largest price whose fee_amount() stays within the cap.
    """
    fee = fee_amount(gas_price, gas_wanted)
    if max_fee is None or fee <= max_fee:
        return fee, gas_price

    # fee > max_fee >= 0 implies gas_wanted > 0
    price = max_fee / gas_wanted
    while price > 0 and fee_amount(price, gas_wanted) > max_fee:
        price = math.nextafter(price, 0.0)
    return fee_amount(price, gas_wanted), price
