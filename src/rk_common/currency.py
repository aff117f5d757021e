"""Currency registry: chain denominations <-> Rosetta currency symbols.

The mapping is static and bijective: every recognised denom has exactly one
symbol and every symbol exactly one denom. Denoms missing from the registry
are invisible to the API (never mapped to operations or balances).
"""

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class Currency:
    symbol: str
    decimals: int


CURRENCIES: MappingProxyType[str, Currency] = MappingProxyType({
    "ukava": Currency(symbol="KAVA", decimals=6),
    "hard": Currency(symbol="HARD", decimals=6),
    "usdx": Currency(symbol="USDX", decimals=6),
    "swp": Currency(symbol="SWP", decimals=6),
})

DENOMS: MappingProxyType[str, str] = MappingProxyType(
    {currency.symbol: denom for denom, currency in CURRENCIES.items()}
)


def currency_for_denom(denom: str) -> Currency | None:
    return CURRENCIES.get(denom)


def denom_for_symbol(symbol: str) -> str | None:
    return DENOMS.get(symbol)


def resolve_currency(symbol: str, decimals: int) -> str | None:
    """Return the denom for an exact (symbol, decimals) match, else None."""
    denom = DENOMS.get(symbol)
    if denom is None:
        return None
    if CURRENCIES[denom].decimals != decimals:
        return None
    return denom
