"""Arbitrary-precision coin sets.

All amounts are Python ints in base denomination units. No float, no Decimal.
A Coins value is immutable, holds at most one entry per denom, never holds a
zero entry and iterates in denom order.
"""

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

_DENOM = r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}"
_COIN_RE = re.compile(rf"^\s*(\d+)\s*({_DENOM})\s*$")


class CoinParseError(ValueError):
    pass


class NegativeCoinsError(ValueError):
    pass


@dataclass(frozen=True)
class Coin:
    denom: str
    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise NegativeCoinsError(f"negative coin amount: {self.amount}{self.denom}")

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


class Coins:
    __slots__ = ("_amounts",)

    def __init__(self, coins: Iterable[Coin] | Mapping[str, int] = ()) -> None:
        amounts: dict[str, int] = {}
        items = coins.items() if isinstance(coins, Mapping) else (
            (c.denom, c.amount) for c in coins
        )
        for denom, amount in items:
            if amount < 0:
                raise NegativeCoinsError(f"negative coin amount: {amount}{denom}")
            amounts[denom] = amounts.get(denom, 0) + amount
        self._amounts = {d: amounts[d] for d in sorted(amounts) if amounts[d] != 0}

    # --- constructors -------------------------------------------------------

    @classmethod
    def of(cls, denom: str, amount: int) -> "Coins":
        return cls({denom: amount})

    @classmethod
    def parse(cls, text: str) -> "Coins":
        """Parse the chain's coin text form: '1000ukava,20hard'. '' is empty."""
        if text is None or not text.strip():
            return cls()
        coins = []
        for part in text.split(","):
            match = _COIN_RE.match(part)
            if match is None:
                raise CoinParseError(f"invalid coin expression: {part!r}")
            coins.append(Coin(denom=match.group(2), amount=int(match.group(1))))
        return cls(coins)

    @classmethod
    def from_dicts(cls, items: Iterable[Mapping[str, Any]]) -> "Coins":
        """Build from [{'denom': 'ukava', 'amount': '100'}, ...] (REST form)."""
        coins = []
        for item in items:
            try:
                coins.append(Coin(denom=str(item["denom"]), amount=int(item["amount"])))
            except (KeyError, TypeError, ValueError) as exc:
                raise CoinParseError(f"invalid coin object: {item!r}") from exc
        return cls(coins)

    # --- queries ------------------------------------------------------------

    def amount_of(self, denom: str) -> int:
        return self._amounts.get(denom, 0)

    def is_empty(self) -> bool:
        return not self._amounts

    def denoms(self) -> list[str]:
        return list(self._amounts)

    def only(self, denom: str) -> "Coins":
        """Restrict to a single denomination."""
        return Coins.of(denom, self.amount_of(denom))

    def to_dicts(self) -> list[dict[str, str]]:
        return [{"denom": d, "amount": str(a)} for d, a in self._amounts.items()]

    # --- arithmetic ---------------------------------------------------------

    def __add__(self, other: "Coins") -> "Coins":
        merged = dict(self._amounts)
        for denom, amount in other._amounts.items():
            merged[denom] = merged.get(denom, 0) + amount
        return Coins(merged)

    def __sub__(self, other: "Coins") -> "Coins":
        result = dict(self._amounts)
        for denom, amount in other._amounts.items():
            value = result.get(denom, 0) - amount
            if value < 0:
                raise NegativeCoinsError(
                    f"subtraction results in negative amount: {value}{denom}"
                )
            result[denom] = value
        return Coins(result)

    def sub_saturating(self, other: "Coins") -> "Coins":
        """Per-denom subtraction clamped at zero."""
        return Coins({
            d: max(a - other.amount_of(d), 0) for d, a in self._amounts.items()
        })

    def min(self, other: "Coins") -> "Coins":
        """Per-denom minimum; denoms missing on either side are zero."""
        return Coins({
            d: min(a, other.amount_of(d)) for d, a in self._amounts.items()
        })

    # --- dunder -------------------------------------------------------------

    def __iter__(self) -> Iterator[Coin]:
        return (Coin(denom=d, amount=a) for d, a in self._amounts.items())

    def __len__(self) -> int:
        return len(self._amounts)

    def __bool__(self) -> bool:
        return bool(self._amounts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Coins):
            return NotImplemented
        return self._amounts == other._amounts

    def __hash__(self) -> int:
        return hash(tuple(self._amounts.items()))

    def __str__(self) -> str:
        return ",".join(f"{a}{d}" for d, a in self._amounts.items())

    def __repr__(self) -> str:
        return f"Coins({str(self)!r})"
