"""Domain models for rk_account — pure dataclasses.

Accounts are a closed union: BaseAccount | VestingAccount, and a vesting
account's schedule is tagged continuous, delayed or periodic. They are never
mutated locally; every balance query re-fetches them at a pinned height.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.rk_common.coins import Coins


class VestingKind(str, Enum):
    CONTINUOUS = "continuous"
    DELAYED = "delayed"
    PERIODIC = "periodic"


@dataclass(frozen=True)
class VestingPeriod:
    length_seconds: int
    amount: Coins


@dataclass(frozen=True)
class VestingSchedule:
    original_vesting: Coins
    start_time: datetime
    end_time: datetime
    kind: VestingKind = VestingKind.PERIODIC
    periods: tuple[VestingPeriod, ...] = ()
    delegated_vesting: Coins = field(default_factory=Coins)
    delegated_free: Coins = field(default_factory=Coins)

    def validate(self) -> list[str]:
        """Return schedule violations; empty when the schedule is consistent."""
        violations: list[str] = []
        if self.kind != VestingKind.PERIODIC:
            if self.periods:
                violations.append(f"{self.kind.value} schedule with vesting periods")
        else:
            total = Coins()
            for period in self.periods:
                total = total + period.amount
                if period.length_seconds < 0:
                    violations.append(f"negative period length: {period.length_seconds}")
            if total != self.original_vesting:
                violations.append(
                    f"sum of periods {total} != original vesting {self.original_vesting}"
                )
        if self.end_time < self.start_time:
            violations.append("end time before start time")
        return violations


@dataclass(frozen=True)
class BaseAccount:
    address: str
    coins: Coins = field(default_factory=Coins)
    sequence: int = 0
    account_number: int = 0


@dataclass(frozen=True)
class VestingAccount:
    address: str
    schedule: VestingSchedule
    coins: Coins = field(default_factory=Coins)
    sequence: int = 0
    account_number: int = 0


Account = BaseAccount | VestingAccount
