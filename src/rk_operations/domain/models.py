"""Domain models for rk_operations — pure dataclasses."""

from dataclasses import dataclass

from src.rk_common.currency import Currency
from src.rk_common.enums import OperationStatus, OperationType


@dataclass(frozen=True)
class Operation:
    """One balance change. amount is signed, in base denomination units.

    status None means "no status" (construction operations) and is omitted
    from rendered JSON.
    """

    index: int
    type: OperationType
    account: str
    amount: int
    currency: Currency
    status: OperationStatus | None = None
    related_operations: tuple[int, ...] = ()

    @property
    def is_debit(self) -> bool:
        return self.amount < 0
