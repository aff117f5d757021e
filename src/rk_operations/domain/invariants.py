"""Operation group invariants, checked after mapping a transaction."""

import logging
from collections import defaultdict

from src.rk_operations.domain.models import Operation

logger = logging.getLogger(__name__)


def verify_operation_group(ops: list[Operation]) -> list[str]:
    """Return violated invariants of a mapped group; empty when consistent.

    INV-1: indices are dense and increase by one in emission order
    INV-2: every credit relates to exactly one earlier debit with the exact
           negated amount in the same currency
    INV-3: debits relate to nothing
    INV-4: paired operations sum to zero per currency
    """
    violations: list[str] = []
    by_index = {op.index: op for op in ops}
    paired: set[int] = set()

    if ops:
        first = ops[0].index
        expected = list(range(first, first + len(ops)))
        actual = [op.index for op in ops]
        if actual != expected:
            violations.append(f"INV-1 violated: indices {actual} are not dense")

    for op in ops:
        if op.is_debit:
            if op.related_operations:
                violations.append(f"INV-3 violated: debit {op.index} has related operations")
            continue
        if not op.related_operations:
            continue
        if len(op.related_operations) != 1:
            violations.append(
                f"INV-2 violated: credit {op.index} relates to {len(op.related_operations)} operations"
            )
            continue
        debit = by_index.get(op.related_operations[0])
        if debit is None or debit.index >= op.index:
            violations.append(
                f"INV-2 violated: credit {op.index} relates to missing or later operation"
            )
            continue
        if debit.amount != -op.amount or debit.currency != op.currency:
            violations.append(
                f"INV-2 violated: credit {op.index} ({op.amount} {op.currency.symbol}) "
                f"!= -debit {debit.index} ({debit.amount} {debit.currency.symbol})"
            )
        paired.update((op.index, debit.index))

    totals: dict[str, int] = defaultdict(int)
    for index in paired:
        totals[by_index[index].currency.symbol] += by_index[index].amount
    for symbol, total in sorted(totals.items()):
        if total != 0:
            violations.append(f"INV-4 violated: {symbol} sums to {total}")

    for violation in violations:
        logger.error("Operation invariant: %s", violation)
    return violations
