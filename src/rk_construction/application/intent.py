"""Operations -> transfer intent.

Only a single-currency transfer is recognised: exactly two "transfer"
operations, one debit and one credit, whose amounts negate each other in
the same currency. Anything else is an unclear intent and is rejected,
never guessed.
"""

from src.rk_codec.domain.models import MsgSend
from src.rk_common.chain_params import ChainParameters
from src.rk_common.coins import Coins
from src.rk_common.currency import resolve_currency
from src.rk_common.enums import OperationType
from src.rk_common.errors import (
    InvalidAddressError,
    InvalidCurrencyAmountError,
    UnclearIntentError,
    UnsupportedCurrencyError,
)
from src.rk_common.schemas import AccountIdentifier, Amount, OperationModel
from src.rk_common.validation import check_address


def amount_to_coin(amount: Amount | None) -> tuple[str, int]:
    """Return (denom, signed value) for a Rosetta amount of a registry currency."""
    if amount is None:
        raise InvalidCurrencyAmountError()
    try:
        value = int(amount.value)
    except ValueError:
        raise InvalidCurrencyAmountError(amount.value) from None
    denom = resolve_currency(amount.currency.symbol, amount.currency.decimals)
    if denom is None:
        raise UnsupportedCurrencyError(amount.currency.symbol)
    return denom, value


def max_fee_to_coins(amounts: list[Amount] | None) -> Coins | None:
    if not amounts:
        return None
    fee = Coins()
    for amount in amounts:
        denom, value = amount_to_coin(amount)
        if value < 0:
            raise InvalidCurrencyAmountError(amount.value)
        fee = fee + Coins.of(denom, value)
    return fee


def _address(params: ChainParameters, account: AccountIdentifier | None) -> str:
    if account is None:
        raise InvalidAddressError()
    return check_address(params, account.address)


def parse_intent(operations: list[OperationModel], params: ChainParameters) -> list[MsgSend]:
    if len(operations) != 2:
        raise UnclearIntentError("invalid number of operations, expected 2")

    sender = recipient = None
    debit = credit = None
    for op in operations:
        if op.type != OperationType.TRANSFER.value:
            raise UnclearIntentError(
                f"invalid operation type {op.type!r}, only 'transfer' allowed"
            )
        denom, value = amount_to_coin(op.amount)
        if value == 0:
            raise InvalidCurrencyAmountError(op.amount.value)  # type: ignore[union-attr]
        if value > 0:
            recipient = _address(params, op.account)
            credit = (denom, value)
        else:
            sender = _address(params, op.account)
            debit = (denom, value)

    if debit is None or credit is None:
        raise UnclearIntentError("expected one debit and one credit operation")
    if debit[0] != credit[0]:
        raise UnclearIntentError("debit and credit currencies differ")
    if debit[1] != -credit[1]:
        raise UnclearIntentError("debit and credit amounts do not negate")

    return [MsgSend(from_address=sender, to_address=recipient, amount=Coins.of(*credit))]  # type: ignore[arg-type]
