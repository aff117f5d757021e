"""OperationMapper — chain messages, fees and events into Rosetta operations.

Pure functions. Every function takes the index of its first operation and
returns a list whose indices are dense from that start; callers chain groups
with ``start_index + len(ops)``.

Paired (balance tracking) groups emit, for each recognised coin in denom
order, a debit at index i and a credit at i + 1 whose related_operations is
(i,). Single-sided groups (mint, burn, multisend legs) emit one operation
per coin and no relations.

Denoms missing from the currency registry are dropped silently.
"""

import logging
from collections.abc import Iterable

from src.rk_chain.domain.models import Event, MessageLog
from src.rk_codec.domain.models import MsgMultiSend, MsgSend, Tx
from src.rk_common.chain_params import ChainParameters
from src.rk_common.coins import CoinParseError, Coins
from src.rk_common.currency import currency_for_denom
from src.rk_common.enums import EventType, OperationStatus, OperationType
from src.rk_operations.domain.models import Operation

logger = logging.getLogger(__name__)

# A debit operation names the sending account, its credit the receiving one.
DEBIT_ACCOUNT_IS_SENDER = True

AUTHZ_MSG_INDEX = "authz_msg_index"

# attributes per event once a log-flattened event is split apart
_TRANSFER_ATTRIBUTES = 3
_SUPPLY_ATTRIBUTES = 2


class MalformedEventError(ValueError):
    """An event whose attributes cannot be mapped (bad coin text, bad shape)."""


def _parse_amount(attributes: dict[str, str], event_type: str) -> Coins:
    text = attributes.get("amount", "")
    try:
        return Coins.parse(text)
    except CoinParseError as exc:
        raise MalformedEventError(f"{event_type}: could not parse coins {text!r}") from exc


def _balance_tracking_ops(
    op_type: OperationType,
    sender: str,
    recipient: str,
    coins: Coins,
    status: OperationStatus | None,
    start_index: int,
) -> list[Operation]:
    debit_account = sender if DEBIT_ACCOUNT_IS_SENDER else recipient
    ops: list[Operation] = []
    index = start_index
    for coin in coins:
        currency = currency_for_denom(coin.denom)
        if currency is None:
            continue
        ops.append(Operation(
            index=index,
            type=op_type,
            status=status,
            account=debit_account,
            amount=-coin.amount,
            currency=currency,
        ))
        ops.append(Operation(
            index=index + 1,
            type=op_type,
            status=status,
            account=recipient,
            amount=coin.amount,
            currency=currency,
            related_operations=(index,),
        ))
        index += 2
    return ops


def map_transfer(
    sender: str,
    recipient: str,
    coins: Coins,
    status: OperationStatus | None,
    start_index: int = 0,
) -> list[Operation]:
    return _balance_tracking_ops(OperationType.TRANSFER, sender, recipient, coins, status, start_index)


def map_fee(
    payer: str,
    fee_collector: str,
    coins: Coins,
    start_index: int = 0,
    status: OperationStatus = OperationStatus.SUCCESS,
) -> list[Operation]:
    """Fee pair payer -> fee collector.

    Fees are charged even when the transaction's messages fail, so the status
    is SUCCESS unless the caller knows the fee was never deducted.
    """
    return _balance_tracking_ops(OperationType.FEE, payer, fee_collector, coins, status, start_index)


def map_account_balance(
    op_type: OperationType,
    account: str,
    coins: Coins,
    negative: bool,
    status: OperationStatus | None,
    start_index: int = 0,
) -> list[Operation]:
    """Single-sided operations on one account (supply changes, multisend legs)."""
    ops: list[Operation] = []
    for coin in coins:
        currency = currency_for_denom(coin.denom)
        if currency is None:
            continue
        ops.append(Operation(
            index=start_index + len(ops),
            type=op_type,
            status=status,
            account=account,
            amount=-coin.amount if negative else coin.amount,
            currency=currency,
        ))
    return ops


def map_event(event: Event, status: OperationStatus | None, start_index: int = 0) -> list[Operation]:
    attributes = event.attribute_map()
    if event.type == EventType.TRANSFER:
        return _balance_tracking_ops(
            OperationType.TRANSFER,
            attributes.get("sender", ""),
            attributes.get("recipient", ""),
            _parse_amount(attributes, event.type),
            status,
            start_index,
        )
    if event.type == EventType.COIN_MINT:
        return map_account_balance(
            OperationType.MINT,
            attributes.get("minter", ""),
            _parse_amount(attributes, event.type),
            False,
            status,
            start_index,
        )
    if event.type == EventType.COIN_BURN:
        return map_account_balance(
            OperationType.BURN,
            attributes.get("burner", ""),
            _parse_amount(attributes, event.type),
            True,
            status,
            start_index,
        )
    return []


def map_events(
    events: Iterable[Event], status: OperationStatus | None, start_index: int = 0
) -> list[Operation]:
    ops: list[Operation] = []
    for event in events:
        ops.extend(map_event(event, status, start_index + len(ops)))
    return ops


def map_multisend(
    msg: MsgMultiSend, status: OperationStatus | None, start_index: int = 0
) -> list[Operation]:
    """Inputs as debits, then outputs as credits, from message content."""
    ops: list[Operation] = []
    for bank_input in msg.inputs:
        ops.extend(map_account_balance(
            OperationType.TRANSFER, bank_input.address, bank_input.coins, True, status,
            start_index + len(ops),
        ))
    for bank_output in msg.outputs:
        ops.extend(map_account_balance(
            OperationType.TRANSFER, bank_output.address, bank_output.coins, False, status,
            start_index + len(ops),
        ))
    return ops


def unflatten_events(event: Event, attributes_per_event: int) -> list[Event]:
    """Split a message-log event that merges several emissions of one type.

    The node concatenates the attributes of every same-typed event of a
    message; authz_msg_index attributes are dropped before splitting.
    """
    attributes = [a for a in event.attributes if a[0] != AUTHZ_MSG_INDEX]
    if len(attributes) % attributes_per_event != 0:
        raise MalformedEventError(
            f"unexpected number of attributes in {event.type} event: {len(attributes)}"
        )
    return [
        Event(type=event.type, attributes=tuple(attributes[i:i + attributes_per_event]))
        for i in range(0, len(attributes), attributes_per_event)
    ]


def _message_log_ops(
    log: MessageLog, status: OperationStatus | None, start_index: int
) -> list[Operation]:
    ops: list[Operation] = []
    for event in log.events:
        if event.type == EventType.TRANSFER:
            split = unflatten_events(event, _TRANSFER_ATTRIBUTES)
        elif event.type in (EventType.COIN_MINT, EventType.COIN_BURN):
            split = unflatten_events(event, _SUPPLY_ATTRIBUTES)
        else:
            continue
        ops.extend(map_events(split, status, start_index + len(ops)))
    return ops


def tx_to_operations(
    tx: Tx,
    logs: list[MessageLog],
    fee_status: OperationStatus,
    op_status: OperationStatus,
    params: ChainParameters,
    events: Iterable[Event] = (),
) -> list[Operation]:
    """All operations of one block transaction.

    Ethereum transactions are mapped from their execution events only. Other
    transactions emit the fee pair first, then each message's operations in
    message order, taken from that message's log events. MsgMultiSend is
    mapped from its content; a failed MsgSend (which has no events) is mapped
    from its content with the failure status.
    """
    if tx.is_ethereum_tx():
        return map_events(events, OperationStatus.SUCCESS)

    ops: list[Operation] = []
    if tx.fee.amount:
        ops.extend(map_fee(
            tx.fee_payer(params.bech32_prefix), params.fee_collector_address, tx.fee.amount,
            status=fee_status,
        ))

    logs_by_index = {log.msg_index: log for log in logs}
    for msg_index, msg in enumerate(tx.messages):
        if isinstance(msg, MsgMultiSend):
            ops.extend(map_multisend(msg, op_status, len(ops)))
            continue
        log = logs_by_index.get(msg_index, MessageLog(msg_index=msg_index))
        ops.extend(_message_log_ops(log, op_status, len(ops)))
        if op_status != OperationStatus.SUCCESS and isinstance(msg, MsgSend):
            ops.extend(map_transfer(
                msg.from_address, msg.to_address, msg.amount, op_status, len(ops)
            ))
    return ops
