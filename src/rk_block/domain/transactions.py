"""Block transactions into Rosetta transactions.

A block renders as:
  begin-block pseudo tx   hash "00" + block hash, only when it has operations
  one entry per raw tx    hash = SHA-256 of the raw bytes
  end-block pseudo tx     hash "01" + block hash, only when it has operations

Fee status
----------
Fees are deducted by the ante handler before messages run, so a failed
transaction normally still paid its fee. The exceptions are ante-handler
rejections in the "sdk" codespace that happen before deduction:

  3  invalid sequence      -> FAILURE
  13 insufficient fee      -> FAILURE
  32 wrong sequence        -> FAILURE
  4  unauthorized          -> FAILURE unless the fee collector received the fee
  5  insufficient funds    -> FAILURE unless the fee collector received the fee
"""

import json
import logging

from src.rk_block.domain.models import MappedTransaction
from src.rk_chain.domain.models import Block, BlockResults, Event, MessageLog, TxResult
from src.rk_codec.domain.codec import InvalidTransactionError, decode, tx_hash
from src.rk_codec.domain.models import Tx
from src.rk_common.chain_params import ChainParameters
from src.rk_common.coins import CoinParseError, Coins
from src.rk_common.enums import EventType, OperationStatus
from src.rk_operations.domain.invariants import verify_operation_group
from src.rk_operations.domain.mapper import MalformedEventError, map_events, tx_to_operations

logger = logging.getLogger(__name__)

BEGIN_BLOCK_PREFIX = "00"
END_BLOCK_PREFIX = "01"

SDK_CODESPACE = "sdk"
_FEE_NOT_CHARGED_CODES = frozenset({3, 13, 32})
_FEE_MAYBE_CHARGED_CODES = frozenset({4, 5})


class InconsistentBlockError(ValueError):
    """Block and block results disagree on the transaction count."""


def begin_block_tx_hash(block_hash: str) -> str:
    return (BEGIN_BLOCK_PREFIX + block_hash).upper()


def end_block_tx_hash(block_hash: str) -> str:
    return (END_BLOCK_PREFIX + block_hash).upper()


def parse_message_logs(raw_log: str) -> list[MessageLog]:
    """Parse the JSON message logs of a delivered tx. Non-JSON logs give []."""
    try:
        items = json.loads(raw_log) if raw_log else []
    except ValueError:
        return []
    if not isinstance(items, list):
        return []
    logs: list[MessageLog] = []
    try:
        for item in items:
            logs.append(MessageLog(
                msg_index=int(item.get("msg_index") or 0),
                events=tuple(
                    Event(
                        type=e["type"],
                        attributes=tuple(
                            (a.get("key") or "", a.get("value") or "")
                            for a in e.get("attributes") or []
                        ),
                    )
                    for e in item.get("events") or []
                ),
            ))
    except (AttributeError, KeyError, TypeError, ValueError):
        return []
    return logs


def fee_was_received(tx: Tx, result: TxResult, fee_collector: str) -> bool:
    for event in result.events:
        if event.type != EventType.COIN_RECEIVED:
            continue
        attributes = event.attribute_map()
        try:
            amount = Coins.parse(attributes.get("amount", ""))
        except CoinParseError as exc:
            raise MalformedEventError(f"coin_received: {exc}") from exc
        if attributes.get("receiver") == fee_collector and amount == tx.fee.amount:
            return True
    return False


def fee_status(tx: Tx, result: TxResult, fee_collector: str) -> OperationStatus:
    if result.codespace != SDK_CODESPACE:
        return OperationStatus.SUCCESS
    if result.code in _FEE_NOT_CHARGED_CODES:
        return OperationStatus.FAILURE
    if result.code in _FEE_MAYBE_CHARGED_CODES:
        if fee_was_received(tx, result, fee_collector):
            return OperationStatus.SUCCESS
        return OperationStatus.FAILURE
    return OperationStatus.SUCCESS


def op_status(result: TxResult) -> OperationStatus:
    return OperationStatus.SUCCESS if result.ok else OperationStatus.FAILURE


def map_transaction(raw: bytes, result: TxResult, params: ChainParameters) -> MappedTransaction:
    tx_id = tx_hash(raw)
    metadata = None if result.ok else {"log": result.log}
    try:
        tx = decode(raw)
    except InvalidTransactionError as exc:
        logger.error("Undecodable transaction %s: %s", tx_id, exc)
        return MappedTransaction(
            hash=tx_id, operations=[], metadata={**(metadata or {}), "decode_error": str(exc)}
        )

    operations = tx_to_operations(
        tx,
        parse_message_logs(result.log),
        fee_status(tx, result, params.fee_collector_address),
        op_status(result),
        params,
        events=result.events,
    )
    verify_operation_group(operations)
    return MappedTransaction(hash=tx_id, operations=operations, metadata=metadata)


def map_block_transactions(
    block: Block, results: BlockResults, params: ChainParameters
) -> list[MappedTransaction]:
    if len(results.txs_results) != len(block.txs):
        raise InconsistentBlockError(
            f"block {block.header.height} has {len(block.txs)} txs "
            f"but {len(results.txs_results)} results"
        )

    transactions: list[MappedTransaction] = []

    begin_ops = map_events(results.begin_block_events, OperationStatus.SUCCESS)
    if begin_ops:
        transactions.append(MappedTransaction(hash=begin_block_tx_hash(block.hash), operations=begin_ops))

    for raw, result in zip(block.txs, results.txs_results):
        transactions.append(map_transaction(raw, result, params))

    end_ops = map_events(results.end_block_events, OperationStatus.SUCCESS)
    if end_ops:
        transactions.append(MappedTransaction(hash=end_block_tx_hash(block.hash), operations=end_ops))

    return transactions
