"""Tests for block transaction mapping (pure, no client)."""

import json
from datetime import UTC, datetime

import pytest
from cosmpy.protos.cosmos.base.v1beta1.coin_pb2 import Coin as CoinProto
from cosmpy.protos.cosmos.crypto.secp256k1.keys_pb2 import PubKey
from cosmpy.protos.cosmos.tx.v1beta1 import tx_pb2
from ecdsa import SECP256k1, SigningKey
from google.protobuf.any_pb2 import Any as AnyProto

from src.rk_block.domain.transactions import (
    InconsistentBlockError,
    begin_block_tx_hash,
    end_block_tx_hash,
    fee_status,
    map_block_transactions,
    map_transaction,
    parse_message_logs,
)
from src.rk_chain.domain.models import Block, BlockHeader, BlockResults, Event, TxResult
from src.rk_codec.domain.codec import encode, tx_hash
from src.rk_codec.domain.models import Fee, MsgSend, Tx
from src.rk_common.chain_params import ChainParameters
from src.rk_common.coins import Coins
from src.rk_common.enums import OperationStatus, OperationType
from src.rk_common.keys import address_from_public_key

PARAMS = ChainParameters(network="kava-test")
BLOCK_HASH = "AB" * 32
TX = Tx(
    messages=(MsgSend("kava1alice", "kava1bob", Coins.of("ukava", 100)),),
    fee=Fee(amount=Coins.of("ukava", 50), gas_limit=200_000),
)
RAW = encode(TX)


def _transfer(sender: str, recipient: str, amount: str) -> Event:
    return Event("transfer", (("recipient", recipient), ("sender", sender), ("amount", amount)))


def _success_log() -> str:
    return json.dumps([{
        "msg_index": 0,
        "events": [{"type": "transfer", "attributes": [
            {"key": "recipient", "value": "kava1bob"},
            {"key": "sender", "value": "kava1alice"},
            {"key": "amount", "value": "100ukava"},
        ]}],
    }])


def _block(txs: tuple[bytes, ...] = (RAW,)) -> Block:
    return Block(
        hash=BLOCK_HASH,
        header=BlockHeader(height=10, time=datetime(2023, 1, 1, tzinfo=UTC)),
        txs=txs,
    )


class TestParseMessageLogs:
    def test_json_logs(self) -> None:
        logs = parse_message_logs(_success_log())
        assert logs[0].msg_index == 0
        assert logs[0].events[0].attribute_map()["sender"] == "kava1alice"

    @pytest.mark.parametrize("raw", ["", "out of gas", "{}", "[1, 2]"])
    def test_non_log_text(self, raw: str) -> None:
        assert parse_message_logs(raw) == []


class TestFeeStatus:
    @pytest.mark.parametrize("code", [3, 13, 32])
    def test_ante_rejections_charge_nothing(self, code: int) -> None:
        result = TxResult(code=code, codespace="sdk")
        assert fee_status(TX, result, PARAMS.fee_collector_address) == OperationStatus.FAILURE

    @pytest.mark.parametrize("code", [4, 5])
    def test_conditional_codes_without_receipt(self, code: int) -> None:
        result = TxResult(code=code, codespace="sdk")
        assert fee_status(TX, result, PARAMS.fee_collector_address) == OperationStatus.FAILURE

    def test_conditional_code_with_receipt(self) -> None:
        received = Event("coin_received", (
            ("receiver", PARAMS.fee_collector_address), ("amount", "50ukava"),
        ))
        result = TxResult(code=5, codespace="sdk", events=(received,))
        assert fee_status(TX, result, PARAMS.fee_collector_address) == OperationStatus.SUCCESS

    def test_message_failure_still_pays(self) -> None:
        result = TxResult(code=7, codespace="bank")
        assert fee_status(TX, result, PARAMS.fee_collector_address) == OperationStatus.SUCCESS


class TestMapTransaction:
    def test_successful_send(self) -> None:
        mapped = map_transaction(RAW, TxResult(log=_success_log()), PARAMS)

        assert mapped.hash == tx_hash(RAW)
        assert mapped.metadata is None
        assert [op.type for op in mapped.operations] == [OperationType.FEE] * 2 + [OperationType.TRANSFER] * 2
        assert all(op.status == OperationStatus.SUCCESS for op in mapped.operations)

    def test_failed_send_carries_log(self) -> None:
        mapped = map_transaction(RAW, TxResult(code=5, codespace="sdk", log="insufficient funds"), PARAMS)

        assert mapped.metadata == {"log": "insufficient funds"}
        assert [op.status for op in mapped.operations] == [OperationStatus.FAILURE] * 4

    def test_undecodable_tx_listed_without_operations(self) -> None:
        mapped = map_transaction(b"\xff\x00garbage", TxResult(), PARAMS)

        assert mapped.hash == tx_hash(b"\xff\x00garbage")
        assert mapped.operations == []
        assert "decode_error" in mapped.metadata


class TestMapBlockTransactions:
    def test_pseudo_transactions_wrap_block(self) -> None:
        results = BlockResults(
            height=10,
            txs_results=(TxResult(log=_success_log()),),
            begin_block_events=(_transfer("kava1dist", "kava1val", "3ukava"),),
            end_block_events=(Event("coinbase", (("minter", "kava1mint"), ("amount", "9ukava"))),),
        )
        mapped = map_block_transactions(_block(), results, PARAMS)

        assert [m.hash for m in mapped] == [
            begin_block_tx_hash(BLOCK_HASH), tx_hash(RAW), end_block_tx_hash(BLOCK_HASH),
        ]
        assert mapped[0].hash == "00" + BLOCK_HASH
        assert mapped[2].operations[0].type == OperationType.MINT

    def test_empty_pseudo_transactions_omitted(self) -> None:
        results = BlockResults(height=10, txs_results=(TxResult(log=_success_log()),))
        mapped = map_block_transactions(_block(), results, PARAMS)
        assert [m.hash for m in mapped] == [tx_hash(RAW)]

    def test_result_count_mismatch(self) -> None:
        with pytest.raises(InconsistentBlockError):
            map_block_transactions(_block(), BlockResults(height=10), PARAMS)

    def test_node_encoded_delegate_tx(self) -> None:
        key = SigningKey.from_secret_exponent(11, curve=SECP256k1).get_verifying_key().to_string("compressed")
        body = tx_pb2.TxBody(messages=[AnyProto(type_url="/cosmos.staking.v1beta1.MsgDelegate", value=b"")])
        auth_info = tx_pb2.AuthInfo(
            signer_infos=[tx_pb2.SignerInfo(
                public_key=AnyProto(
                    type_url="/cosmos.crypto.secp256k1.PubKey",
                    value=PubKey(key=key).SerializeToString(),
                ),
                sequence=4,
            )],
            fee=tx_pb2.Fee(amount=[CoinProto(denom="ukava", amount="25")], gas_limit=90_000),
        )
        raw = tx_pb2.TxRaw(
            body_bytes=body.SerializeToString(),
            auth_info_bytes=auth_info.SerializeToString(),
            signatures=[b"\x01" * 64],
        ).SerializeToString()

        mapped = map_transaction(raw, TxResult(), PARAMS)

        payer = address_from_public_key(key, PARAMS.bech32_prefix)
        fee_debit, fee_credit = mapped.operations
        assert (fee_debit.account, fee_debit.amount) == (payer, -25)
        assert fee_credit.account == PARAMS.fee_collector_address
