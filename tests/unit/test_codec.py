"""Tests for the transaction codec."""

import hashlib

import pytest
from cosmpy.protos.cosmos.base.v1beta1.coin_pb2 import Coin as CoinProto
from cosmpy.protos.cosmos.tx.v1beta1 import tx_pb2
from ecdsa import SECP256k1, SigningKey
from google.protobuf.any_pb2 import Any as AnyProto

from src.rk_codec.domain.codec import (
    InvalidTransactionError,
    decode,
    encode,
    encode_body,
    message_from_json,
    message_to_json,
    sign_bytes,
    signing_payload,
    tx_hash,
)
from src.rk_codec.domain.models import (
    ETHEREUM_TX_EXTENSION,
    MSG_SEND,
    BankIO,
    Fee,
    GenericMsg,
    MsgMultiSend,
    MsgSend,
    SignerInfo,
    Tx,
)
from src.rk_common.bech32 import encode_address
from src.rk_common.coins import Coins
from src.rk_common.keys import address_from_public_key

PUBKEY = SigningKey.from_secret_exponent(7, curve=SECP256k1).get_verifying_key().to_string("compressed")
ALICE = encode_address("kava", b"\x01" * 20)
BOB = encode_address("kava", b"\x02" * 20)


def _tx(**overrides) -> Tx:
    fields = dict(
        messages=(MsgSend(ALICE, BOB, Coins.of("ukava", 100)),),
        memo="hello",
        fee=Fee(amount=Coins.of("ukava", 50), gas_limit=200_000),
        signer_infos=(SignerInfo(public_key=PUBKEY, sequence=7),),
    )
    fields.update(overrides)
    return Tx(**fields)


def _raw(body: tx_pb2.TxBody, auth_info: tx_pb2.AuthInfo | None = None) -> bytes:
    return tx_pb2.TxRaw(
        body_bytes=body.SerializeToString(),
        auth_info_bytes=(auth_info or tx_pb2.AuthInfo()).SerializeToString(),
    ).SerializeToString()


class TestWireFormat:
    def test_tx_raw_layout(self) -> None:
        raw = tx_pb2.TxRaw.FromString(encode(_tx(signatures=(b"\x01" * 64,))))
        body = tx_pb2.TxBody.FromString(raw.body_bytes)
        auth_info = tx_pb2.AuthInfo.FromString(raw.auth_info_bytes)

        assert list(raw.signatures) == [b"\x01" * 64]
        assert body.memo == "hello"
        assert body.messages[0].type_url == MSG_SEND
        assert auth_info.fee.gas_limit == 200_000
        assert [(c.denom, c.amount) for c in auth_info.fee.amount] == [("ukava", "50")]
        assert auth_info.signer_infos[0].public_key.type_url == "/cosmos.crypto.secp256k1.PubKey"
        assert auth_info.signer_infos[0].sequence == 7

    def test_hand_built_body(self) -> None:
        # TxRaw{body_bytes: TxBody{memo: "hi"}, auth_info_bytes: ""}
        tx = decode(bytes.fromhex("0a04120268691200"))
        assert tx.memo == "hi"
        assert tx.messages == ()


class TestDecode:
    def test_decode_inverts_encode(self) -> None:
        tx = _tx()
        assert decode(encode(tx)) == tx

    def test_reencoding_is_byte_identical(self) -> None:
        raw = encode(_tx(signatures=(b"\x01" * 64,)))
        assert encode(decode(raw)) == raw

    def test_generic_message_carried_verbatim(self) -> None:
        msg = GenericMsg("/cosmos.staking.v1beta1.MsgDelegate", b"\x0a\x05kava1")
        decoded = decode(encode(_tx(messages=(msg,))))
        assert decoded.messages == (msg,)
        assert decoded.signers() == []

    def test_multisend(self) -> None:
        msg = MsgMultiSend(
            inputs=(BankIO(ALICE, Coins.of("ukava", 3)),),
            outputs=(BankIO(BOB, Coins.of("ukava", 3)),),
        )
        assert decode(encode(_tx(messages=(msg,)))).messages == (msg,)

    def test_ethereum_extension_option(self) -> None:
        tx = decode(encode(_tx(extension_options=(ETHEREUM_TX_EXTENSION,))))
        assert tx.is_ethereum_tx()

    def test_original_body_bytes_kept(self) -> None:
        # memo before messages: valid, but not how this codec serializes
        send = AnyProto(type_url=MSG_SEND, value=b"")
        body_bytes = (
            tx_pb2.TxBody(memo="m").SerializeToString()
            + tx_pb2.TxBody(messages=[send]).SerializeToString()
        )
        raw = tx_pb2.TxRaw(body_bytes=body_bytes).SerializeToString()

        tx = decode(raw)

        assert tx.memo == "m"
        assert encode_body(tx) == body_bytes
        assert tx_pb2.SignDoc.FromString(sign_bytes(tx, "kava-test", 1)).body_bytes == body_bytes

    @pytest.mark.parametrize(
        "raw",
        [b"", b"\x00", b"\xff\xff\xff", b"garbage bytes that are not a tx", b"\xa0"],
    )
    def test_garbage_rejected(self, raw: bytes) -> None:
        with pytest.raises(InvalidTransactionError):
            decode(raw)

    def test_malformed_body_rejected(self) -> None:
        raw = tx_pb2.TxRaw(body_bytes=b"\x0a\xff").SerializeToString()
        with pytest.raises(InvalidTransactionError):
            decode(raw)

    def test_malformed_message_rejected(self) -> None:
        body = tx_pb2.TxBody(messages=[AnyProto(type_url=MSG_SEND, value=b"\x0a\xff\xff")])
        with pytest.raises(InvalidTransactionError):
            decode(_raw(body))

    @pytest.mark.parametrize("amount", ["-1", "1.5", "", "12abc"])
    def test_bad_fee_amount_rejected(self, amount: str) -> None:
        auth_info = tx_pb2.AuthInfo(fee=tx_pb2.Fee(amount=[CoinProto(denom="ukava", amount=amount)]))
        with pytest.raises(InvalidTransactionError):
            decode(_raw(tx_pb2.TxBody(), auth_info))

    def test_trailing_bytes_rejected(self) -> None:
        with pytest.raises(InvalidTransactionError):
            decode(encode(_tx()) + b"\x00")


class TestHash:
    def test_uppercase_sha256(self) -> None:
        raw = encode(_tx())
        assert tx_hash(raw) == hashlib.sha256(raw).hexdigest().upper()

    def test_stable(self) -> None:
        assert tx_hash(encode(_tx())) == tx_hash(encode(_tx()))


class TestSignBytes:
    def test_sign_doc(self) -> None:
        tx = _tx()
        doc = tx_pb2.SignDoc.FromString(sign_bytes(tx, "kava-test", 12))
        raw = tx_pb2.TxRaw.FromString(encode(tx))
        assert doc.body_bytes == raw.body_bytes
        assert doc.auth_info_bytes == raw.auth_info_bytes
        assert doc.chain_id == "kava-test"
        assert doc.account_number == 12

    def test_signatures_excluded(self) -> None:
        unsigned = _tx()
        signed = unsigned.with_signatures([b"\x01" * 64])
        assert sign_bytes(unsigned, "kava-test", 1) == sign_bytes(signed, "kava-test", 1)

    def test_bound_to_chain_account_and_sequence(self) -> None:
        tx = _tx()
        base = signing_payload(tx, "kava-test", 1)
        assert len(base) == 32
        assert signing_payload(tx, "kava-other", 1) != base
        assert signing_payload(tx, "kava-test", 2) != base
        resequenced = _tx(signer_infos=(SignerInfo(public_key=PUBKEY, sequence=8),))
        assert signing_payload(resequenced, "kava-test", 1) != base


class TestTxModel:
    def test_signers_unique_in_order(self) -> None:
        tx = _tx(
            messages=(
                MsgSend("kava1a", "kava1x", Coins.of("ukava", 1)),
                MsgSend("kava1b", "kava1x", Coins.of("ukava", 1)),
                MsgSend("kava1a", "kava1y", Coins.of("ukava", 1)),
            ),
            signer_infos=(),
        )
        assert tx.signers() == ["kava1a", "kava1b"]
        assert tx.fee_payer("kava") == "kava1a"

    def test_fee_payer_from_signer_key(self) -> None:
        tx = _tx(messages=(GenericMsg("/cosmos.staking.v1beta1.MsgDelegate", b""),))
        assert tx.fee_payer("kava") == address_from_public_key(PUBKEY, "kava")

    def test_explicit_fee_payer(self) -> None:
        tx = _tx(fee=Fee(amount=Coins.of("ukava", 1), gas_limit=1, payer=BOB))
        assert tx.fee_payer("kava") == BOB

    def test_ethereum_extension(self) -> None:
        assert _tx(extension_options=(ETHEREUM_TX_EXTENSION,)).is_ethereum_tx()
        assert not _tx().is_ethereum_tx()


class TestMessageJson:
    def test_send_round_trip(self) -> None:
        msg = MsgSend("kava1a", "kava1b", Coins.of("ukava", 9))
        assert message_from_json(message_to_json(msg)) == msg

    def test_unsupported_type(self) -> None:
        with pytest.raises(InvalidTransactionError):
            message_from_json({"@type": "/cosmos.gov.v1.MsgVote"})

    def test_bad_amount(self) -> None:
        with pytest.raises(InvalidTransactionError):
            message_from_json({
                "@type": "/cosmos.bank.v1beta1.MsgSend",
                "from_address": "a",
                "to_address": "b",
                "amount": [{"denom": "ukava", "amount": "-1"}],
            })
