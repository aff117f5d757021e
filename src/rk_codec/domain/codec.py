"""Transaction codec: the chain's protobuf wire format, hash and sign bytes.

Wire shape
----------
    TxRaw   { body_bytes, auth_info_bytes, signatures[] }
    TxBody  { messages[Any], memo, extension_options[Any] }
    AuthInfo{ signer_infos[{public_key Any, mode_info, sequence}], fee{amount[], gas_limit, payer} }

MsgSend and MsgMultiSend are interpreted; any other message is carried
through as its packed bytes. Signers sign SIGN_MODE_DIRECT:
sha256(SignDoc{body_bytes, auth_info_bytes, chain_id, account_number}).

The hash is SHA-256 over the raw TxRaw bytes, uppercase hex. It is never
derived from decoded content.
"""

import hashlib
import re
from typing import Any

from cosmpy.protos.cosmos.bank.v1beta1 import bank_pb2, tx_pb2 as bank_tx_pb2
from cosmpy.protos.cosmos.base.v1beta1.coin_pb2 import Coin as CoinProto
from cosmpy.protos.cosmos.crypto.secp256k1.keys_pb2 import PubKey
from cosmpy.protos.cosmos.tx.signing.v1beta1.signing_pb2 import SignMode
from cosmpy.protos.cosmos.tx.v1beta1 import tx_pb2
from google.protobuf.any_pb2 import Any as AnyProto
from google.protobuf.message import DecodeError

from src.rk_codec.domain.models import (
    MSG_MULTI_SEND,
    MSG_SEND,
    BankIO,
    Fee,
    GenericMsg,
    Msg,
    MsgMultiSend,
    MsgSend,
    SignerInfo,
    Tx,
)
from src.rk_common.coins import Coin, Coins, NegativeCoinsError

_AMOUNT_RE = re.compile(r"^[0-9]+$")


class InvalidTransactionError(ValueError):
    pass


# =============================================================================
# Encoding
# =============================================================================


def _coins_proto(coins: Coins) -> list[CoinProto]:
    return [CoinProto(denom=c.denom, amount=str(c.amount)) for c in coins]


def _pack(type_url: str, value: bytes) -> AnyProto:
    return AnyProto(type_url=type_url, value=value)


def _msg_any(msg: Msg) -> AnyProto:
    if isinstance(msg, MsgSend):
        proto = bank_tx_pb2.MsgSend(
            from_address=msg.from_address,
            to_address=msg.to_address,
            amount=_coins_proto(msg.amount),
        )
        return _pack(MSG_SEND, proto.SerializeToString())
    if isinstance(msg, MsgMultiSend):
        proto = bank_tx_pb2.MsgMultiSend(
            inputs=[bank_pb2.Input(address=i.address, coins=_coins_proto(i.coins)) for i in msg.inputs],
            outputs=[bank_pb2.Output(address=o.address, coins=_coins_proto(o.coins)) for o in msg.outputs],
        )
        return _pack(MSG_MULTI_SEND, proto.SerializeToString())
    return _pack(msg.type_url, msg.value)


def encode_body(tx: Tx) -> bytes:
    if tx.body_bytes is not None:
        return tx.body_bytes
    body = tx_pb2.TxBody(
        messages=[_msg_any(m) for m in tx.messages],
        memo=tx.memo,
        extension_options=[_pack(url, b"") for url in tx.extension_options],
    )
    return body.SerializeToString()


def encode_auth_info(tx: Tx) -> bytes:
    if tx.auth_info_bytes is not None:
        return tx.auth_info_bytes
    signer_infos = []
    for info in tx.signer_infos:
        proto = tx_pb2.SignerInfo(
            mode_info=tx_pb2.ModeInfo(single=tx_pb2.ModeInfo.Single(mode=SignMode.SIGN_MODE_DIRECT)),
            sequence=info.sequence,
        )
        if info.public_key:
            proto.public_key.CopyFrom(
                _pack(info.public_key_type, PubKey(key=info.public_key).SerializeToString())
            )
        signer_infos.append(proto)
    auth_info = tx_pb2.AuthInfo(
        signer_infos=signer_infos,
        fee=tx_pb2.Fee(
            amount=_coins_proto(tx.fee.amount),
            gas_limit=tx.fee.gas_limit,
            payer=tx.fee.payer,
        ),
    )
    return auth_info.SerializeToString()


def encode(tx: Tx) -> bytes:
    raw = tx_pb2.TxRaw(
        body_bytes=encode_body(tx),
        auth_info_bytes=encode_auth_info(tx),
        signatures=list(tx.signatures),
    )
    return raw.SerializeToString()


def sign_bytes(tx: Tx, chain_id: str, account_number: int) -> bytes:
    """SIGN_MODE_DIRECT sign document (signatures excluded)."""
    doc = tx_pb2.SignDoc(
        body_bytes=encode_body(tx),
        auth_info_bytes=encode_auth_info(tx),
        chain_id=chain_id,
        account_number=account_number,
    )
    return doc.SerializeToString()


def signing_payload(tx: Tx, chain_id: str, account_number: int) -> bytes:
    return hashlib.sha256(sign_bytes(tx, chain_id, account_number)).digest()


def tx_hash(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest().upper()


# =============================================================================
# Decoding
# =============================================================================


def _parse(message_cls: Any, data: bytes, where: str) -> Any:
    try:
        return message_cls.FromString(data)
    except (DecodeError, RuntimeError, ValueError) as exc:
        raise InvalidTransactionError(f"{where}: malformed encoding: {exc}") from exc


def _coins(protos: Any, where: str) -> Coins:
    coins = []
    for i, proto in enumerate(protos):
        if not proto.denom or not _AMOUNT_RE.match(proto.amount):
            raise InvalidTransactionError(f"{where}[{i}]: invalid coin {proto.amount}{proto.denom}")
        coins.append(Coin(denom=proto.denom, amount=int(proto.amount)))
    return Coins(coins)


def _msg(packed: AnyProto, where: str) -> Msg:
    if packed.type_url == MSG_SEND:
        proto = _parse(bank_tx_pb2.MsgSend, packed.value, where)
        return MsgSend(
            from_address=proto.from_address,
            to_address=proto.to_address,
            amount=_coins(proto.amount, f"{where}.amount"),
        )
    if packed.type_url == MSG_MULTI_SEND:
        proto = _parse(bank_tx_pb2.MsgMultiSend, packed.value, where)
        return MsgMultiSend(
            inputs=tuple(
                BankIO(i.address, _coins(i.coins, f"{where}.inputs[{n}].coins"))
                for n, i in enumerate(proto.inputs)
            ),
            outputs=tuple(
                BankIO(o.address, _coins(o.coins, f"{where}.outputs[{n}].coins"))
                for n, o in enumerate(proto.outputs)
            ),
        )
    return GenericMsg(type_url=packed.type_url, value=bytes(packed.value))


def _signer_info(proto: Any, where: str) -> SignerInfo:
    if not proto.HasField("public_key"):
        return SignerInfo(public_key=b"", sequence=proto.sequence)
    # eth_secp256k1 keys share the { bytes key = 1 } layout
    key = _parse(PubKey, proto.public_key.value, f"{where}.public_key")
    return SignerInfo(
        public_key=bytes(key.key),
        sequence=proto.sequence,
        public_key_type=proto.public_key.type_url,
    )


def decode(raw: bytes) -> Tx:
    """Decode raw transaction bytes. Raises InvalidTransactionError, nothing else."""
    if not raw:
        raise InvalidTransactionError("empty transaction bytes")
    tx_raw = _parse(tx_pb2.TxRaw, raw, "tx")
    body = _parse(tx_pb2.TxBody, tx_raw.body_bytes, "body")
    auth_info = _parse(tx_pb2.AuthInfo, tx_raw.auth_info_bytes, "auth_info")

    try:
        return Tx(
            messages=tuple(_msg(m, f"messages[{i}]") for i, m in enumerate(body.messages)),
            memo=body.memo,
            fee=Fee(
                amount=_coins(auth_info.fee.amount, "fee.amount"),
                gas_limit=auth_info.fee.gas_limit,
                payer=auth_info.fee.payer,
            ),
            signer_infos=tuple(
                _signer_info(s, f"signer_infos[{i}]") for i, s in enumerate(auth_info.signer_infos)
            ),
            signatures=tuple(bytes(s) for s in tx_raw.signatures),
            extension_options=tuple(e.type_url for e in body.extension_options),
            body_bytes=bytes(tx_raw.body_bytes),
            auth_info_bytes=bytes(tx_raw.auth_info_bytes),
        )
    except NegativeCoinsError as exc:
        raise InvalidTransactionError(str(exc)) from exc


# =============================================================================
# JSON form of messages (construction options)
# =============================================================================


def message_to_json(msg: Msg) -> dict[str, Any]:
    if isinstance(msg, MsgSend):
        return {
            "@type": MSG_SEND,
            "from_address": msg.from_address,
            "to_address": msg.to_address,
            "amount": msg.amount.to_dicts(),
        }
    if isinstance(msg, MsgMultiSend):
        return {
            "@type": MSG_MULTI_SEND,
            "inputs": [{"address": i.address, "coins": i.coins.to_dicts()} for i in msg.inputs],
            "outputs": [{"address": o.address, "coins": o.coins.to_dicts()} for o in msg.outputs],
        }
    raise InvalidTransactionError(f"message type {msg.type_url} has no JSON form")


def message_from_json(obj: Any) -> Msg:
    """Inverse of message_to_json. Raises InvalidTransactionError on bad input."""
    if not isinstance(obj, dict):
        raise InvalidTransactionError("message: expected object")
    try:
        type_url = obj.get("@type")
        if type_url == MSG_SEND:
            return MsgSend(
                from_address=str(obj["from_address"]),
                to_address=str(obj["to_address"]),
                amount=Coins.from_dicts(obj["amount"]),
            )
        if type_url == MSG_MULTI_SEND:
            return MsgMultiSend(
                inputs=tuple(BankIO(str(i["address"]), Coins.from_dicts(i["coins"])) for i in obj["inputs"]),
                outputs=tuple(BankIO(str(o["address"]), Coins.from_dicts(o["coins"])) for o in obj["outputs"]),
            )
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidTransactionError(f"message: {exc}") from exc
    raise InvalidTransactionError(f"unsupported message type: {type_url!r}")
