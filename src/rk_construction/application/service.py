"""ConstructionApplicationService — derive plus the seven construction stages.

preprocess -> metadata -> payloads -> (client signs) -> combine -> hash -> submit
parse can be applied to the output of payloads or combine.

Every stage is stateless: all context a later stage needs travels in the
options / metadata objects and the transaction bytes. Only metadata and
submit talk to the node and are refused in offline mode.
"""

import asyncio
import logging
import math

from src.rk_chain.domain.client import ChainClient, chain_error
from src.rk_chain.domain.models import ChainClientError
from src.rk_codec.domain.codec import (
    InvalidTransactionError,
    decode,
    encode,
    signing_payload,
    tx_hash,
)
from src.rk_codec.domain.models import Fee, MsgSend, SignerInfo, Tx
from src.rk_common.chain_params import ChainParameters
from src.rk_common.coins import Coins
from src.rk_common.currency import currency_for_denom
from src.rk_common.enums import CurveType, Mode, SignatureType
from src.rk_common.errors import (
    ChainError,
    InvalidMetadataError,
    InvalidOptionsError,
    InvalidPublicKeyError,
    InvalidSignatureError,
    InvalidTxError,
    MissingPublicKeyError,
    MissingSignatureError,
    NoOperationsError,
    PublicKeyNilError,
    UnsupportedCurveTypeError,
)
from src.rk_common.keys import (
    PublicKeyError,
    address_from_public_key,
    compress_public_key,
    verify_signature,
)
from src.rk_common.schemas import (
    AccountIdentifier,
    Amount,
    CurrencyModel,
    OperationModel,
    PublicKey,
    SigningPayload,
    TransactionIdentifier,
)
from src.rk_common.validation import check_network, require_online
from src.rk_construction.application.intent import max_fee_to_coins, parse_intent
from src.rk_construction.application.schemas import (
    ConstructionCombineRequest,
    ConstructionCombineResponse,
    ConstructionDeriveRequest,
    ConstructionDeriveResponse,
    ConstructionHashRequest,
    ConstructionMetadataRequest,
    ConstructionMetadataResponse,
    ConstructionParseRequest,
    ConstructionParseResponse,
    ConstructionPayloadsRequest,
    ConstructionPayloadsResponse,
    ConstructionPreprocessRequest,
    ConstructionPreprocessResponse,
    ConstructionSubmitRequest,
    TransactionIdentifierResponse,
)
from src.rk_construction.domain.gas import (
    DEFAULT_GAS_ADJUSTMENT,
    DEFAULT_SUGGESTED_FEE_MULTIPLIER,
    fee_amount,
    gas_price_from_multiplier,
    gas_wanted_from_used,
    suggested_fee,
)
from src.rk_construction.domain.options import (
    ConstructionMetadata,
    ConstructionOptions,
    InvalidStructureError,
    SignerMetadata,
)
from src.rk_operations.domain.mapper import map_transfer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _public_key_bytes(public_key: PublicKey) -> bytes:
    """Compressed secp256k1 key from a Rosetta public key."""
    if public_key.curve_type != CurveType.SECP256K1.value:
        raise UnsupportedCurveTypeError(public_key.curve_type)
    try:
        raw = bytes.fromhex(public_key.hex_bytes)
    except ValueError:
        raise InvalidPublicKeyError("public key is not valid hex") from None
    if not raw:
        raise PublicKeyNilError()
    try:
        return compress_public_key(raw)
    except PublicKeyError as exc:
        raise InvalidPublicKeyError(str(exc)) from exc


def _decode_tx(hex_tx: str) -> tuple[bytes, Tx]:
    try:
        raw = bytes.fromhex(hex_tx)
    except ValueError:
        raise InvalidTxError("transaction is not valid hex") from None
    try:
        return raw, decode(raw)
    except InvalidTransactionError as exc:
        raise InvalidTxError(str(exc)) from exc


def _preprocess_metadata(metadata: dict | None) -> tuple[str, float]:
    """memo and gas_adjustment from the optional preprocess metadata."""
    metadata = metadata or {}
    invalid = []
    memo = metadata.get("memo", "")
    if not isinstance(memo, str):
        invalid.append("memo")
    gas_adjustment = metadata.get("gas_adjustment", DEFAULT_GAS_ADJUSTMENT)
    if (
        not isinstance(gas_adjustment, (int, float))
        or isinstance(gas_adjustment, bool)
        or not math.isfinite(gas_adjustment)
        or gas_adjustment < 0
    ):
        invalid.append("gas_adjustment")
    if invalid:
        raise InvalidMetadataError(invalid)
    return memo, float(gas_adjustment)


class ConstructionApplicationService:
    def __init__(self, params: ChainParameters, mode: Mode, client: ChainClient | None) -> None:
        self._params = params
        self._mode = mode
        self._client = client

    def _fee_amount(self, value: int) -> list[Amount]:
        currency = currency_for_denom(self._params.fee_denom)
        return [Amount(value=str(value), currency=CurrencyModel.from_domain(currency))]  # type: ignore[arg-type]

    def _signer_keys(
        self, signers: list[str], public_keys: list[PublicKey] | None
    ) -> list[bytes]:
        """Public keys in signer order, each checked against its signer's address."""
        public_keys = public_keys or []
        if len(public_keys) < len(signers):
            raise MissingPublicKeyError(len(signers), len(public_keys))
        keys = []
        for signer, public_key in zip(signers, public_keys):
            key = _public_key_bytes(public_key)
            if address_from_public_key(key, self._params.bech32_prefix) != signer:
                raise InvalidPublicKeyError(f"public key does not belong to signer {signer}")
            keys.append(key)
        return keys

    # ------------------------------------------------------------------
    # Derive
    # ------------------------------------------------------------------

    async def derive(self, req: ConstructionDeriveRequest) -> ConstructionDeriveResponse:
        check_network(self._params, req.network_identifier)
        key = _public_key_bytes(req.public_key)
        address = address_from_public_key(key, self._params.bech32_prefix)
        return ConstructionDeriveResponse(account_identifier=AccountIdentifier(address=address))

    # ------------------------------------------------------------------
    # Preprocess
    # ------------------------------------------------------------------

    async def preprocess(
        self, req: ConstructionPreprocessRequest
    ) -> ConstructionPreprocessResponse:
        check_network(self._params, req.network_identifier)
        if not req.operations:
            raise NoOperationsError()

        msgs = parse_intent(req.operations, self._params)
        memo, gas_adjustment = _preprocess_metadata(req.metadata)
        multiplier = req.suggested_fee_multiplier
        options = ConstructionOptions(
            msgs=tuple(msgs),
            memo=memo,
            gas_adjustment=gas_adjustment,
            suggested_fee_multiplier=(
                DEFAULT_SUGGESTED_FEE_MULTIPLIER if multiplier is None else multiplier
            ),
            max_fee=max_fee_to_coins(req.max_fee),
        )

        signers = Tx(messages=options.msgs).signers()
        return ConstructionPreprocessResponse(
            options=options.to_dict(),
            required_public_keys=[AccountIdentifier(address=s) for s in signers],
        )

    # ------------------------------------------------------------------
    # Metadata (online)
    # ------------------------------------------------------------------

    async def metadata(self, req: ConstructionMetadataRequest) -> ConstructionMetadataResponse:
        require_online(self._mode)
        check_network(self._params, req.network_identifier)
        try:
            options = ConstructionOptions.from_dict(req.options)
        except InvalidStructureError as exc:
            raise InvalidOptionsError(exc.fields) from exc

        signers = Tx(messages=options.msgs).signers()
        keys = self._signer_keys(signers, req.public_keys)

        try:
            accounts = await asyncio.gather(
                *(self._client.get_account(s, None) for s in signers)  # type: ignore[union-attr]
            )
            unsigned = Tx(
                messages=options.msgs,
                memo=options.memo,
                signer_infos=tuple(
                    SignerInfo(public_key=key, sequence=account.sequence)
                    for key, account in zip(keys, accounts)
                ),
            )
            # simulation skips verification but expects one signature slot per signer
            placeholder = unsigned.with_signatures([b""] * len(keys))
            gas_used = await self._client.simulate(encode(placeholder))  # type: ignore[union-attr]
        except ChainClientError as exc:
            raise chain_error(exc) from exc

        gas_wanted = gas_wanted_from_used(gas_used, options.gas_adjustment)
        fee_denom = self._params.fee_denom
        max_fee = None
        if options.max_fee is not None and fee_denom in options.max_fee.denoms():
            max_fee = options.max_fee.amount_of(fee_denom)
        fee, gas_price = suggested_fee(
            gas_price_from_multiplier(options.suggested_fee_multiplier), gas_wanted, max_fee
        )
        logger.debug(
            "Simulated %d gas, wanted %d at price %s (fee %d%s)",
            gas_used, gas_wanted, gas_price, fee, fee_denom,
        )

        metadata = ConstructionMetadata(
            signers=tuple(
                SignerMetadata(account_number=a.account_number, sequence=a.sequence)
                for a in accounts
            ),
            gas_wanted=gas_wanted,
            gas_price=gas_price,
            memo=options.memo,
        )
        return ConstructionMetadataResponse(
            metadata=metadata.to_dict(), suggested_fee=self._fee_amount(fee)
        )

    # ------------------------------------------------------------------
    # Payloads
    # ------------------------------------------------------------------

    async def payloads(self, req: ConstructionPayloadsRequest) -> ConstructionPayloadsResponse:
        check_network(self._params, req.network_identifier)
        try:
            metadata = ConstructionMetadata.from_dict(req.metadata)
        except InvalidStructureError as exc:
            raise InvalidMetadataError(exc.fields) from exc

        msgs = parse_intent(req.operations, self._params)
        signers = Tx(messages=tuple(msgs)).signers()
        if len(metadata.signers) < len(signers):
            raise InvalidMetadataError(["signers"])
        keys = self._signer_keys(signers, req.public_keys)

        tx = Tx(
            messages=tuple(msgs),
            memo=metadata.memo,
            fee=Fee(
                amount=Coins.of(
                    self._params.fee_denom, fee_amount(metadata.gas_price, metadata.gas_wanted)
                ),
                gas_limit=metadata.gas_wanted,
            ),
            signer_infos=tuple(
                SignerInfo(public_key=key, sequence=signer.sequence)
                for key, signer in zip(keys, metadata.signers)
            ),
        )

        payloads = []
        for signer, signer_metadata in zip(signers, metadata.signers):
            digest = signing_payload(tx, self._params.network, signer_metadata.account_number)
            payloads.append(SigningPayload(
                account_identifier=AccountIdentifier(address=signer),
                hex_bytes=digest.hex(),
                signature_type=SignatureType.ECDSA.value,
            ))

        return ConstructionPayloadsResponse(
            unsigned_transaction=encode(tx).hex(), payloads=payloads
        )

    # ------------------------------------------------------------------
    # Parse
    # ------------------------------------------------------------------

    async def parse(self, req: ConstructionParseRequest) -> ConstructionParseResponse:
        check_network(self._params, req.network_identifier)
        _, tx = _decode_tx(req.transaction)

        ops = []
        for msg in tx.messages:
            if not isinstance(msg, MsgSend):
                raise InvalidTxError(f"unsupported message type {msg.type_url}")
            ops.extend(map_transfer(
                msg.from_address, msg.to_address, msg.amount, None, start_index=len(ops)
            ))

        signers: list[AccountIdentifier] = []
        if req.signed:
            if len(tx.signatures) < len(tx.signer_infos):
                raise MissingSignatureError(len(tx.signer_infos), len(tx.signatures))
            for info in tx.signer_infos:
                address = info.address(self._params.bech32_prefix)
                if address is None:
                    raise InvalidTxError(f"unsupported signer public key {info.public_key_type}")
                signers.append(AccountIdentifier(address=address))

        return ConstructionParseResponse(
            operations=[OperationModel.from_domain(op) for op in ops],
            account_identifier_signers=signers,
            metadata={"memo": tx.memo} if tx.memo else None,
        )

    # ------------------------------------------------------------------
    # Combine
    # ------------------------------------------------------------------

    async def combine(self, req: ConstructionCombineRequest) -> ConstructionCombineResponse:
        check_network(self._params, req.network_identifier)
        _, tx = _decode_tx(req.unsigned_transaction)
        if tx.signatures:
            raise InvalidTxError("transaction is already signed")

        required = len(tx.signer_infos)
        if len(req.signatures) < required:
            raise MissingSignatureError(required, len(req.signatures))
        if len(req.signatures) > required:
            raise InvalidSignatureError(
                f"expected {required} signatures, got {len(req.signatures)}"
            )

        signatures = []
        for info, signature in zip(tx.signer_infos, req.signatures):
            if signature.signature_type != SignatureType.ECDSA.value:
                raise InvalidSignatureError(
                    f"unsupported signature type {signature.signature_type}"
                )
            if _public_key_bytes(signature.public_key) != info.public_key:
                raise InvalidPublicKeyError("public key does not match the transaction signer")
            payload = signature.signing_payload
            payload_address = (
                payload.account_identifier.address if payload.account_identifier else payload.address
            )
            signer = info.address(self._params.bech32_prefix)
            if payload_address != signer:
                raise InvalidSignatureError(
                    f"signing payload for {payload_address} does not belong to signer {signer}"
                )
            try:
                sig_bytes = bytes.fromhex(signature.hex_bytes)
                digest = bytes.fromhex(signature.signing_payload.hex_bytes)
            except ValueError:
                raise InvalidSignatureError("signature is not valid hex") from None
            if len(sig_bytes) != 64:
                raise InvalidSignatureError(f"expected 64 signature bytes, got {len(sig_bytes)}")
            if not verify_signature(info.public_key, digest, sig_bytes):
                raise InvalidSignatureError("signature does not verify against the payload")
            signatures.append(sig_bytes)

        return ConstructionCombineResponse(
            signed_transaction=encode(tx.with_signatures(signatures)).hex()
        )

    # ------------------------------------------------------------------
    # Hash / Submit
    # ------------------------------------------------------------------

    async def hash(self, req: ConstructionHashRequest) -> TransactionIdentifierResponse:
        check_network(self._params, req.network_identifier)
        raw, _ = _decode_tx(req.signed_transaction)
        return TransactionIdentifierResponse(
            transaction_identifier=TransactionIdentifier(hash=tx_hash(raw))
        )

    async def submit(self, req: ConstructionSubmitRequest) -> TransactionIdentifierResponse:
        require_online(self._mode)
        check_network(self._params, req.network_identifier)
        raw, _ = _decode_tx(req.signed_transaction)

        try:
            result = await self._client.broadcast(raw)  # type: ignore[union-attr]
        except ChainClientError as exc:
            raise chain_error(exc) from exc
        if result.code != 0:
            logger.warning("Broadcast rejected with code %d: %s", result.code, result.log)
            raise ChainError(result.log)

        logger.info("Submitted transaction %s", result.hash)
        return TransactionIdentifierResponse(
            transaction_identifier=TransactionIdentifier(hash=result.hash)
        )
