"""Transaction model — pure dataclasses, independent of the wire format."""

from dataclasses import dataclass, field, replace
from typing import ClassVar

from src.rk_common.coins import Coins
from src.rk_common.keys import PublicKeyError, address_from_public_key

MSG_SEND = "/cosmos.bank.v1beta1.MsgSend"
MSG_MULTI_SEND = "/cosmos.bank.v1beta1.MsgMultiSend"
SECP256K1_PUBKEY = "/cosmos.crypto.secp256k1.PubKey"
ETHEREUM_TX_EXTENSION = "/ethermint.evm.v1.ExtensionOptionsEthereumTx"


@dataclass(frozen=True)
class MsgSend:
    type_url: ClassVar[str] = MSG_SEND

    from_address: str
    to_address: str
    amount: Coins

    def signers(self) -> list[str]:
        return [self.from_address]


@dataclass(frozen=True)
class BankIO:
    address: str
    coins: Coins


@dataclass(frozen=True)
class MsgMultiSend:
    type_url: ClassVar[str] = MSG_MULTI_SEND

    inputs: tuple[BankIO, ...]
    outputs: tuple[BankIO, ...]

    def signers(self) -> list[str]:
        return [i.address for i in self.inputs]


@dataclass(frozen=True)
class GenericMsg:
    """A message this service does not interpret, kept as its packed bytes."""

    type_url: str
    value: bytes = b""

    def signers(self) -> list[str]:
        return []


Msg = MsgSend | MsgMultiSend | GenericMsg


@dataclass(frozen=True)
class Fee:
    amount: Coins = field(default_factory=Coins)
    gas_limit: int = 0
    payer: str = ""


@dataclass(frozen=True)
class SignerInfo:
    # empty when the signer's key is already known on chain
    public_key: bytes
    sequence: int
    public_key_type: str = SECP256K1_PUBKEY

    def address(self, prefix: str) -> str | None:
        if self.public_key_type != SECP256K1_PUBKEY or not self.public_key:
            return None
        try:
            return address_from_public_key(self.public_key, prefix)
        except PublicKeyError:
            return None


@dataclass(frozen=True)
class Tx:
    """A transaction as body + auth info + signatures.

    body_bytes / auth_info_bytes hold the exact serialized parts a decoded
    transaction arrived with. Signatures commit to those bytes, so encoding
    a decoded transaction reuses them instead of re-serializing. They are
    None for transactions built locally.
    """

    messages: tuple[Msg, ...]
    memo: str = ""
    fee: Fee = field(default_factory=Fee)
    signer_infos: tuple[SignerInfo, ...] = ()
    signatures: tuple[bytes, ...] = ()
    extension_options: tuple[str, ...] = ()
    body_bytes: bytes | None = field(default=None, compare=False, repr=False)
    auth_info_bytes: bytes | None = field(default=None, compare=False, repr=False)

    def signers(self) -> list[str]:
        """Unique message signers, in first-seen order."""
        seen: list[str] = []
        for msg in self.messages:
            for signer in msg.signers():
                if signer not in seen:
                    seen.append(signer)
        return seen

    def fee_payer(self, prefix: str) -> str:
        """Explicit payer, else the first signer's key, else the first message signer."""
        if self.fee.payer:
            return self.fee.payer
        if self.signer_infos:
            address = self.signer_infos[0].address(prefix)
            if address:
                return address
        signers = self.signers()
        return signers[0] if signers else ""

    def is_ethereum_tx(self) -> bool:
        return bool(self.extension_options) and self.extension_options[0] == ETHEREUM_TX_EXTENSION

    def with_signatures(self, signatures: list[bytes]) -> "Tx":
        return replace(self, signatures=tuple(signatures))
