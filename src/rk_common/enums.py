"""Global enums — values are part of the Rosetta wire contract."""

from enum import Enum


class Mode(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class OperationType(str, Enum):
    FEE = "fee"
    TRANSFER = "transfer"
    MINT = "mint"
    BURN = "burn"


class OperationStatus(str, Enum):
    """Operation outcome. Construction operations carry no status at all."""
    SUCCESS = "success"
    FAILURE = "failure"


class SubAccount(str, Enum):
    """Sub-account categories of a native account.

    A missing sub-account identifier selects the total owned balance.
    """
    LIQUID = "liquid"
    LIQUID_DELEGATED = "liquid_delegated"
    LIQUID_UNBONDING = "liquid_unbonding"
    VESTING = "vesting"
    VESTING_DELEGATED = "vesting_delegated"
    VESTING_UNBONDING = "vesting_unbonding"


class CurveType(str, Enum):
    SECP256K1 = "secp256k1"
    SECP256R1 = "secp256r1"
    EDWARDS25519 = "edwards25519"
    TWEEDLE = "tweedle"


class SignatureType(str, Enum):
    ECDSA = "ecdsa"
    ECDSA_RECOVERY = "ecdsa_recovery"
    ED25519 = "ed25519"
    SCHNORR_1 = "schnorr_1"
    SCHNORR_POSEIDON = "schnorr_poseidon"


class EventType(str, Enum):
    """Bank module event types that move balances."""
    TRANSFER = "transfer"
    COIN_MINT = "coinbase"
    COIN_BURN = "burn"
    COIN_RECEIVED = "coin_received"
