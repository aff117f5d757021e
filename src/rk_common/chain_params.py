"""Immutable chain parameters, built once at startup and passed everywhere."""

import hashlib
from dataclasses import dataclass

from src.rk_common.bech32 import Bech32Error, decode_address, encode_address

BLOCKCHAIN = "Kava"
NODE_VERSION = "v0.26.0"
MIDDLEWARE_VERSION = "0.1.0"
ROSETTA_VERSION = "1.4.13"

FEE_COLLECTOR_MODULE = "fee_collector"


def module_address_hash(module_name: str) -> bytes:
    """Module account hash: first 20 bytes of SHA256(name)."""
    return hashlib.sha256(module_name.encode()).digest()[:20]


@dataclass(frozen=True)
class ChainParameters:
    network: str
    bech32_prefix: str = "kava"
    staking_denom: str = "ukava"
    fee_denom: str = "ukava"
    blockchain: str = BLOCKCHAIN

    @classmethod
    def from_settings(cls, settings: object) -> "ChainParameters":
        return cls(
            network=settings.NETWORK,  # type: ignore[attr-defined]
            bech32_prefix=settings.BECH32_PREFIX,  # type: ignore[attr-defined]
            staking_denom=settings.STAKING_DENOM,  # type: ignore[attr-defined]
            fee_denom=settings.FEE_DENOM,  # type: ignore[attr-defined]
        )

    @property
    def fee_collector_address(self) -> str:
        return encode_address(self.bech32_prefix, module_address_hash(FEE_COLLECTOR_MODULE))

    def is_valid_address(self, address: str | None) -> bool:
        if not address:
            return False
        try:
            decode_address(address, self.bech32_prefix)
        except Bech32Error:
            return False
        return True
