"""Tests for bech32 addresses and secp256k1 key handling."""

import hashlib

import pytest
from cosmpy.crypto.hashfuncs import ripemd160
from ecdsa import SigningKey
from ecdsa.util import sigencode_string

from src.rk_common.bech32 import (
    Bech32Error,
    bech32_decode,
    decode_address,
    encode_address,
)
from src.rk_common.chain_params import ChainParameters, module_address_hash
from src.rk_common.keys import (
    PublicKeyError,
    account_hash,
    address_from_public_key,
    compress_public_key,
    verify_signature,
)


class TestBech32:
    def test_bip173_vectors(self) -> None:
        assert bech32_decode("A12UEL5L") == ("a", [])
        hrp, _ = bech32_decode("abcdef1qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxw")
        assert hrp == "abcdef"

    def test_address_round_trip(self) -> None:
        payload = bytes(range(20))
        address = encode_address("kava", payload)
        assert address.startswith("kava1")
        assert decode_address(address, "kava") == payload

    def test_wrong_prefix(self) -> None:
        address = encode_address("cosmos", bytes(20))
        with pytest.raises(Bech32Error):
            decode_address(address, "kava")

    def test_checksum_mismatch(self) -> None:
        address = encode_address("kava", bytes(20))
        flipped = address[:-1] + ("q" if address[-1] != "q" else "p")
        with pytest.raises(Bech32Error):
            decode_address(flipped, "kava")

    def test_mixed_case(self) -> None:
        address = encode_address("kava", bytes(20))
        with pytest.raises(Bech32Error):
            bech32_decode(address[:6] + address[6:].upper())


class TestChainParameters:
    def test_valid_address(self) -> None:
        params = ChainParameters(network="kava-test")
        assert params.is_valid_address(encode_address("kava", bytes(20)))

    def test_invalid_addresses(self) -> None:
        params = ChainParameters(network="kava-test")
        assert not params.is_valid_address(None)
        assert not params.is_valid_address("")
        assert not params.is_valid_address("kava1notanaddress")
        assert not params.is_valid_address(encode_address("cosmos", bytes(20)))

    def test_fee_collector_is_module_address(self) -> None:
        params = ChainParameters(network="kava-test")
        expected = encode_address("kava", module_address_hash("fee_collector"))
        assert params.fee_collector_address == expected


class TestPublicKeys:
    def test_compress_uncompressed_key(self, signing_key: SigningKey) -> None:
        vk = signing_key.get_verifying_key()
        assert compress_public_key(vk.to_string("uncompressed")) == vk.to_string("compressed")

    def test_compressed_key_unchanged(self, public_key_bytes: bytes) -> None:
        assert compress_public_key(public_key_bytes) == public_key_bytes

    def test_empty_key(self) -> None:
        with pytest.raises(PublicKeyError):
            compress_public_key(b"")

    def test_garbage_key(self) -> None:
        with pytest.raises(PublicKeyError):
            compress_public_key(b"\x02" + b"\xff" * 10)

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (b"", "9c1185a5c5e9fc54612808977ee8f548b2258d31"),
            (b"abc", "8eb208f7e05d987a9b044a8e98c6b087f15a0bfc"),
        ],
    )
    def test_ripemd160_vectors(self, data: bytes, expected: str) -> None:
        assert ripemd160(data).hex() == expected

    def test_address_is_ripemd_of_sha(self, public_key_bytes: bytes) -> None:
        digest = ripemd160(hashlib.sha256(public_key_bytes).digest())
        assert account_hash(public_key_bytes) == digest
        address = address_from_public_key(public_key_bytes, "kava")
        assert decode_address(address, "kava") == digest


class TestVerifySignature:
    def test_valid(self, signing_key: SigningKey, public_key_bytes: bytes) -> None:
        digest = hashlib.sha256(b"payload").digest()
        sig = signing_key.sign_digest_deterministic(
            digest, hashfunc=hashlib.sha256, sigencode=sigencode_string
        )
        assert verify_signature(public_key_bytes, digest, sig)

    def test_wrong_digest(self, signing_key: SigningKey, public_key_bytes: bytes) -> None:
        digest = hashlib.sha256(b"payload").digest()
        sig = signing_key.sign_digest_deterministic(
            digest, hashfunc=hashlib.sha256, sigencode=sigencode_string
        )
        assert not verify_signature(public_key_bytes, hashlib.sha256(b"other").digest(), sig)

    def test_wrong_length(self, public_key_bytes: bytes) -> None:
        assert not verify_signature(public_key_bytes, bytes(32), bytes(63))
