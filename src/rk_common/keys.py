"""secp256k1 public keys and account address derivation.

Account address = RIPEMD160(SHA256(compressed 33-byte public key)), rendered
in bech32 under the chain prefix.
"""

from cosmpy.crypto.hashfuncs import ripemd160, sha256
from ecdsa import SECP256k1, BadSignatureError, VerifyingKey
from ecdsa.util import sigdecode_string

from src.rk_common.bech32 import encode_address


class PublicKeyError(ValueError):
    pass


def compress_public_key(key_bytes: bytes) -> bytes:
    """Accept compressed (33), uncompressed (65) or raw (64) point bytes."""
    if not key_bytes:
        raise PublicKeyError("empty public key")
    try:
        vk = VerifyingKey.from_string(key_bytes, curve=SECP256k1)
    except Exception as exc:  # ecdsa raises several unrelated types on bad points
        raise PublicKeyError(f"invalid secp256k1 public key: {exc}") from exc
    return vk.to_string("compressed")


def account_hash(compressed_key: bytes) -> bytes:
    return ripemd160(sha256(compressed_key))


def address_from_public_key(key_bytes: bytes, prefix: str) -> str:
    return encode_address(prefix, account_hash(compress_public_key(key_bytes)))


def verify_signature(key_bytes: bytes, digest: bytes, signature: bytes) -> bool:
    """Verify a 64-byte r||s ECDSA signature over a 32-byte digest."""
    if len(signature) != 64 or len(digest) != 32:
        return False
    vk = VerifyingKey.from_string(compress_public_key(key_bytes), curve=SECP256k1)
    try:
        return vk.verify_digest(signature, digest, sigdecode=sigdecode_string)
    except BadSignatureError:
        return False
