"""Bech32 (BIP-0173) primitives for Cosmos account addresses.

Cosmos addresses are classic Bech32 (checksum constant 1) over the raw
20-byte account hash, converted 8 -> 5 bits without a version byte, under
the chain's human readable prefix ("kava1...").

Usage
-----
    addr = encode_address("kava", account_hash)
    account_hash = decode_address(addr, "kava")
"""

from collections.abc import Sequence

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
CHARSET_REV = {c: i for i, c in enumerate(CHARSET)}

_BECH32_CONST = 1
_MAX_LENGTH = 90


class Bech32Error(ValueError):
    pass


def _polymod(values: Sequence[int]) -> int:
    generators = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
    chk = 1
    for v in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ v
        for i in range(5):
            if (top >> i) & 1:
                chk ^= generators[i]
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def _create_checksum(hrp: str, data: Sequence[int]) -> list[int]:
    polymod = _polymod(_hrp_expand(hrp) + list(data) + [0] * 6) ^ _BECH32_CONST
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def bech32_encode(hrp: str, data: Sequence[int]) -> str:
    if not hrp or any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise Bech32Error("invalid HRP characters")
    if any(d < 0 or d > 31 for d in data):
        raise Bech32Error("data values must be 5-bit (0..31)")
    hrp = hrp.lower()
    combined = list(data) + _create_checksum(hrp, data)
    return hrp + "1" + "".join(CHARSET[d] for d in combined)


def bech32_decode(bech: str) -> tuple[str, list[int]]:
    """Decode into (hrp, 5-bit data). Raises Bech32Error on any defect."""
    if not bech or len(bech) < 8 or len(bech) > _MAX_LENGTH:
        raise Bech32Error("invalid bech32 length")
    if any(ord(c) < 33 or ord(c) > 126 for c in bech):
        raise Bech32Error("invalid characters")
    if bech.lower() != bech and bech.upper() != bech:
        raise Bech32Error("mixed-case bech32 is invalid")
    bech = bech.lower()

    pos = bech.rfind("1")
    if pos < 1 or pos + 7 > len(bech):
        raise Bech32Error("invalid position of separator '1'")

    hrp = bech[:pos]
    try:
        data = [CHARSET_REV[c] for c in bech[pos + 1:]]
    except KeyError:
        raise Bech32Error("invalid data character") from None

    if _polymod(_hrp_expand(hrp) + data) != _BECH32_CONST:
        raise Bech32Error("checksum mismatch")
    return hrp, data[:-6]


def convertbits(data: Sequence[int], frombits: int, tobits: int, pad: bool) -> list[int]:
    """General power-of-two base conversion (BIP-0173 reference)."""
    acc = 0
    bits = 0
    ret: list[int] = []
    maxv = (1 << tobits) - 1
    max_acc = (1 << (frombits + tobits - 1)) - 1
    for value in data:
        if value < 0 or (value >> frombits):
            raise Bech32Error("invalid value for base conversion")
        acc = ((acc << frombits) | value) & max_acc
        bits += frombits
        while bits >= tobits:
            bits -= tobits
            ret.append((acc >> bits) & maxv)
    if pad:
        if bits:
            ret.append((acc << (tobits - bits)) & maxv)
    elif bits >= frombits or ((acc << (tobits - bits)) & maxv):
        raise Bech32Error("invalid padding")
    return ret


def encode_address(hrp: str, payload: bytes) -> str:
    return bech32_encode(hrp, convertbits(payload, 8, 5, True))


def decode_address(address: str, expected_hrp: str) -> bytes:
    """Decode an account address, enforcing the expected prefix."""
    hrp, data = bech32_decode(address)
    if hrp != expected_hrp:
        raise Bech32Error(f"invalid prefix {hrp!r}, expected {expected_hrp!r}")
    payload = bytes(convertbits(data, 5, 8, False))
    if not 1 <= len(payload) <= 255:
        raise Bech32Error("invalid address length")
    return payload
