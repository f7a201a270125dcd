"""Bech32 encoding and account address parsing."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

ACCOUNT_ADDRESS_PREFIX = "dym"
MAX_ADDRESS_LENGTH = 255

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_MAX_BECH32_LENGTH = 1023
_CHECKSUM_LENGTH = 6


def _polymod(values: Iterable[int]) -> int:
    checksum = 1
    for value in values:
        top = checksum >> 25
        checksum = ((checksum & 0x1FFFFFF) << 5) ^ value
        for bit, generator in enumerate(_GENERATOR):
            if (top >> bit) & 1:
                checksum ^= generator
    return checksum


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _create_checksum(hrp: str, data: Sequence[int]) -> list[int]:
    polymod = _polymod(_hrp_expand(hrp) + list(data) + [0] * _CHECKSUM_LENGTH) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(_CHECKSUM_LENGTH)]


def bech32_encode(hrp: str, data: Sequence[int]) -> str:
    """Encode 5-bit groups under a human-readable part."""
    if not hrp or any(not 33 <= ord(c) <= 126 for c in hrp):
        raise ValueError(f"invalid human-readable part: {hrp!r}")
    if any(not 0 <= d < 32 for d in data):
        raise ValueError("data values must be 5-bit groups")
    hrp = hrp.lower()
    combined = list(data) + _create_checksum(hrp, data)
    return hrp + "1" + "".join(_CHARSET[d] for d in combined)


def bech32_decode(address: str) -> tuple[str, list[int]]:
    """Decode a bech32 string into its human-readable part and 5-bit groups."""
    if len(address) > _MAX_BECH32_LENGTH:
        raise ValueError(f"decoding bech32 failed: string too long ({len(address)})")
    if any(not 33 <= ord(c) <= 126 for c in address):
        raise ValueError("decoding bech32 failed: invalid character in string")
    if address.lower() != address and address.upper() != address:
        raise ValueError("decoding bech32 failed: string not all lowercase or all uppercase")
    address = address.lower()
    separator = address.rfind("1")
    if separator < 1 or separator + _CHECKSUM_LENGTH + 1 > len(address):
        raise ValueError("decoding bech32 failed: invalid separator index")
    hrp, payload = address[:separator], address[separator + 1 :]
    try:
        data = [_CHARSET.index(c) for c in payload]
    except ValueError:
        raise ValueError("decoding bech32 failed: invalid character in data part") from None
    if _polymod(_hrp_expand(hrp) + data) != 1:
        raise ValueError("decoding bech32 failed: invalid checksum")
    return hrp, data[:-_CHECKSUM_LENGTH]


def convert_bits(
    data: Iterable[int], from_bits: int, to_bits: int, pad: bool = True
) -> list[int]:
    """Regroup a sequence of from_bits-wide values into to_bits-wide values."""
    accumulator = 0
    bits = 0
    result: list[int] = []
    max_value = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise ValueError(f"invalid data value: {value}")
        accumulator = (accumulator << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((accumulator >> bits) & max_value)
    if pad:
        if bits:
            result.append((accumulator << (to_bits - bits)) & max_value)
    elif bits >= from_bits or (accumulator << (to_bits - bits)) & max_value:
        raise ValueError("invalid padding in data")
    return result


def acc_address_from_bech32(address: str, prefix: str = ACCOUNT_ADDRESS_PREFIX) -> bytes:
    """Parse a bech32 account address and return its raw bytes."""
    if not address.strip():
        raise ValueError("empty address string is not allowed")
    hrp, data = bech32_decode(address)
    if hrp != prefix:
        raise ValueError(f"invalid Bech32 prefix; expected {prefix}, got {hrp}")
    raw = bytes(convert_bits(data, 5, 8, False))
    if not raw:
        raise ValueError("addresses cannot be empty")
    if len(raw) > MAX_ADDRESS_LENGTH:
        raise ValueError(f"address max length is {MAX_ADDRESS_LENGTH}, got {len(raw)}")
    return raw


def acc_address_to_bech32(raw: bytes, prefix: str = ACCOUNT_ADDRESS_PREFIX) -> str:
    """Format raw address bytes as a bech32 account address."""
    return bech32_encode(prefix, convert_bits(raw, 8, 5, True))