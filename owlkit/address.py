"""Checksummed address formatting for EVM and Starknet style addresses."""

from __future__ import annotations

import binascii
import string
from collections.abc import Iterator

from Crypto.Hash import keccak as _keccak

_STARKNET_MASK = (1 << 250) - 1


def keccak256(data: bytes) -> bytes:
    """Return the Keccak-256 digest of data."""
    return _keccak.new(digest_bits=256, data=data).digest()


def starknet_keccak(data: bytes) -> int:
    """Return Keccak-256 of data truncated to its low 250 bits."""
    return int.from_bytes(keccak256(data), "big") & _STARKNET_MASK


def _nibbles(digest: bytes) -> Iterator[int]:
    for byte in digest:
        yield byte >> 4
        yield byte & 0x0F


def _lenient_unhex(text: str) -> bytes:
    """Decode hex pairs up to the first invalid one."""
    out = bytearray()
    for high, low in zip(text[0::2], text[1::2]):
        if high not in string.hexdigits or low not in string.hexdigits:
            break
        out.append(int(high + low, 16))
    return bytes(out)


def get_checksum_address(address: str) -> str:
    """Return the checksummed form of a 20- or 32-byte hex address.

    Addresses without a 0x prefix are returned unchanged.
    """
    text = address.strip()
    if not text:
        raise ValueError("empty address")
    if not text.startswith(("0x", "0X")):
        return text
    if len(text) == 42:
        return get_checksum_address40(text)
    if len(text) == 66:
        return get_checksum_address64(text)
    raise ValueError(f"unsupported address length: {text}")


def get_checksum_address40(address: str) -> str:
    """Return the EIP-55 checksummed form of a 20-byte address."""
    text = address.strip()
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if len(text) % 2:
        text = "0" + text
    raw = _lenient_unhex(text)[-20:].rjust(20, b"\0")
    hex_digits = raw.hex()
    digest = keccak256(hex_digits.encode("ascii"))
    return "0x" + "".join(
        ch.upper() if ch > "9" and nibble > 7 else ch
        for ch, nibble in zip(hex_digits, _nibbles(digest))
    )


def get_checksum_address64(address: str) -> str:
    """Return the checksummed, zero-padded form of a 32-byte Starknet address."""
    text = address.strip().lower().removeprefix("0x").lstrip("0")
    if len(text) % 2:
        text = "0" + text
    if len(text) > 64:
        raise ValueError("address too long")
    padded = text.rjust(64, "0")
    try:
        raw = binascii.unhexlify(text)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid hex address: {address}") from exc
    hashed = starknet_keccak(raw).to_bytes(32, "big")
    return "0x" + "".join(
        ch.upper() if nibble >= 8 else ch
        for ch, nibble in zip(padded, _nibbles(hashed))
    )