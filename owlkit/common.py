"""Amount conversions and small helpers for hex strings and EVM addresses."""

from __future__ import annotations

import math
import re
import string
from decimal import Decimal
from fractions import Fraction
from typing import Any

# Working precision, in bits, of the binary floating-point arithmetic used
# when scaling human-readable amounts into integer base units.
_PRECISION = 236

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_LEGACY_OCTAL_RE = re.compile(r"[+-]?0[0-7]+")

_EXCLUDED_EVM_CHAIN_IDS = frozenset({666666666, 83797601})


def _round(value: Fraction) -> Fraction:
    """Round to the nearest value with a _PRECISION-bit mantissa, ties to even."""
    if value == 0:
        return value
    magnitude = abs(value)
    exponent = (
        magnitude.numerator.bit_length()
        - magnitude.denominator.bit_length()
        - _PRECISION
    )
    scaled = magnitude / Fraction(2) ** exponent
    while scaled >= 2**_PRECISION:
        exponent += 1
        scaled /= 2
    while scaled < 2 ** (_PRECISION - 1):
        exponent -= 1
        scaled *= 2
    rounded = Fraction(round(scaled)) * Fraction(2) ** exponent
    return rounded if value > 0 else -rounded


def _scale(decimals: int) -> Fraction:
    """Return 10**decimals as a rounded binary value; non-positive gives 1."""
    return _round(Fraction(10**decimals if decimals > 0 else 1))


def _scaled_to_int(value: Fraction, decimals: int) -> int:
    product = _round(_round(value) * _scale(decimals))
    return int(product)


def is_hex_string_zero(hex_string: str) -> bool:
    """Return True if the hex string, without an optional 0x prefix, is all zeros."""
    text = hex_string.strip()
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    return all(ch == "0" for ch in text)


def get_json_big_int(value: Any) -> int:
    """Turn a decoded JSON number or numeric string into an int; 0 if not possible."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text.isascii():
            return 0
        if _LEGACY_OCTAL_RE.fullmatch(text):
            return int(text, 8)
        try:
            return int(text, 0)
        except ValueError:
            return 0
    return 0


def from_ui_string(amount: str, decimals: int) -> int:
    """Convert a decimal amount string into integer base units, truncating."""
    if not _DECIMAL_RE.fullmatch(amount):
        raise ValueError(f"invalid amount: {amount!r}")
    return _scaled_to_int(Fraction(amount), decimals)


def from_ui_float(amount: float, decimals: int) -> int:
    """Convert a float amount into integer base units, truncating."""
    if not math.isfinite(amount):
        raise ValueError(f"invalid amount: {amount!r}")
    return _scaled_to_int(Fraction(amount), decimals)


def string_to_ui(amount_str: str, decimals: int) -> Decimal:
    """Convert a base-unit integer string into a human-readable Decimal."""
    if not _INTEGER_RE.fullmatch(amount_str):
        raise ValueError(f"invalid amount string: {amount_str}")
    return big_int_to_ui(int(amount_str), decimals)


def big_int_to_ui(amount: int, decimals: int) -> Decimal:
    """Convert a base-unit integer into a human-readable Decimal."""
    if decimals <= 0:
        return Decimal(amount)
    return Decimal(f"{amount}e-{decimals}")


def is_hex_address(address: str) -> bool:
    """Return True if the string is 40 hex digits, with an optional 0x prefix."""
    text = address[2:] if address[:2] in ("0x", "0X") else address
    return len(text) == 40 and all(ch in string.hexdigits for ch in text)


def is_evm_address(address: str, chain_id: int) -> bool:
    """Return True for a hex address on a chain that uses EVM addresses."""
    return is_hex_address(address) and chain_id not in _EXCLUDED_EVM_CHAIN_IDS


def mask_evm_address(address: str) -> str:
    """Hide the middle of an address, keeping its first 6 and last 4 characters."""
    if len(address) < 12:
        return address
    return address[:6] + "****" + address[-4:]