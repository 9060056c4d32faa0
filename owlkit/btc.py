"""Transaction bodies for Bitcoin payments and BRC-20 transfers."""

from __future__ import annotations

import json
from typing import Any

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _to_json(value: Any) -> str:
    """Compact JSON with sorted keys and HTML-sensitive characters escaped."""
    text = json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def _int64(value: int) -> int:
    """Keep the low 64 bits of value as a signed integer."""
    value &= 0xFFFF_FFFF_FFFF_FFFF
    return value - (1 << 64) if value >= 1 << 63 else value


def _wrap(tx_type: str, data: dict[str, Any]) -> bytes:
    return _to_json({"tx_type": tx_type, "data": _to_json(data)}).encode("utf-8")


def brc20_transfer_body(receiver_addr: str, token_name: str, amount: int) -> bytes:
    """Return the JSON body of a BRC-20 transfer."""
    data = {
        "method": "transfer",
        "token": token_name,
        "amount": _int64(amount),
        "receiver": receiver_addr.strip(),
    }
    return _wrap("BRC20", data)


def transfer_body(receiver_addr: str, amount: int) -> bytes:
    """Return the JSON body of a plain payment."""
    data = {"amount": _int64(amount), "receiver": receiver_addr.strip()}
    return _wrap("Pay", data)