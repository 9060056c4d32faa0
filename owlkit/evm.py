"""Building EVM transaction bodies and estimating their gas."""

from __future__ import annotations

import json
import re

from owlkit.address import get_checksum_address40
from owlkit.http import request

_HEX_PAIRS_RE = re.compile(r"(?:[0-9a-fA-F]{2})*")
_ADDRESS_LENGTH = 20


def _address_bytes(text: str) -> bytes:
    """Decode an address leniently: the last 20 bytes of its valid hex prefix, left-padded."""
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if len(text) % 2:
        text = "0" + text
    raw = bytes.fromhex(_HEX_PAIRS_RE.match(text).group(0))
    return raw[-_ADDRESS_LENGTH:].rjust(_ADDRESS_LENGTH, b"\0")


def _lower_address(text: str) -> str:
    return "0x" + _address_bytes(text).hex()


def _hex_quantity(value: int) -> str:
    return f"-0x{-value:x}" if value < 0 else f"0x{value:x}"


def to_body(to: str, value: int | None, input_data: bytes | None, gas: int) -> bytes:
    """Return the JSON body of a transaction to an address with value, input and gas."""
    body = {
        "to": get_checksum_address40(_lower_address(to.strip())),
        "gas": f"0x{gas:x}",
        "value": f"0x{(value or 0):x}",
    }
    if input_data is not None:
        body["input"] = "0x" + bytes(input_data).hex()
    return json.dumps(body, sort_keys=True, separators=(",", ":")).encode()


def estimate_gas(
    rpc_url: str, from_addr: str, to_addr: str, value: int | None, data: bytes | None
) -> int:
    """Return the node's gas estimate for a call, raised by half as a margin."""
    call: dict[str, str] = {
        "from": _lower_address(from_addr.strip()),
        "to": _lower_address(to_addr.strip()),
    }
    if data:
        call["input"] = "0x" + bytes(data).hex()
    call["value"] = _hex_quantity(value or 0)

    payload = {"jsonrpc": "2.0", "id": 1, "method": "eth_estimateGas", "params": [call]}
    response = request(rpc_url, payload)
    if not isinstance(response, dict):
        raise RuntimeError("invalid eth_estimateGas response")
    if response.get("error"):
        error = response["error"]
        message = error.get("message", error) if isinstance(error, dict) else error
        raise RuntimeError(f"eth_estimateGas failed: {message}")
    result = response.get("result")
    if not isinstance(result, str) or not result[:2] in ("0x", "0X"):
        raise RuntimeError(f"invalid eth_estimateGas result: {result!r}")
    gas = int(result, 16)
    return gas * 3 // 2


def transfer_body(rpc_url: str, sender_addr: str, receiver_addr: str, amount: int) -> bytes:
    """Return the JSON body of a native transfer with estimated gas."""
    sender = sender_addr.strip()
    receiver = receiver_addr.strip()
    gas = estimate_gas(rpc_url, sender, receiver, amount, None)
    return to_body(receiver, amount, None, gas)