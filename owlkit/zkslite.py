"""Balance queries against a zkSync Lite node."""

from __future__ import annotations

import re
from typing import Any

from owlkit.common import is_hex_string_zero
from owlkit.http import request

USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDT_ADDRESS = "0xdAC17F958D2ee523a2206206994597C13D831ec7"

_TOKEN_SYMBOLS = {USDC_ADDRESS: "USDC", USDT_ADDRESS: "USDT"}
_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")


class ZksliteRpc:
    """Reads balances of ETH, USDC and USDT from a zkSync Lite JSON-RPC endpoint.

    chain_info is any object with an rpc_end_point attribute.
    """

    def __init__(self, chain_info: Any) -> None:
        self.chain_info = chain_info

    @property
    def client(self) -> Any:
        """The client attached to the chain, if any."""
        return getattr(self.chain_info, "client", None)

    def backend(self) -> int:
        """Return the backend number this RPC reports."""
        return 1

    def _url(self) -> str:
        base = self.chain_info.rpc_end_point
        return base + "jsrpc" if base.endswith("/") else base + "/jsrpc"

    def get_balance(self, owner_addr: str, token_addr: str) -> int:
        """Return the committed balance of a token; 0 if the node reports none.

        Raises NotImplementedError for tokens other than ETH, USDC and USDT.
        """
        owner = owner_addr.strip()
        token = token_addr.strip()

        if is_hex_string_zero(token):
            symbol = "ETH"
        elif token in _TOKEN_SYMBOLS:
            symbol = _TOKEN_SYMBOLS[token]
        else:
            raise NotImplementedError("not impl")

        payload = {"jsonrpc": "2.0", "id": 1, "method": "account_info", "params": [owner]}
        response = request(self._url(), payload)

        node: Any = response
        for key in ("result", "committed", "balances"):
            if not isinstance(node, dict):
                return 0
            node = node.get(key)
        if not isinstance(node, dict):
            return 0
        text = node.get(symbol)
        if isinstance(text, str) and _DECIMAL_RE.fullmatch(text):
            return int(text, 10)
        return 0

    def get_balance_at_block_number(self, owner_addr: str, token_addr: str, block_number: int) -> int:
        """Return the current balance; the node keeps no history."""
        return self.get_balance(owner_addr, token_addr)