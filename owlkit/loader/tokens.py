"""Cached token descriptions loaded from the t_token_info table."""

from __future__ import annotations

import dataclasses
import logging
import threading
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

_QUERY = "SELECT token_name, chain_name, token_address, decimals FROM t_token_info"

NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"


def _as_int(value: Any) -> int:
    if value is None:
        raise TypeError("NULL value for integer column")
    return int(value)


def _as_str(value: Any) -> str:
    if value is None:
        raise TypeError("NULL value for string column")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


@dataclass
class TokenInfo:
    """A token on one chain."""

    token_name: str
    chain_name: str
    token_address: str
    decimals: int
    full_name: str = ""
    total_supply: int | None = None
    icon: str = ""
    url: str = ""


class TokenInfoManager:
    """In-memory index of tokens by chain name and token address or name.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    """

    def __init__(self, db: Any = None, alerter: Any = None) -> None:
        self._db = db
        self._alerter = alerter
        self._lock = threading.Lock()
        self._by_addr: dict[str, dict[str, TokenInfo]] = {}
        self._by_name: dict[str, dict[str, TokenInfo]] = {}
        self._all: list[TokenInfo] = []

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def _index(self, token: TokenInfo) -> None:
        chain = token.chain_name.lower()
        self._by_addr.setdefault(chain, {})[token.token_address.lower()] = token
        self._by_name.setdefault(chain, {})[token.token_name.lower()] = token

    def get_by_chain_name_token_addr(self, chain_name: str, token_addr: str) -> TokenInfo | None:
        """Return the token at this address on this chain, or None."""
        with self._lock:
            return self._by_addr.get(chain_name.strip().lower(), {}).get(token_addr.strip().lower())

    def get_by_chain_name_token_name(self, chain_name: str, token_name: str) -> TokenInfo | None:
        """Return the token with this name on this chain, or None."""
        with self._lock:
            return self._by_name.get(chain_name.strip().lower(), {}).get(token_name.strip().lower())

    def add_token_info(self, token: TokenInfo) -> None:
        """Index a copy of token by its chain, address and name."""
        with self._lock:
            self._index(dataclasses.replace(token))

    def add_token(self, chain_name: str, token_name: str, token_addr: str, decimals: int) -> None:
        """Index a token built from its parts, with surrounding spaces removed."""
        token = TokenInfo(
            token_name=token_name.strip(),
            chain_name=chain_name.strip(),
            token_address=token_addr.strip(),
            decimals=decimals,
        )
        with self._lock:
            self._index(token)

    def get_token_addresses(self, chain_name: str) -> list[str]:
        """Return the addresses of all tokens known on a chain."""
        with self._lock:
            tokens = self._by_addr.get(chain_name.strip().lower(), {})
            return [token.token_address for token in tokens.values()]

    def get_all_tokens(self) -> list[TokenInfo]:
        """Return the loaded and merged native tokens."""
        with self._lock:
            return list(self._all)

    def merge_native_tokens(self, chain_manager: Any) -> None:
        """Add each chain's gas token unless a token of that name is already there."""
        chains = [
            chain
            for chain in map(chain_manager.get_chain_info_by_id, chain_manager.get_chain_info_ids())
            if chain is not None
        ]
        with self._lock:
            for chain in chains:
                token = TokenInfo(
                    token_name=chain.gas_token_name,
                    chain_name=chain.name,
                    token_address=NATIVE_TOKEN_ADDRESS,
                    decimals=chain.gas_token_decimal,
                )
                key = token.chain_name.lower()
                names = self._by_name.setdefault(key, {})
                addrs = self._by_addr.setdefault(key, {})
                if token.token_name.lower() not in names:
                    names[token.token_name.lower()] = token
                    addrs[token.token_address.lower()] = token
                    self._all.append(token)

    def load_all_tokens(self) -> None:
        """Reload all tokens; on a query failure the old data is kept."""
        try:
            cursor = self._db.cursor()
            cursor.execute(_QUERY)
        except Exception as exc:
            self._alert("select t_token_info error", exc)
            return

        by_addr: dict[str, dict[str, TokenInfo]] = {}
        by_name: dict[str, dict[str, TokenInfo]] = {}
        all_tokens: list[TokenInfo] = []
        try:
            for row in cursor:
                try:
                    token = TokenInfo(
                        token_name=_as_str(row[0]).strip(),
                        chain_name=_as_str(row[1]).strip(),
                        token_address=_as_str(row[2]).strip(),
                        decimals=_as_int(row[3]),
                    )
                except (TypeError, ValueError, IndexError, UnicodeDecodeError) as exc:
                    self._alert("scan t_token_info row error", exc)
                    continue
                chain = token.chain_name.lower()
                by_addr.setdefault(chain, {})[token.token_address.lower()] = token
                by_name.setdefault(chain, {})[token.token_name.lower()] = token
                all_tokens.append(token)
        except Exception as exc:
            self._alert("get next t_token_info row error", exc)
            return
        finally:
            cursor.close()

        with self._lock:
            self._by_addr = by_addr
            self._by_name = by_name
            self._all = all_tokens
        _log.info("load all token info: %d", len(all_tokens))