"""Cached chain descriptions loaded from the t_chain_info table."""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

_log = logging.getLogger(__name__)

_QUERY = (
    "SELECT id, chainid, real_chainid, name, alias_name, backend, eip1559, "
    "network_code, icon, block_interval, rpc_end_point, explorer_url, official_rpc, "
    "disabled, is_testnet, order_weight, gas_token_name, gas_token_decimal, "
    "transfer_contract_address, deposit_contract_address, layer1 FROM t_chain_info"
)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MAX = (1 << 63) - 1
_INT64_MIN = -(1 << 63)


class Backend(IntEnum):
    """Kind of node software a chain runs."""

    ETHEREUM = 1
    STARKNET = 2
    SOLANA = 3
    BITCOIN = 4
    ZKSLITE = 5
    TON = 6
    COSMOS = 7
    NETWORK_TYPE_BFC = 8


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


def _as_opt_str(value: Any) -> str | None:
    return None if value is None else _as_str(value).strip()


def _as_backend(value: Any) -> Backend | int:
    number = _as_int(value)
    try:
        return Backend(number)
    except ValueError:
        return number


@dataclass
class ChainInfo:
    """A chain and how to reach it."""

    id: int = 0
    chain_id: str = ""
    real_chain_id: str = ""
    name: str = ""
    alias_name: str = ""
    backend: Backend | int = 0
    eip1559: int = 0
    network_code: int = 0
    icon: str = ""
    block_interval: int = 0
    rpc_end_point: str = ""
    explorer_url: str = ""
    official_rpc: str = ""
    disabled: int = 0
    is_testnet: int = 0
    order_weight: int = 0
    gas_token_name: str = ""
    gas_token_decimal: int = 0
    transfer_contract_address: str | None = None
    deposit_contract_address: str | None = None
    layer1: str | None = None
    client: Any = field(default=None, repr=False, compare=False)

    def int_chain_id(self) -> int:
        """Return chain_id as an integer; 0 if it is not a decimal number."""
        text = self.chain_id
        if not _INT_RE.fullmatch(text):
            return 0
        return max(_INT64_MIN, min(_INT64_MAX, int(text, 10)))


_CLIENT_ERRORS = {
    Backend.ETHEREUM: "create evm client error",
    Backend.STARKNET: "create starknet client error",
}


class ChainInfoManager:
    """In-memory index of chains by id, chain id, name and network code.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    client_factory, when given, is called with each loaded ChainInfo and its
    result is stored as the chain's client; a chain whose client cannot be
    created is left out.
    """

    def __init__(
        self,
        db: Any,
        alerter: Any = None,
        client_factory: Callable[[ChainInfo], Any] | None = None,
    ) -> None:
        self._db = db
        self._alerter = alerter
        self._client_factory = client_factory
        self._lock = threading.Lock()
        self._by_id: dict[int, ChainInfo] = {}
        self._by_chain_id: dict[str, ChainInfo] = {}
        self._by_name: dict[str, ChainInfo] = {}
        self._by_netcode: dict[int, ChainInfo] = {}
        self._all: list[ChainInfo] = []

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def get_chain_info_ids(self) -> list[int]:
        """Return the ids of all loaded chains."""
        with self._lock:
            return list(self._by_id)

    def get_chain_info_by_id(self, chain_info_id: int) -> ChainInfo | None:
        """Return the chain with this table id, or None."""
        with self._lock:
            return self._by_id.get(chain_info_id)

    def get_chain_info_by_int_chain_id(self, chain_id: int) -> ChainInfo | None:
        """Return the chain with this numeric chain id, or None."""
        return self.get_chain_info_by_chain_id(str(chain_id))

    def get_chain_info_by_chain_id(self, chain_id: str) -> ChainInfo | None:
        """Return the chain with this chain id, ignoring case and spaces, or None."""
        with self._lock:
            return self._by_chain_id.get(chain_id.strip().lower())

    def get_chain_info_by_name(self, name: str) -> ChainInfo | None:
        """Return the chain with this name, ignoring case and spaces, or None."""
        with self._lock:
            return self._by_name.get(name.strip().lower())

    def get_chain_info_by_netcode(self, netcode: int) -> ChainInfo | None:
        """Return the chain with this network code, or None."""
        with self._lock:
            return self._by_netcode.get(netcode)

    def get_all_chains(self) -> list[ChainInfo]:
        """Return all loaded chains in load order."""
        with self._lock:
            return list(self._all)

    def _parse(self, row: Any) -> ChainInfo:
        return ChainInfo(
            id=_as_int(row[0]),
            chain_id=_as_str(row[1]).strip(),
            real_chain_id=_as_str(row[2]).strip(),
            name=_as_str(row[3]).strip(),
            alias_name=_as_str(row[4]).strip(),
            backend=_as_backend(row[5]),
            eip1559=_as_int(row[6]),
            network_code=_as_int(row[7]),
            icon=_as_str(row[8]).strip(),
            block_interval=_as_int(row[9]),
            rpc_end_point=_as_str(row[10]).strip(),
            explorer_url=_as_str(row[11]).strip(),
            official_rpc=_as_str(row[12]).strip(),
            disabled=_as_int(row[13]),
            is_testnet=_as_int(row[14]),
            order_weight=_as_int(row[15]),
            gas_token_name=_as_str(row[16]).strip(),
            gas_token_decimal=_as_int(row[17]),
            transfer_contract_address=_as_opt_str(row[18]),
            deposit_contract_address=_as_opt_str(row[19]),
            layer1=_as_opt_str(row[20]),
        )

    def load_all_chains(self) -> None:
        """Reload all chains; on a query failure the old data is kept."""
        try:
            cursor = self._db.cursor()
            cursor.execute(_QUERY)
        except Exception as exc:
            self._alert("select t_chain_info error", exc)
            return

        by_id: dict[int, ChainInfo] = {}
        by_chain_id: dict[str, ChainInfo] = {}
        by_name: dict[str, ChainInfo] = {}
        by_netcode: dict[int, ChainInfo] = {}
        all_chains: list[ChainInfo] = []
        try:
            for row in cursor:
                try:
                    chain = self._parse(row)
                except (TypeError, ValueError, IndexError, UnicodeDecodeError) as exc:
                    self._alert("scan t_chain_info row error", exc)
                    continue
                if self._client_factory is not None:
                    try:
                        chain.client = self._client_factory(chain)
                    except Exception as exc:
                        self._alert(_CLIENT_ERRORS.get(chain.backend, "create client error"), exc)
                        continue
                by_id[chain.id] = chain
                by_chain_id[chain.chain_id.lower()] = chain
                by_name[chain.name.lower()] = chain
                by_netcode[chain.network_code] = chain
                all_chains.append(chain)
        except Exception as exc:
            self._alert("get next t_chain_info row error", exc)
            return
        finally:
            cursor.close()

        with self._lock:
            self._by_id = by_id
            self._by_chain_id = by_chain_id
            self._by_name = by_name
            self._by_netcode = by_netcode
            self._all = all_chains
        _log.info("load all chain info: %d", len(all_chains))