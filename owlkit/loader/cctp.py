"""Circle CCTP supported chains loaded from the t_cctp_support_chain table."""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

_QUERY = (
    "SELECT chainid, min_value, domain, token_messenger, message_transmitter "
    "FROM t_cctp_support_chain"
)

# USDC has six decimals.
USDC_UNIT = 1_000_000
MAINNET_DTC_UNIT = 10_000_000
DEFAULT_DTC_UNIT = 5_000_000
_ETHEREUM_CHAIN_ID = 1

_LEGACY_OCTAL_RE = re.compile(r"[+-]?0(?:_?[0-7])+")


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


def _parse_int(text: str) -> int | None:
    """Parse an integer with an optional base prefix; None if invalid."""
    if not text or not text.isascii() or text != text.strip():
        return None
    if _LEGACY_OCTAL_RE.fullmatch(text):
        return int(text.replace("_", ""), 8)
    try:
        return int(text, 0)
    except ValueError:
        return None


@dataclass
class CircleCctpChain:
    """A chain reachable through CCTP and its contract addresses."""

    chain_id: int
    min_value: str
    domain: int
    token_messenger: str
    message_transmitter: str

    def min_value_unit(self) -> int:
        """Return the minimum value in USDC base units."""
        value = _parse_int(self.min_value)
        if value is None:
            raise ValueError(f"invalid min value: {self.min_value!r}")
        return value * USDC_UNIT


class CircleCctpChainManager:
    """In-memory index of CCTP chains by chain id.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    """

    def __init__(self, db: Any, alerter: Any = None) -> None:
        self._db = db
        self._alerter = alerter
        self._lock = threading.Lock()
        self._by_chain_id: dict[int, CircleCctpChain] = {}

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def get_dtc_unit(self, src_chain_id: int, dst_chain_id: int) -> int:
        """Return the transfer cost in USDC base units; higher when Ethereum is involved."""
        if _ETHEREUM_CHAIN_ID in (src_chain_id, dst_chain_id):
            return MAINNET_DTC_UNIT
        return DEFAULT_DTC_UNIT

    def get_chain_by_chain_id(self, chain_id: int) -> CircleCctpChain | None:
        """Return the chain with this chain id, or None."""
        with self._lock:
            return self._by_chain_id.get(chain_id)

    def get_chain_ids(self) -> list[int]:
        """Return the chain ids of all loaded chains."""
        with self._lock:
            return list(self._by_chain_id)

    def load_all_chains(self) -> None:
        """Reload all chains; on a query failure the old data is kept."""
        try:
            cursor = self._db.cursor()
            cursor.execute(_QUERY)
        except Exception as exc:
            self._alert("select t_cctp_support_chain error", exc)
            return

        by_chain_id: dict[int, CircleCctpChain] = {}
        try:
            for row in cursor:
                try:
                    chain = CircleCctpChain(
                        chain_id=_as_int(row[0]),
                        min_value=_as_str(row[1]).strip(),
                        domain=_as_int(row[2]),
                        token_messenger=_as_str(row[3]).strip(),
                        message_transmitter=_as_str(row[4]).strip(),
                    )
                except (TypeError, ValueError, IndexError, UnicodeDecodeError) as exc:
                    self._alert("scan t_cctp_support_chain row error", exc)
                    continue
                if _parse_int(chain.min_value) is None:
                    self._alert(
                        "scan t_cctp_support_chain min value error ",
                        ValueError(f"id: {chain.chain_id}, min value: {chain.min_value}"),
                    )
                    continue
                by_chain_id[chain.chain_id] = chain
        except Exception as exc:
            self._alert("get next t_cctp_support_chain row error", exc)
            return
        finally:
            cursor.close()

        with self._lock:
            self._by_chain_id = by_chain_id
        _log.info("load all cctp chain: %d", len(by_chain_id))