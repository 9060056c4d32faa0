"""Cached accounts loaded from the t_account table."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

_QUERY = "SELECT id, chain_id, address FROM t_account"


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


def _normalize(text: str) -> str:
    return text.strip().lower()


@dataclass
class Account:
    """An account address on one chain."""

    id: int
    chain_info_id: int
    address: str


class AccountManager:
    """In-memory index of accounts by id, address and chain.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    """

    def __init__(self, db: Any, alerter: Any = None) -> None:
        self._db = db
        self._alerter = alerter
        self._lock = threading.Lock()
        self._by_id: dict[int, Account] = {}
        self._by_address_cid: dict[str, dict[int, Account]] = {}
        self._by_cid_address: dict[int, dict[str, Account]] = {}

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def get_account_by_id(self, account_id: int) -> Account | None:
        """Return the account with this id, or None."""
        with self._lock:
            return self._by_id.get(account_id)

    def has_address(self, address: str) -> bool:
        """Return True if any chain has an account with this address."""
        with self._lock:
            return _normalize(address) in self._by_address_cid

    def get_addresses(self, cid: int) -> list[str]:
        """Return the addresses of all accounts on a chain."""
        with self._lock:
            accounts = self._by_cid_address.get(cid, {})
            return [acc.address for acc in accounts.values()]

    def get_account_by_address_cid(self, address: str, cid: int) -> Account | None:
        """Return the account with this address on this chain, or None."""
        with self._lock:
            return self._by_address_cid.get(_normalize(address), {}).get(cid)

    def load_all_accounts(self) -> None:
        """Reload all accounts; on a query failure the old data is kept."""
        try:
            cursor = self._db.cursor()
            cursor.execute(_QUERY)
        except Exception as exc:
            self._alert("select t_account error", exc)
            return

        by_id: dict[int, Account] = {}
        by_address_cid: dict[str, dict[int, Account]] = {}
        by_cid_address: dict[int, dict[str, Account]] = {}
        counter = 0
        try:
            for row in cursor:
                try:
                    acc = Account(_as_int(row[0]), _as_int(row[1]), _as_str(row[2]).strip())
                except (TypeError, ValueError, IndexError, UnicodeDecodeError) as exc:
                    self._alert("scan t_account row error", exc)
                    continue
                lower = acc.address.lower()
                by_id[acc.id] = acc
                by_address_cid.setdefault(lower, {})[acc.chain_info_id] = acc
                by_cid_address.setdefault(acc.chain_info_id, {})[lower] = acc
                counter += 1
        except Exception as exc:
            self._alert("get next t_account row error", exc)
            return
        finally:
            cursor.close()

        with self._lock:
            self._by_id = by_id
            self._by_address_cid = by_address_cid
            self._by_cid_address = by_cid_address
        _log.info("load all account: %d", counter)