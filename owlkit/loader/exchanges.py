"""Cached exchange descriptions loaded from the t_exchange_info table."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

_QUERY = "SELECT id, name, icon, disabled, official_url, order_weight FROM t_exchange_info"


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
class ExchangeInfo:
    """An exchange and how it is shown."""

    id: int
    name: str
    icon: str
    disabled: int
    official_url: str
    order_weight: int


class ExchangeInfoManager:
    """In-memory index of exchanges by id and name.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    """

    def __init__(self, db: Any, alerter: Any = None) -> None:
        self._db = db
        self._alerter = alerter
        self._lock = threading.Lock()
        self._by_id: dict[int, ExchangeInfo] = {}
        self._by_name: dict[str, ExchangeInfo] = {}
        self._all: list[ExchangeInfo] = []

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def get_all_exchanges(self) -> list[ExchangeInfo]:
        """Return a copy of the list of exchanges in load order."""
        with self._lock:
            return list(self._all)

    def get_exchange_info_by_id(self, exchange_id: int) -> ExchangeInfo | None:
        """Return the exchange with this id, or None."""
        with self._lock:
            return self._by_id.get(exchange_id)

    def get_exchange_info_by_name(self, name: str) -> ExchangeInfo | None:
        """Return the exchange with this name, ignoring case and spaces, or None."""
        with self._lock:
            return self._by_name.get(name.strip().lower())

    def load_all_exchanges(self) -> None:
        """Reload all exchanges; on a query failure the old data is kept."""
        try:
            cursor = self._db.cursor()
            cursor.execute(_QUERY)
        except Exception as exc:
            self._alert("select t_exchange_info error", exc)
            return

        by_id: dict[int, ExchangeInfo] = {}
        by_name: dict[str, ExchangeInfo] = {}
        all_exchanges: list[ExchangeInfo] = []
        try:
            for row in cursor:
                try:
                    xchg = ExchangeInfo(
                        id=_as_int(row[0]),
                        name=_as_str(row[1]).strip(),
                        icon=_as_str(row[2]),
                        disabled=_as_int(row[3]),
                        official_url=_as_str(row[4]),
                        order_weight=_as_int(row[5]),
                    )
                except (TypeError, ValueError, IndexError, UnicodeDecodeError) as exc:
                    self._alert("scan t_exchange_info row error", exc)
                    continue
                by_id[xchg.id] = xchg
                by_name[xchg.name.lower()] = xchg
                all_exchanges.append(xchg)
        except Exception as exc:
            self._alert("get next t_exchange_info row error", exc)
            return
        finally:
            cursor.close()

        with self._lock:
            self._by_id = by_id
            self._by_name = by_name
            self._all = all_exchanges
        _log.info("load all exchanges : %d", len(all_exchanges))