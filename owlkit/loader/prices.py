"""Cached token prices loaded from the t_update_price table."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

_QUERY = "SELECT token, price, update_timestamp FROM t_update_price"


def _as_str(value: Any) -> str:
    if value is None:
        raise TypeError("NULL value for string column")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


@dataclass
class UpdatePrice:
    """The latest price of a token and when it was recorded."""

    token_name: str
    price: str
    update_timestamp: str


class UpdatePriceManager:
    """In-memory index of token prices by token name.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    """

    def __init__(self, db: Any, alerter: Any = None) -> None:
        self._db = db
        self._alerter = alerter
        self._lock = threading.Lock()
        self._tokens: dict[str, UpdatePrice] = {}

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def get_update_price(self, token_name: str) -> UpdatePrice | None:
        """Return the price of a token, ignoring case and spaces, or None."""
        with self._lock:
            return self._tokens.get(token_name.strip().lower())

    def load_all_prices(self) -> None:
        """Reload all prices; on a query failure the old data is kept."""
        try:
            cursor = self._db.cursor()
            cursor.execute(_QUERY)
        except Exception as exc:
            self._alert("select t_update error", exc)
            return

        tokens: dict[str, UpdatePrice] = {}
        counter = 0
        try:
            for row in cursor:
                try:
                    price = UpdatePrice(
                        token_name=_as_str(row[0]).strip(),
                        price=_as_str(row[1]).strip(),
                        update_timestamp=_as_str(row[2]).strip(),
                    )
                except (TypeError, ValueError, IndexError, UnicodeDecodeError) as exc:
                    self._alert("scan t_update_price row error", exc)
                    continue
                tokens[price.token_name.lower()] = price
                counter += 1
        except Exception as exc:
            self._alert("get next t_update_price row error", exc)
            return
        finally:
            cursor.close()

        with self._lock:
            self._tokens = tokens
        _log.info("load all update price: %d", counter)