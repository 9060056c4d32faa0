"""Cached popularity weights loaded from the t_popular_list table."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

_log = logging.getLogger(__name__)

_QUERY = "SELECT chain_name, popular_weight, tag FROM t_popular_list"


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
class PopularList:
    """Popularity weight of each tag on one chain."""

    chain_name: str
    popular_weight: dict[str, int] = field(default_factory=dict)


class PopularListManager:
    """In-memory index of popularity weights by chain name.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    """

    def __init__(self, db: Any, alerter: Any = None) -> None:
        self._db = db
        self._alerter = alerter
        self._lock = threading.Lock()
        self._by_chain: dict[str, PopularList] = {}

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def get_popular_weight(self, chain: str) -> dict[str, int] | None:
        """Return a copy of the tag weights of a chain, or None if it has none."""
        with self._lock:
            popular = self._by_chain.get(chain.strip().lower())
            return dict(popular.popular_weight) if popular is not None else None

    def load_all_popular_list(self) -> None:
        """Reload all weights; on a query failure the old data is kept."""
        try:
            cursor = self._db.cursor()
            cursor.execute(_QUERY)
        except Exception as exc:
            self._alert("select t_popular_list error", exc)
            return

        by_chain: dict[str, PopularList] = {}
        counter = 0
        try:
            for row in cursor:
                try:
                    chain_name = _as_str(row[0]).strip().lower()
                    weight = _as_int(row[1])
                    tag = _as_str(row[2]).strip()
                except (TypeError, ValueError, IndexError, UnicodeDecodeError) as exc:
                    self._alert("scan t_popular_list row error", exc)
                    continue
                popular = by_chain.setdefault(chain_name, PopularList(chain_name))
                popular.popular_weight[tag] = weight
                counter += 1
        except Exception as exc:
            self._alert("get next t_popular_list row error", exc)
            return
        finally:
            cursor.close()

        with self._lock:
            self._by_chain = by_chain
        _log.info("load all popular list: %d", counter)