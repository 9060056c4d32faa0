"""Channel commission ratios loaded from the t_channel_commission_ratio table."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

_QUERY = (
    "select channel_id, tx_count, commission_ratio from t_channel_commission_ratio "
    "order by tx_count asc"
)


def _as_int(value: Any) -> int:
    if value is None:
        raise TypeError("NULL value for integer column")
    return int(value)


@dataclass(frozen=True)
class ChannelCommissionRatio:
    """Commission ratio that applies below a transaction count."""

    tx_count: int
    ratio: int


class ChannelCommissionRatioManager:
    """Commission ratio tiers of each channel, ordered by transaction count.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    """

    def __init__(self, db: Any, alerter: Any = None) -> None:
        self._db = db
        self._alerter = alerter
        self._lock = threading.Lock()
        self._tiers: dict[int, list[ChannelCommissionRatio]] = {}

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def get_ratio(self, channel_id: int, tx_count: int) -> int | None:
        """Return the ratio of the first tier above tx_count, else the last tier's.

        None if the channel has no tiers.
        """
        with self._lock:
            tiers = self._tiers.get(channel_id)
            if not tiers:
                return None
            return next((t.ratio for t in tiers if tx_count < t.tx_count), tiers[-1].ratio)

    def load_all_commission_ratio(self) -> None:
        """Reload all tiers; on a query failure the old data is kept."""
        try:
            cursor = self._db.cursor()
            cursor.execute(_QUERY)
        except Exception as exc:
            self._alert("select t_channel_commission_ratio error", exc)
            return

        tiers: dict[int, list[ChannelCommissionRatio]] = {}
        counter = 0
        try:
            for row in cursor:
                try:
                    channel_id, tx_count, ratio = (_as_int(row[i]) for i in range(3))
                except (TypeError, ValueError, IndexError) as exc:
                    self._alert("scan t_channel_commission_ratio row error", exc)
                    continue
                tiers.setdefault(channel_id, []).append(ChannelCommissionRatio(tx_count, ratio))
                counter += 1
        except Exception as exc:
            self._alert("get next t_channel_commission_ratio row error", exc)
            return
        finally:
            cursor.close()

        for items in tiers.values():
            items.sort(key=lambda tier: tier.tx_count)

        with self._lock:
            self._tiers = tiers
        _log.info("load all channel commission ratio: %d", counter)