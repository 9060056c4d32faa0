"""Dynamic bridge fees loaded from the t_dynamic_bridge_fee table."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

from owlkit.common import from_ui_string as _units_from_string

_log = logging.getLogger(__name__)

_FEE_QUERY = (
    "SELECT token_name, from_chain, to_chain, bridge_fee_ratio_lv1, bridge_fee_ratio_lv2, "
    "bridge_fee_ratio_lv3, bridge_fee_ratio_lv4, amount_lv1, amount_lv2, amount_lv3, "
    "amount_lv4 FROM t_dynamic_bridge_fee"
)
_DECIMAL_QUERY = "SELECT token, keep_decimal FROM t_bridge_fee_decimal"

# Fee ratios are expressed in units of 1e-8 of the amount.
RATIO_DENOMINATOR = 100_000_000

_ROW_ERRORS = (TypeError, ValueError, IndexError, UnicodeDecodeError)


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


def _parse_float(text: str) -> float:
    if "_" in text or text != text.strip() or not text:
        raise ValueError(f"invalid float: {text!r}")
    return float(text)


def _key(text: str) -> str:
    return text.strip().lower()


@dataclass
class BridgeFee:
    """Fee ratios of a token route, by amount level."""

    token_name: str = ""
    from_chain_name: str = ""
    to_chain_name: str = ""
    bridge_fee_ratio_lv1: int = 0
    bridge_fee_ratio_lv2: int = 0
    bridge_fee_ratio_lv3: int = 0
    bridge_fee_ratio_lv4: int = 0
    amount_lv1: float = 0.0
    amount_lv2: float = 0.0
    amount_lv3: float = 0.0
    amount_lv4: float = 0.0
    keep_decimal: int = 0
    amount_lv1_str: str = ""
    amount_lv2_str: str = ""
    amount_lv3_str: str = ""
    amount_lv4_str: str = ""


class BridgeFeeManager:
    """In-memory index of bridge fees by token, source and destination chain.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    """

    def __init__(self, db: Any = None, alerter: Any = None) -> None:
        self._db = db
        self._alerter = alerter
        self._lock = threading.Lock()
        self._fees: dict[str, dict[str, dict[str, BridgeFee]]] = {}

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def get_bridge_fee(self, token: str, from_chain: str, to_chain: str) -> BridgeFee | None:
        """Return the fee of a route, ignoring case and spaces, or None."""
        with self._lock:
            return (
                self._fees.get(_key(token), {})
                .get(_key(from_chain), {})
                .get(_key(to_chain))
            )

    def _load_keep_decimals(self) -> dict[str, int]:
        decimals: dict[str, int] = {}
        try:
            cursor = self._db.cursor()
            cursor.execute(_DECIMAL_QUERY)
        except Exception as exc:
            self._alert("select t_bridge_fee_decimal error", exc)
            return decimals
        try:
            for row in cursor:
                try:
                    token = _as_str(row[0]).strip()
                    keep = _as_int(row[1])
                except _ROW_ERRORS as exc:
                    self._alert("scan t_bridge_fee_decimal row error", exc)
                    continue
                decimals[token.lower()] = keep
        finally:
            cursor.close()
        return decimals

    def _parse_row(self, row: Any) -> BridgeFee:
        return BridgeFee(
            token_name=_as_str(row[0]).strip(),
            from_chain_name=_as_str(row[1]).strip(),
            to_chain_name=_as_str(row[2]).strip(),
            bridge_fee_ratio_lv1=_as_int(row[3]),
            bridge_fee_ratio_lv2=_as_int(row[4]),
            bridge_fee_ratio_lv3=_as_int(row[5]),
            bridge_fee_ratio_lv4=_as_int(row[6]),
            amount_lv1_str=_as_str(row[7]),
            amount_lv2_str=_as_str(row[8]),
            amount_lv3_str=_as_str(row[9]),
            amount_lv4_str=_as_str(row[10]),
        )

    def load_all_bridge_fee(self, token_info_mgr: Any) -> None:
        """Reload all fees; on a query failure the old data is kept.

        token_info_mgr supplies token decimals for tokens that have no
        entry in t_bridge_fee_decimal.
        """
        try:
            cursor = self._db.cursor()
            cursor.execute(_FEE_QUERY)
        except Exception as exc:
            self._alert("select t_dynamic_bridge_fee error", exc)
            return

        keep_decimals = self._load_keep_decimals()
        fees: dict[str, dict[str, dict[str, BridgeFee]]] = {}
        counter = 0
        try:
            for row in cursor:
                try:
                    fee = self._parse_row(row)
                except _ROW_ERRORS as exc:
                    self._alert("scan t_dynamic_bridge_fee row error", exc)
                    continue

                try:
                    amounts = []
                    for level, text in enumerate(
                        (fee.amount_lv1_str, fee.amount_lv2_str, fee.amount_lv3_str, fee.amount_lv4_str),
                        start=1,
                    ):
                        try:
                            amounts.append(_parse_float(text))
                        except ValueError as exc:
                            self._alert(f"t_dynamic_bridge_fee amount{level} not float", exc)
                            raise
                except ValueError:
                    continue
                fee.amount_lv1, fee.amount_lv2, fee.amount_lv3, fee.amount_lv4 = amounts

                token_key = fee.token_name.lower()
                token_info = token_info_mgr.get_by_chain_name_token_name(
                    fee.from_chain_name.lower(), token_key
                )
                if token_key in keep_decimals:
                    fee.keep_decimal = keep_decimals[token_key]
                elif token_info is not None:
                    fee.keep_decimal = token_info.decimals
                else:
                    self._alert(
                        "t_dynamic_bridge_fee keep decimal not found: token "
                        f"{fee.token_name} chain {fee.from_chain_name}",
                        None,
                    )
                    continue

                fees.setdefault(token_key, {}).setdefault(fee.from_chain_name.lower(), {})[
                    fee.to_chain_name.lower()
                ] = fee
                counter += 1
        except Exception as exc:
            self._alert("get next t_dynamic_bridge_fee row error", exc)
            return
        finally:
            cursor.close()

        with self._lock:
            self._fees = fees
        _log.info("load all bridge fee: %d", counter)

    def from_ui_string(self, amount: int, bridge_fee: int, decimal: int, keep_decimal: int) -> int:
        """Return amount minus its fee, the fee rounded down to keep_decimal places."""
        value = amount
        if bridge_fee > 0:
            fee_amount = value * bridge_fee // RATIO_DENOMINATOR
            exponent = decimal - keep_decimal
            scale = 10**exponent if exponent > 0 else 1
            fee_amount -= fee_amount % scale
            value -= fee_amount
        return value

    def get_bridge_fee_detail(
        self, token_name: str, from_chain_name: str, to_chain_name: str, value: int, decimal: int
    ) -> tuple[int, int]:
        """Return the fee ratio and fee amount for value; (0, 0) if there is none."""
        fee = self.get_bridge_fee(token_name, from_chain_name, to_chain_name)
        if fee is None:
            return 0, 0
        ratio = self.get_included_bridge_fee(token_name, from_chain_name, to_chain_name, value, decimal)
        if ratio is None:
            return 0, 0
        keep = min(decimal, fee.keep_decimal)
        return ratio, value - self.from_ui_string(value, ratio, decimal, keep)

    def get_included_bridge_fee(
        self, token_name: str, from_chain_name: str, to_chain_name: str, value: int, decimal: int
    ) -> int | None:
        """Return the fee ratio for value in base units, fee included; None if unknown."""
        fee = self.get_bridge_fee(token_name, from_chain_name, to_chain_name)
        if fee is None:
            return None
        keep = min(decimal, fee.keep_decimal)
        try:
            levels = [
                (_units_from_string(fee.amount_lv1_str, decimal), fee.bridge_fee_ratio_lv1),
                (_units_from_string(fee.amount_lv2_str, decimal), fee.bridge_fee_ratio_lv2),
                (_units_from_string(fee.amount_lv3_str, decimal), fee.bridge_fee_ratio_lv3),
            ]
        except ValueError:
            return None
        for limit, ratio in levels:
            if limit > self.from_ui_string(value, ratio, decimal, keep):
                return ratio
        return fee.bridge_fee_ratio_lv4

    def get_bridge_fee_not_included(
        self, token_name: str, from_chain_name: str, to_chain_name: str, value: float
    ) -> int | None:
        """Return the fee ratio for a human-readable value, fee excluded; None if unknown."""
        fee = self.get_bridge_fee(token_name, from_chain_name, to_chain_name)
        if fee is None:
            return None
        if value < fee.amount_lv1:
            return fee.bridge_fee_ratio_lv1
        if value < fee.amount_lv2:
            return fee.bridge_fee_ratio_lv2
        if value < fee.amount_lv3:
            return fee.bridge_fee_ratio_lv3
        return fee.bridge_fee_ratio_lv4