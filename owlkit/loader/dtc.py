"""Dynamic destination transfer costs loaded from the t_dynamic_dtc table."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

from owlkit.common import from_ui_string as _units_from_string

_log = logging.getLogger(__name__)

_QUERY = (
    "SELECT token_name, from_chain, to_chain, dtc_lv1, dtc_lv2, dtc_lv3, dtc_lv4, "
    "amount_lv1, amount_lv2, amount_lv3, amount_lv4 FROM t_dynamic_dtc"
)

_ROW_ERRORS = (TypeError, ValueError, IndexError, UnicodeDecodeError)

DtcIndex = dict[str, dict[str, dict[str, "Dtc"]]]


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
class Dtc:
    """Transfer costs of a token route, by amount level."""

    token_name: str = ""
    from_chain_name: str = ""
    to_chain_name: str = ""
    dtc_lv1: float = 0.0
    dtc_lv2: float = 0.0
    dtc_lv3: float = 0.0
    dtc_lv4: float = 0.0
    amount_lv1: float = 0.0
    amount_lv2: float = 0.0
    amount_lv3: float = 0.0
    amount_lv4: float = 0.0
    dtc_lv1_str: str = ""
    dtc_lv2_str: str = ""
    dtc_lv3_str: str = ""
    dtc_lv4_str: str = ""
    amount_lv1_str: str = ""
    amount_lv2_str: str = ""
    amount_lv3_str: str = ""
    amount_lv4_str: str = ""


class DtcManager:
    """In-memory index of transfer costs by token, source and destination chain.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    """

    def __init__(self, db: Any = None, alerter: Any = None) -> None:
        self._db = db
        self._alerter = alerter
        self._lock = threading.Lock()
        self._dtcs: DtcIndex = {}

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def get_dtcs(self) -> DtcIndex:
        """Return a copy of the index: token -> source chain -> destination chain -> Dtc."""
        with self._lock:
            return {
                token: {src: dict(dsts) for src, dsts in routes.items()}
                for token, routes in self._dtcs.items()
            }

    def get_dtc(self, token: str, from_chain: str, to_chain: str) -> Dtc | None:
        """Return the costs of a route, ignoring case and spaces, or None."""
        with self._lock:
            return (
                self._dtcs.get(_key(token), {})
                .get(_key(from_chain), {})
                .get(_key(to_chain))
            )

    @staticmethod
    def _parse_row(row: Any) -> Dtc:
        return Dtc(
            token_name=_as_str(row[0]).strip(),
            from_chain_name=_as_str(row[1]).strip(),
            to_chain_name=_as_str(row[2]).strip(),
            dtc_lv1_str=_as_str(row[3]),
            dtc_lv2_str=_as_str(row[4]),
            dtc_lv3_str=_as_str(row[5]),
            dtc_lv4_str=_as_str(row[6]),
            amount_lv1_str=_as_str(row[7]),
            amount_lv2_str=_as_str(row[8]),
            amount_lv3_str=_as_str(row[9]),
            amount_lv4_str=_as_str(row[10]),
        )

    def _fill_numbers(self, dtc: Dtc) -> bool:
        """Parse the textual levels into floats; alert and return False on failure."""
        fields = [
            ("dtc1", "dtc_lv1"),
            ("dtc2", "dtc_lv2"),
            ("dtc3", "dtc_lv3"),
            ("dtc4", "dtc_lv4"),
            ("amount1", "amount_lv1"),
            ("amount2", "amount_lv2"),
            ("amount3", "amount_lv3"),
            ("amount4", "amount_lv4"),
        ]
        parsed: dict[str, float] = {}
        for label, name in fields:
            try:
                parsed[name] = _parse_float(getattr(dtc, f"{name}_str"))
            except ValueError as exc:
                self._alert(f"t_dynamic_dtc {label} not float", exc)
                return False
        for name, number in parsed.items():
            setattr(dtc, name, number)
        return True

    def load_all_dtc(self) -> None:
        """Reload all costs; on a query failure the old data is kept."""
        try:
            cursor = self._db.cursor()
            cursor.execute(_QUERY)
        except Exception as exc:
            self._alert("select t_dynamic_dtc error", exc)
            return

        dtcs: DtcIndex = {}
        counter = 0
        try:
            for row in cursor:
                try:
                    dtc = self._parse_row(row)
                except _ROW_ERRORS as exc:
                    self._alert("scan t_dynamic_dtc row error", exc)
                    continue
                if not self._fill_numbers(dtc):
                    continue
                dtcs.setdefault(dtc.token_name.lower(), {}).setdefault(
                    dtc.from_chain_name.lower(), {}
                )[dtc.to_chain_name.lower()] = dtc
                counter += 1
        except Exception as exc:
            self._alert("get next t_dynamic_dtc row error", exc)
            return
        finally:
            cursor.close()

        with self._lock:
            self._dtcs = dtcs
        _log.info("load all dtc: %d", counter)

    def get_included_dtc(
        self, token_name: str, from_chain_name: str, to_chain_name: str, value: float
    ) -> tuple[float, str] | None:
        """Return the cost for a value that already includes it; None if unknown."""
        dtc = self.get_dtc(token_name, from_chain_name, to_chain_name)
        if dtc is None:
            return None
        if value > dtc.amount_lv3 + dtc.dtc_lv3:
            return dtc.dtc_lv4, dtc.dtc_lv4_str
        if value > dtc.amount_lv2 + dtc.dtc_lv2:
            return dtc.dtc_lv3, dtc.dtc_lv3_str
        if value > dtc.amount_lv1 + dtc.dtc_lv1:
            return dtc.dtc_lv2, dtc.dtc_lv2_str
        return dtc.dtc_lv1, dtc.dtc_lv1_str

    def get_dtc_to_include(
        self, token_name: str, from_chain_name: str, to_chain_name: str, value: float
    ) -> tuple[float, str] | None:
        """Return the cost to add to a value that does not include it; None if unknown."""
        dtc = self.get_dtc(token_name, from_chain_name, to_chain_name)
        if dtc is None:
            return None
        if value > dtc.amount_lv3:
            return dtc.dtc_lv4, dtc.dtc_lv4_str
        if value > dtc.amount_lv2:
            return dtc.dtc_lv3, dtc.dtc_lv3_str
        if value > dtc.amount_lv1:
            return dtc.dtc_lv2, dtc.dtc_lv2_str
        return dtc.dtc_lv1, dtc.dtc_lv1_str

    def from_ui_string(self, amount: str, dtc: str, decimals: int) -> int:
        """Return amount plus dtc in base units; empty or invalid parts count as 0."""
        total = 0
        for text in (amount, dtc):
            if not text:
                continue
            try:
                total += _units_from_string(text, decimals)
            except ValueError:
                pass
        return total

    def get_included_dtc_big_int(
        self, token_name: str, from_chain_name: str, to_chain_name: str, value: int, decimals: int
    ) -> int | None:
        """Return the cost in base units for a value that includes it; None if unknown."""
        dtc = self.get_dtc(token_name, from_chain_name, to_chain_name)
        if dtc is None:
            return None
        levels = [
            (dtc.amount_lv1_str, dtc.dtc_lv1_str),
            (dtc.amount_lv2_str, dtc.dtc_lv2_str),
            (dtc.amount_lv3_str, dtc.dtc_lv3_str),
        ]
        for amount, cost in levels:
            if value <= self.from_ui_string(amount, cost, decimals):
                return self.from_ui_string("", cost, decimals)
        return self.from_ui_string("", dtc.dtc_lv4_str, decimals)

    def get_dtc_to_include_big_int(
        self, token_name: str, from_chain_name: str, to_chain_name: str, value: int, decimals: int
    ) -> int | None:
        """Return the cost in base units to add to a value; None if unknown."""
        dtc = self.get_dtc(token_name, from_chain_name, to_chain_name)
        if dtc is None:
            return None
        levels = [
            (dtc.amount_lv1_str, dtc.dtc_lv1_str),
            (dtc.amount_lv2_str, dtc.dtc_lv2_str),
            (dtc.amount_lv3_str, dtc.dtc_lv3_str),
        ]
        for amount, cost in levels:
            if value <= self.from_ui_string(amount, "", decimals):
                return self.from_ui_string("", cost, decimals)
        return self.from_ui_string("", dtc.dtc_lv4_str, decimals)

    def get_min_value_include_gas_fee(
        self, token_name: str, from_chain_name: str, to_chain_name: str, decimals: int
    ) -> str | None:
        """Return the smallest cost level that covers its own cost; None if none does."""
        dtc = self.get_dtc(token_name, from_chain_name, to_chain_name)
        if dtc is None:
            return None
        for text in (dtc.dtc_lv1_str, dtc.dtc_lv2_str, dtc.dtc_lv3_str, dtc.dtc_lv4_str):
            value = self.from_ui_string("", text, decimals)
            included = self.get_included_dtc_big_int(
                token_name, from_chain_name, to_chain_name, value, decimals
            )
            if included is not None and included <= value:
                return text
        return None