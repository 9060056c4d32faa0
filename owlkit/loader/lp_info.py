"""Liquidity provider routes loaded from the t_lp_info table."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

_QUERY = (
    "SELECT version, token_name, from_chain, to_chain, maker_address, min_value, "
    "max_value, is_disabled, bridge_fee_ratio FROM t_lp_info"
)

LP_INFO_VERSION = 1

_ROW_ERRORS = (TypeError, ValueError, IndexError, UnicodeDecodeError)

# version -> token -> source chain -> destination chain -> maker -> LpInfo
LpIndex = dict[int, dict[str, dict[str, dict[str, dict[str, "LpInfo"]]]]]


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
class LpInfo:
    """Limits and fee of one maker on one token route."""

    version: int = 0
    token_name: str = ""
    from_chain_name: str = ""
    to_chain_name: str = ""
    min_value: float = 0.0
    max_value: float = 0.0
    bridge_fee_ratio: float = 0.0
    min_value_str: str = ""
    max_value_str: str = ""
    bridge_fee_ratio_str: str = ""
    maker_address: str = ""
    is_disabled: int = 0


class LpInfoManager:
    """In-memory index of maker routes by version, token, chains and maker.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    """

    def __init__(self, db: Any = None, alerter: Any = None) -> None:
        self._db = db
        self._alerter = alerter
        self._lock = threading.Lock()
        self._infos: LpIndex = {}
        self._all: list[LpInfo] = []

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def get_all_lp_infos(self) -> list[LpInfo]:
        """Return a copy of the list of routes in load order."""
        with self._lock:
            return list(self._all)

    def get_lp_infos(
        self, version: int, token: str, from_chain: str, to_chain: str
    ) -> dict[str, LpInfo] | None:
        """Return the routes of each maker, keyed by lower-case address, or None."""
        with self._lock:
            makers = (
                self._infos.get(version, {})
                .get(_key(token), {})
                .get(_key(from_chain), {})
                .get(_key(to_chain))
            )
            return dict(makers) if makers is not None else None

    def get_lp_info(
        self, version: int, token: str, from_chain: str, to_chain: str, maker: str
    ) -> LpInfo | None:
        """Return the route of one maker, ignoring case and spaces, or None."""
        with self._lock:
            return (
                self._infos.get(version, {})
                .get(_key(token), {})
                .get(_key(from_chain), {})
                .get(_key(to_chain), {})
                .get(_key(maker))
            )

    def get_tokens_by_lp(self, version: int, from_chain: str, to_chain: str) -> list[str] | None:
        """Return the upper-case names of tokens with a route between the chains.

        None if the version is unknown.
        """
        with self._lock:
            tokens = self._infos.get(version)
            if tokens is None:
                return None
            src, dst = _key(from_chain), _key(to_chain)
            return [
                name.upper()
                for name, routes in tokens.items()
                if dst in routes.get(src, {})
            ]

    @staticmethod
    def _parse_row(row: Any) -> LpInfo:
        return LpInfo(
            version=_as_int(row[0]),
            token_name=_as_str(row[1]).strip(),
            from_chain_name=_as_str(row[2]).strip(),
            to_chain_name=_as_str(row[3]).strip(),
            maker_address=_as_str(row[4]).strip(),
            min_value_str=_as_str(row[5]),
            max_value_str=_as_str(row[6]),
            is_disabled=_as_int(row[7]),
            bridge_fee_ratio_str=_as_str(row[8]),
        )

    def _fill_numbers(self, info: LpInfo) -> bool:
        fields = [
            ("t_lp_info min not float", "min_value"),
            ("t_lp_info max not float", "max_value"),
            ("t_lp_info bridge fee not float", "bridge_fee_ratio"),
        ]
        parsed: dict[str, float] = {}
        for message, name in fields:
            try:
                parsed[name] = _parse_float(getattr(info, f"{name}_str"))
            except ValueError as exc:
                self._alert(message, exc)
                return False
        for name, number in parsed.items():
            setattr(info, name, number)
        return True

    def load_all_lp_info(self) -> None:
        """Reload all routes; on a query failure the old data is kept."""
        try:
            cursor = self._db.cursor()
            cursor.execute(_QUERY)
        except Exception as exc:
            self._alert("select t_lp_info error", exc)
            return

        infos: LpIndex = {}
        all_infos: list[LpInfo] = []
        try:
            for row in cursor:
                try:
                    info = self._parse_row(row)
                except _ROW_ERRORS as exc:
                    self._alert("scan t_lp_info row error", exc)
                    continue
                if not self._fill_numbers(info):
                    continue
                (
                    infos.setdefault(info.version, {})
                    .setdefault(info.token_name.lower(), {})
                    .setdefault(info.from_chain_name.lower(), {})
                    .setdefault(info.to_chain_name.lower(), {})
                )[info.maker_address.lower()] = info
                all_infos.append(info)
        except Exception as exc:
            self._alert("get next t_lp_info row error", exc)
            return
        finally:
            cursor.close()

        with self._lock:
            self._infos = infos
            self._all = all_infos
        _log.info("load all lp info: %d", len(all_infos))