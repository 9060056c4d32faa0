"""Destination transactions stored in the t_dst_transaction tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

_GEN_QUERY = (
    "SELECT id,hash, confirmed_success FROM t_dst_transaction_gen "
    "where id = ? and confirmed_success is not null"
)
_EXIST_QUERY = (
    "SELECT id FROM t_dst_transaction where src_action = ? and src_id = ? and src_version = ?"
)
_CONFIRM_QUERY = (
    "SELECT confirmed_gen FROM t_dst_transaction where src_action = ? and src_id = ? "
    "and src_version = ? and confirmed_gen is not null"
)
_INSERT = (
    "INSERT IGNORE INTO t_dst_transaction (src_action, src_id, src_version, sender, body, "
    "fee_cap, transfer_token, transfer_recipient, transfer_amount)\n"
    "              VALUES (?, ?, ?, ?, ?, ?, ? , ?, ?)"
)

_PLACEHOLDERS = {"qmark": "?", "format": "%s"}
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


def _strip(value: str | None) -> str | None:
    return None if value is None else value.strip()


@dataclass
class DstTx:
    """A transaction to send on the destination chain for a source action."""

    src_action: str
    src_id: int
    src_version: int
    sender: int
    body: str
    fee_cap: str | None = None
    transfer_token: str | None = None
    transfer_recipient: str | None = None
    transfer_amount: str | None = None


@dataclass
class TxGen:
    """A generated destination transaction and whether it succeeded."""

    id: int
    hash: str
    confirmed_success: int


class DstTxManager:
    """Reads and records destination transactions.

    db is a DB-API connection; alerter has an alert_text(text, err) method.
    paramstyle is "qmark" for ? placeholders or "format" for %s.
    """

    def __init__(self, db: Any, alerter: Any = None, paramstyle: str = "qmark") -> None:
        if paramstyle not in _PLACEHOLDERS:
            raise ValueError(f"unsupported paramstyle: {paramstyle}")
        self._db = db
        self._alerter = alerter
        self._mark = _PLACEHOLDERS[paramstyle]

    def _alert(self, text: str, err: object) -> None:
        if self._alerter is not None:
            self._alerter.alert_text(text, err)
        else:
            _log.error("%s: %s", text, err)

    def _sql(self, query: str) -> str:
        return query.replace("?", self._mark)

    def _query_row(self, query: str, params: tuple) -> Any:
        try:
            cursor = self._db.cursor()
            try:
                cursor.execute(self._sql(query), params)
                return cursor.fetchone()
            finally:
                cursor.close()
        except Exception:
            return None

    def get_done_tx_gen_by_src(self, src_id: int, action: str, version: int) -> TxGen | None:
        """Return the confirmed generated transaction of a source action, or None."""
        gen_id = self.get_dst_tx_confirm_gen(src_id, action, version)
        if gen_id == 0:
            return None
        return self.get_done_tx_gen(gen_id)

    def get_done_tx_gen(self, gen_id: int) -> TxGen | None:
        """Return a generated transaction whose outcome is known, or None."""
        row = self._query_row(_GEN_QUERY, (gen_id,))
        if row is None:
            return None
        try:
            return TxGen(
                id=_as_int(row[0]),
                hash=_as_str(row[1]).strip(),
                confirmed_success=_as_int(row[2]),
            )
        except _ROW_ERRORS:
            return None

    def is_dst_tx_exist(self, src_id: int, action: str, version: int) -> bool:
        """Return whether a destination transaction exists for a source action."""
        row = self._query_row(_EXIST_QUERY, (action.strip(), src_id, version))
        return row is not None and row[0] is not None

    def get_dst_tx_confirm_gen(self, src_id: int, action: str, version: int) -> int:
        """Return the id of the confirmed generated transaction; 0 if there is none."""
        row = self._query_row(_CONFIRM_QUERY, (action.strip(), src_id, version))
        if row is None:
            return 0
        try:
            return _as_int(row[0])
        except _ROW_ERRORS:
            return 0

    def save(self, tx: DstTx) -> None:
        """Strip the text fields of tx and insert it unless it already exists."""
        tx.src_action = tx.src_action.strip()
        tx.body = tx.body.strip()
        tx.fee_cap = _strip(tx.fee_cap)
        tx.transfer_token = _strip(tx.transfer_token)
        tx.transfer_recipient = _strip(tx.transfer_recipient)
        tx.transfer_amount = _strip(tx.transfer_amount)

        params = (
            tx.src_action,
            tx.src_id,
            tx.src_version,
            tx.sender,
            tx.body,
            tx.fee_cap,
            tx.transfer_token,
            tx.transfer_recipient,
            tx.transfer_amount,
        )
        try:
            cursor = self._db.cursor()
            try:
                cursor.execute(self._sql(_INSERT), params)
            finally:
                cursor.close()
            self._db.commit()
        except Exception as exc:
            self._alert("failed to insert dst transaction", exc)
            raise