"""Source transactions stored in the t_src_transaction table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

_EXIST_QUERY = "SELECT id FROM t_src_transaction where chainid = ? and tx_hash = ? "
_SET_RESULT = "update t_src_transaction set is_invalid = ?, is_verified = ? where tx_hash = ? "
_SET_RESULT_WITH_DST = (
    "update t_src_transaction set is_invalid = ?, is_verified = ?, dst_tx_hash = ? "
    "where tx_hash = ? "
)
_INSERT = (
    "INSERT IGNORE INTO t_src_transaction (chainid, tx_hash, sender, receiver, target_address, "
    "token, value, dst_chainid, is_testnet, tx_timestamp, src_token_name, src_token_decimal, "
    "is_cctp, src_nonce, thirdparty_channel, to_exchange)\n"
    "              VALUES (?, ?, ?, ?, ?, ?, ? , ?, ?, ?, ?, ?, ?, ?, ?, ?)"
)

_PLACEHOLDERS = {"qmark": "?", "format": "%s"}


@dataclass
class SrcTx:
    """A transfer observed on a source chain."""

    chain_id: int
    tx_hash: str
    sender: str
    receiver: str
    token: str
    value: str
    tx_timestamp: int
    src_token_decimal: int
    target_address: str | None = None
    dst_chainid: int | None = None
    is_testnet: int | None = None
    src_token_name: str | None = None
    is_cctp: int = 0
    src_nonce: int = 0
    thirdparty_channel: int = 0
    to_exchange: int = 0


class SrcTxManager:
    """Reads and records source transactions.

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

    def _execute(self, query: str, params: tuple) -> None:
        cursor = self._db.cursor()
        try:
            cursor.execute(query.replace("?", self._mark), params)
        finally:
            cursor.close()
        self._db.commit()

    def is_src_tx_exist(self, chain_id: int, tx_hash: str) -> bool:
        """Return whether a transaction with this hash is recorded on this chain."""
        try:
            cursor = self._db.cursor()
            try:
                cursor.execute(_EXIST_QUERY.replace("?", self._mark), (chain_id, tx_hash.strip()))
                row = cursor.fetchone()
            finally:
                cursor.close()
        except Exception:
            return False
        return row is not None and row[0] is not None

    def set_result(
        self, tx_hash: str, is_invalid: int, is_verified: int, dst_hash: str | None = None
    ) -> None:
        """Record the verification outcome of a transaction, and its destination hash if given."""
        if dst_hash is None:
            query, params = _SET_RESULT, (is_invalid, is_verified, tx_hash)
        else:
            query, params = _SET_RESULT_WITH_DST, (is_invalid, is_verified, dst_hash, tx_hash)
        try:
            self._execute(query, params)
        except Exception as exc:
            self._alert("update t_transfer is_invalid error :", exc)
            raise

    def save(self, tx: SrcTx) -> None:
        """Strip the text fields of tx and insert it unless it already exists."""
        tx.tx_hash = tx.tx_hash.strip()
        tx.sender = tx.sender.strip()
        tx.receiver = tx.receiver.strip()
        tx.token = tx.token.strip()
        tx.value = tx.value.strip()
        if tx.target_address is not None:
            tx.target_address = tx.target_address.strip()
        if tx.src_token_name is not None:
            tx.src_token_name = tx.src_token_name.strip()

        params = (
            tx.chain_id,
            tx.tx_hash,
            tx.sender,
            tx.receiver,
            tx.target_address,
            tx.token,
            tx.value,
            tx.dst_chainid,
            tx.is_testnet,
            tx.tx_timestamp,
            tx.src_token_name,
            tx.src_token_decimal,
            tx.is_cctp,
            tx.src_nonce,
            tx.thirdparty_channel,
            tx.to_exchange,
        )
        try:
            self._execute(_INSERT, params)
        except Exception as exc:
            self._alert("failed to insert src transaction", exc)
            raise