"""Maker address groups loaded from the maker and security address tables."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from owlkit.loader.chain_info import Backend

_log = logging.getLogger(__name__)

_GROUP_QUERY = "SELECT id, group_name, env FROM t_maker_address_groups"
_ADDRESS_QUERY = "SELECT id, group_id, backend, address FROM t_maker_addresses"
_SECURITY_QUERY = "SELECT id, group_id, backend, address FROM t_security_addresses"

_ROW_ERRORS = (TypeError, ValueError, IndexError, UnicodeDecodeError)


class _LoadAborted(Exception):
    """Raised internally when a table cannot be read in full."""


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


def _as_backend(value: Any) -> Backend | int:
    number = _as_int(value)
    try:
        return Backend(number)
    except ValueError:
        return number


@dataclass
class MakerAddressEntry:
    """One address of a maker group on one backend."""

    id: int
    group_id: int
    backend: Backend | int
    address: str


@dataclass
class MakerAddress:
    """A group of maker addresses and its security addresses."""

    group_id: int
    group_name: str
    env: str
    addresses: list[MakerAddressEntry] = field(default_factory=list)
    security_addresses: list[MakerAddressEntry] = field(default_factory=list)


class MakerAddressManager:
    """In-memory index of maker address groups by id, environment and address.

    db is a DB-API connection.
    """

    def __init__(self, db: Any) -> None:
        self._db = db
        self._lock = threading.Lock()
        self._by_group_id: dict[int, MakerAddress] = {}
        self._by_env: dict[str, list[MakerAddress]] = {}
        self._group_by_backend_address: dict[int, dict[str, int]] = {}

    def _rows(self, query: str, table: str):
        """Yield the rows of a query; raise _LoadAborted if it cannot be read."""
        try:
            cursor = self._db.cursor()
            cursor.execute(query)
        except Exception as exc:
            _log.error("select %s error: %s", table, exc)
            raise _LoadAborted from exc
        try:
            yield from cursor
        except Exception as exc:
            _log.error("get next %s row error: %s", table, exc)
            raise _LoadAborted from exc
        finally:
            cursor.close()

    def _entries(self, query: str, table: str):
        for row in self._rows(query, table):
            try:
                yield MakerAddressEntry(
                    id=_as_int(row[0]),
                    group_id=_as_int(row[1]),
                    backend=_as_backend(row[2]),
                    address=_as_str(row[3]),
                )
            except _ROW_ERRORS as exc:
                _log.error("scan %s row error: %s", table, exc)

    def load_all_maker_addresses(self) -> None:
        """Reload all groups; if any table cannot be read the old data is kept."""
        groups: dict[int, MakerAddress] = {}
        by_backend: dict[int, dict[str, int]] = {}
        try:
            for row in self._rows(_GROUP_QUERY, "maker_address_groups"):
                try:
                    group = MakerAddress(
                        group_id=_as_int(row[0]),
                        group_name=_as_str(row[1]),
                        env=_as_str(row[2]),
                    )
                except _ROW_ERRORS as exc:
                    _log.error("scan maker_address_groups row error: %s", exc)
                    continue
                groups[group.group_id] = group

            for entry in self._entries(_ADDRESS_QUERY, "maker_addresses"):
                if entry.group_id in groups:
                    groups[entry.group_id].addresses.append(entry)
                by_backend.setdefault(entry.backend, {})[entry.address] = entry.group_id

            for entry in self._entries(_SECURITY_QUERY, "security_addresses"):
                if entry.group_id in groups:
                    groups[entry.group_id].security_addresses.append(entry)
        except _LoadAborted:
            return

        by_env: dict[str, list[MakerAddress]] = {}
        for group in groups.values():
            by_env.setdefault(group.env, []).append(group)

        with self._lock:
            self._by_group_id = groups
            self._by_env = by_env
            self._group_by_backend_address = by_backend
        _log.info("load all maker addresses groups: %d", len(groups))

    def get_maker_addresses_by_env(self, env: str) -> list[MakerAddress]:
        """Return the groups of an environment; empty if there are none."""
        with self._lock:
            return list(self._by_env.get(env, []))

    def get_maker_address_by_group_id(self, group_id: int) -> MakerAddress | None:
        """Return the group with this id, or None."""
        with self._lock:
            return self._by_group_id.get(group_id)

    def get_group_id_by_backend_and_address(self, backend: int, address: str) -> int:
        """Return the group id of an exact address on a backend; 0 if unknown."""
        with self._lock:
            return self._group_by_backend_address.get(backend, {}).get(address, 0)