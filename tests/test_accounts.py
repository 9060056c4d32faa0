import sqlite3

import pytest

from owlkit.loader.accounts import Account, AccountManager


class RecordingAlerter:
    def __init__(self):
        self.alerts = []

    def alert_text(self, text, err):
        self.alerts.append((text, err))


@pytest.fixture
def db():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE t_account (id INTEGER, chain_id INTEGER, address TEXT)")
    conn.executemany(
        "INSERT INTO t_account VALUES (?, ?, ?)",
        [(1, 10, " 0xAbC "), (2, 20, "0xabc"), (3, 10, "0xDef")],
    )
    yield conn
    conn.close()


@pytest.fixture
def loaded(db):
    alerter = RecordingAlerter()
    mgr = AccountManager(db, alerter)
    mgr.load_all_accounts()
    return mgr, alerter


def test_get_by_id_trims_address(loaded):
    mgr, alerter = loaded
    assert mgr.get_account_by_id(1) == Account(1, 10, "0xAbC")
    assert alerter.alerts == []


def test_missing_id(loaded):
    mgr, _ = loaded
    assert mgr.get_account_by_id(99) is None


def test_has_address_is_case_insensitive(loaded):
    mgr, _ = loaded
    assert mgr.has_address("  0XABC ")
    assert not mgr.has_address("0x123")


def test_get_by_address_and_chain(loaded):
    mgr, _ = loaded
    assert mgr.get_account_by_address_cid("0xABC", 20).id == 2
    assert mgr.get_account_by_address_cid("0xabc", 10).id == 1
    assert mgr.get_account_by_address_cid("0xdef", 20) is None


def test_get_addresses(loaded):
    mgr, _ = loaded
    assert sorted(mgr.get_addresses(10)) == ["0xAbC", "0xDef"]
    assert mgr.get_addresses(77) == []


def test_empty_before_load(db):
    mgr = AccountManager(db, RecordingAlerter())
    assert mgr.get_account_by_id(1) is None
    assert not mgr.has_address("0xabc")


def test_bad_row_is_skipped(db):
    db.execute("INSERT INTO t_account VALUES (4, 30, NULL)")
    alerter = RecordingAlerter()
    mgr = AccountManager(db, alerter)
    mgr.load_all_accounts()
    assert [text for text, _ in alerter.alerts] == ["scan t_account row error"]
    assert mgr.get_account_by_id(4) is None
    assert mgr.get_account_by_id(3).address == "0xDef"


def test_query_failure_keeps_old_data(loaded, db):
    mgr, alerter = loaded
    db.execute("DROP TABLE t_account")
    mgr.load_all_accounts()
    assert alerter.alerts[-1][0] == "select t_account error"
    assert mgr.get_account_by_id(2).address == "0xabc"