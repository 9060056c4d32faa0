import sqlite3

import pytest

from owlkit.loader.popular import PopularListManager


class FakeAlerter:
    def __init__(self):
        self.messages = []

    def alert_text(self, text, err):
        self.messages.append(text)


@pytest.fixture
def db():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE t_popular_list (chain_name, popular_weight, tag)")
    conn.executemany(
        "INSERT INTO t_popular_list VALUES (?, ?, ?)",
        [
            (" BaseMainnet ", 10, " USDC "),
            ("basemainnet", 5, "ETH"),
            ("LineaMainnet", 7, "USDT"),
        ],
    )
    conn.commit()
    yield conn
    conn.close()


def test_weights_merge_per_chain(db):
    mgr = PopularListManager(db, FakeAlerter())
    mgr.load_all_popular_list()
    assert mgr.get_popular_weight(" BASEMAINNET ") == {"USDC": 10, "ETH": 5}
    assert mgr.get_popular_weight("lineamainnet") == {"USDT": 7}


def test_unknown_chain_returns_none(db):
    mgr = PopularListManager(db)
    mgr.load_all_popular_list()
    assert mgr.get_popular_weight("Unknown") is None


def test_returned_weights_are_a_copy(db):
    mgr = PopularListManager(db)
    mgr.load_all_popular_list()
    weights = mgr.get_popular_weight("LineaMainnet")
    weights["USDT"] = 0
    assert mgr.get_popular_weight("LineaMainnet") == {"USDT": 7}


def test_later_row_overrides_same_tag(db):
    db.execute("INSERT INTO t_popular_list VALUES ('LineaMainnet', 9, 'USDT')")
    mgr = PopularListManager(db)
    mgr.load_all_popular_list()
    assert mgr.get_popular_weight("LineaMainnet") == {"USDT": 9}


def test_select_error():
    alerter = FakeAlerter()
    mgr = PopularListManager(sqlite3.connect(":memory:"), alerter)
    mgr.load_all_popular_list()
    assert alerter.messages == ["select t_popular_list error"]
    assert mgr.get_popular_weight("BaseMainnet") is None


def test_bad_row_skipped(db):
    db.execute("INSERT INTO t_popular_list VALUES ('Other', NULL, 'X')")
    alerter = FakeAlerter()
    mgr = PopularListManager(db, alerter)
    mgr.load_all_popular_list()
    assert alerter.messages == ["scan t_popular_list row error"]
    assert mgr.get_popular_weight("Other") is None