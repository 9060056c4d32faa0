import sqlite3

import pytest

from owlkit.loader.lp_info import LP_INFO_VERSION, LpInfo, LpInfoManager


class RecordingAlerter:
    def __init__(self):
        self.alerts = []

    def alert_text(self, text, err):
        self.alerts.append(text)


def make_db(rows):
    db = sqlite3.connect(":memory:")
    db.execute(
        "CREATE TABLE t_lp_info (version INTEGER, token_name TEXT, from_chain TEXT, "
        "to_chain TEXT, maker_address TEXT, min_value TEXT, max_value TEXT, "
        "is_disabled INTEGER, bridge_fee_ratio TEXT)"
    )
    db.executemany(
        "INSERT INTO t_lp_info (version, token_name, from_chain, to_chain, maker_address, "
        "min_value, max_value, is_disabled, bridge_fee_ratio) VALUES (?,?,?,?,?,?,?,?,?)",
        rows,
    )
    db.commit()
    return db


ROWS = [
    (1, " usdc ", "ChainA", "ChainB", " 0xAbC0 ", "0.5", "1000", 0, "0.001"),
    (1, "USDC", "chaina", "chainb", "0xDEF1", "1", "500", 1, "0.002"),
    (1, "eth", "ChainA", "ChainB", "0xAbC0", "0.01", "10", 0, "0"),
    (1, "dai", "ChainA", "ChainC", "0xAbC0", "1", "10", 0, "0"),
    (2, "usdt", "ChainA", "ChainB", "0xAbC0", "1", "10", 0, "0"),
]


@pytest.fixture
def manager():
    mgr = LpInfoManager(make_db(ROWS), RecordingAlerter())
    mgr.load_all_lp_info()
    return mgr


def test_default_version_lookup(manager):
    assert manager.get_tokens_by_lp(LP_INFO_VERSION, "chaina", "chainc") == ["DAI"]


def test_get_lp_info_ignores_case_and_spaces(manager):
    info = manager.get_lp_info(1, "USDC", " chaina", "CHAINB ", "0xabc0")
    assert isinstance(info, LpInfo)
    assert info.maker_address == "0xAbC0"
    assert info.token_name == "usdc"
    assert info.min_value == 0.5
    assert info.max_value == 1000.0
    assert info.bridge_fee_ratio_str == "0.001"


def test_get_lp_infos_keyed_by_lower_maker(manager):
    makers = manager.get_lp_infos(1, "usdc", "chaina", "chainb")
    assert set(makers) == {"0xabc0", "0xdef1"}
    assert makers["0xdef1"].is_disabled == 1
    makers.clear()
    assert len(manager.get_lp_infos(1, "usdc", "chaina", "chainb")) == 2


def test_missing_lookups_return_none(manager):
    assert manager.get_lp_infos(3, "usdc", "chaina", "chainb") is None
    assert manager.get_lp_infos(1, "usdc", "chainb", "chaina") is None
    assert manager.get_lp_info(1, "usdc", "chaina", "chainb", "0x9999") is None


def test_get_tokens_by_lp(manager):
    assert sorted(manager.get_tokens_by_lp(1, " ChainA", "chainb")) == ["ETH", "USDC"]
    assert manager.get_tokens_by_lp(1, "chaina", "chainc") == ["DAI"]
    assert manager.get_tokens_by_lp(1, "chainb", "chaina") == []
    assert manager.get_tokens_by_lp(2, "chaina", "chainb") == ["USDT"]
    assert manager.get_tokens_by_lp(9, "chaina", "chainb") is None


def test_get_all_lp_infos_is_copy(manager):
    infos = manager.get_all_lp_infos()
    assert len(infos) == len(ROWS)
    assert [i.version for i in infos] == [row[0] for row in ROWS]
    infos.clear()
    assert len(manager.get_all_lp_infos()) == len(ROWS)


def test_invalid_float_row_is_skipped():
    bad = (1, "btc", "a", "b", "0x1", "1", "big", 0, "0")
    alerter = RecordingAlerter()
    mgr = LpInfoManager(make_db([bad, ROWS[0]]), alerter)
    mgr.load_all_lp_info()
    assert alerter.alerts == ["t_lp_info max not float"]
    assert mgr.get_lp_info(1, "btc", "a", "b", "0x1") is None
    assert len(mgr.get_all_lp_infos()) == 1


def test_null_column_alerts_scan_error():
    bad = (1, None, "a", "b", "0x1", "1", "2", 0, "0")
    alerter = RecordingAlerter()
    mgr = LpInfoManager(make_db([bad]), alerter)
    mgr.load_all_lp_info()
    assert alerter.alerts == ["scan t_lp_info row error"]
    assert mgr.get_all_lp_infos() == []


def test_failed_query_keeps_old_data():
    db = make_db(ROWS)
    alerter = RecordingAlerter()
    mgr = LpInfoManager(db, alerter)
    mgr.load_all_lp_info()
    db.execute("DROP TABLE t_lp_info")
    mgr.load_all_lp_info()
    assert alerter.alerts == ["select t_lp_info error"]
    assert len(mgr.get_all_lp_infos()) == len(ROWS)