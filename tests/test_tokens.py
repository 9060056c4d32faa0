import sqlite3

import pytest

from owlkit.loader.chain_info import ChainInfoManager
from owlkit.loader.tokens import NATIVE_TOKEN_ADDRESS, TokenInfo, TokenInfoManager


class FakeAlerter:
    def __init__(self):
        self.messages = []

    def alert_text(self, text, err):
        self.messages.append(text)


@pytest.fixture
def db():
    conn = sqlite3.connect(":memory:")
    conn.execute(
        "CREATE TABLE t_token_info (token_name, chain_name, token_address, decimals)"
    )
    conn.executemany(
        "INSERT INTO t_token_info VALUES (?, ?, ?, ?)",
        [
            (" USDC ", " BaseMainnet ", " 0xAbCd ", 6),
            ("ETH", "BaseMainnet", "0x0000000000000000000000000000000000000000", 18),
            ("USDT", "LineaMainnet", "0xBEEF", 6),
        ],
    )
    conn.commit()
    yield conn
    conn.close()


def test_load_and_lookup(db):
    mgr = TokenInfoManager(db, FakeAlerter())
    mgr.load_all_tokens()
    usdc = mgr.get_by_chain_name_token_addr(" basemainnet ", "0xabcd")
    assert usdc == TokenInfo("USDC", "BaseMainnet", "0xAbCd", 6)
    assert mgr.get_by_chain_name_token_name("BASEMAINNET", " usdc ") is usdc
    assert sorted(mgr.get_token_addresses("BaseMainnet")) == sorted(
        ["0xAbCd", "0x0000000000000000000000000000000000000000"]
    )
    assert [t.token_name for t in mgr.get_all_tokens()] == ["USDC", "ETH", "USDT"]


def test_missing_returns_none(db):
    mgr = TokenInfoManager(db)
    mgr.load_all_tokens()
    assert mgr.get_by_chain_name_token_addr("BaseMainnet", "0xBEEF") is None
    assert mgr.get_by_chain_name_token_name("Unknown", "USDC") is None
    assert mgr.get_token_addresses("Unknown") == []


def test_select_error():
    alerter = FakeAlerter()
    mgr = TokenInfoManager(sqlite3.connect(":memory:"), alerter)
    mgr.load_all_tokens()
    assert alerter.messages == ["select t_token_info error"]
    assert mgr.get_all_tokens() == []


def test_bad_row_skipped(db):
    db.execute("INSERT INTO t_token_info VALUES ('X', 'BaseMainnet', '0x1', NULL)")
    alerter = FakeAlerter()
    mgr = TokenInfoManager(db, alerter)
    mgr.load_all_tokens()
    assert alerter.messages == ["scan t_token_info row error"]
    assert mgr.get_by_chain_name_token_name("BaseMainnet", "X") is None


def test_add_token_strips_and_indexes():
    mgr = TokenInfoManager()
    mgr.add_token(" Chain ", " Tok ", " 0xAA ", 8)
    found = mgr.get_by_chain_name_token_addr("chain", "0xaa")
    assert found == TokenInfo("Tok", "Chain", "0xAA", 8)
    assert mgr.get_by_chain_name_token_name("chain", "tok") is found
    assert mgr.get_all_tokens() == []


def test_add_token_info_stores_copy():
    mgr = TokenInfoManager()
    info = TokenInfo("Tok", "Chain", "0xAA", 8, full_name="Token", total_supply=100)
    mgr.add_token_info(info)
    info.decimals = 1
    stored = mgr.get_by_chain_name_token_addr("Chain", "0xAA")
    assert stored.decimals == 8
    assert stored.total_supply == 100


def _chain_manager():
    conn = sqlite3.connect(":memory:")
    conn.execute(
        "CREATE TABLE t_chain_info (id, chainid, real_chainid, name, alias_name, backend, "
        "eip1559, network_code, icon, block_interval, rpc_end_point, explorer_url, "
        "official_rpc, disabled, is_testnet, order_weight, gas_token_name, "
        "gas_token_decimal, transfer_contract_address, deposit_contract_address, layer1)"
    )
    rows = [
        (1, "8453", "8453", "BaseMainnet", "", 1, 1, 1, "", 2, "", "", "", 0, 0, 0, "ETH", 18, None, None, None),
        (2, "56", "56", "BnbMainnet", "", 1, 1, 2, "", 3, "", "", "", 0, 0, 0, "BNB", 18, None, None, None),
    ]
    conn.executemany(f"INSERT INTO t_chain_info VALUES ({', '.join('?' * 21)})", rows)
    mgr = ChainInfoManager(conn)
    mgr.load_all_chains()
    return mgr


def test_merge_native_tokens(db):
    mgr = TokenInfoManager(db)
    mgr.load_all_tokens()
    mgr.merge_native_tokens(_chain_manager())
    bnb = mgr.get_by_chain_name_token_name("BnbMainnet", "BNB")
    assert bnb == TokenInfo("BNB", "BnbMainnet", NATIVE_TOKEN_ADDRESS, 18)
    assert mgr.get_by_chain_name_token_addr("BnbMainnet", NATIVE_TOKEN_ADDRESS) is bnb
    names = [t.token_name for t in mgr.get_all_tokens()]
    assert names.count("ETH") == 1
    assert names[-1] == "BNB"