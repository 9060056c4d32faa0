import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from owlkit.loader.chain_info import ChainInfo
from owlkit.zkslite import USDC_ADDRESS, USDT_ADDRESS, ZksliteRpc

OWNER = "0x1111111111111111111111111111111111111111"


class _Handler(BaseHTTPRequestHandler):
    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length)
        self.server.requests.append((self.path, json.loads(body)))
        payload = json.dumps(self.server.reply).encode()
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, *args):
        pass


@pytest.fixture
def server():
    srv = HTTPServer(("127.0.0.1", 0), _Handler)
    srv.requests = []
    srv.reply = {}
    thread = threading.Thread(target=srv.serve_forever, daemon=True)
    thread.start()
    yield srv
    srv.shutdown()
    srv.server_close()


def _rpc(server, suffix=""):
    url = f"http://127.0.0.1:{server.server_address[1]}{suffix}"
    return ZksliteRpc(ChainInfo(rpc_end_point=url))


def _balances(**balances):
    return {"jsonrpc": "2.0", "id": 1, "result": {"committed": {"balances": balances}}}


def test_backend_number(server):
    assert _rpc(server).backend() == 1


def test_eth_balance_and_request(server):
    server.reply = _balances(ETH="123456789012345678901", USDC="5")
    assert _rpc(server).get_balance(f"  {OWNER} ", "0x0") == 123456789012345678901
    path, body = server.requests[0]
    assert path == "/jsrpc"
    assert body["method"] == "account_info"
    assert body["params"] == [OWNER]


def test_trailing_slash_endpoint(server):
    server.reply = _balances(ETH="1")
    _rpc(server, "/").get_balance(OWNER, "0x0000")
    assert server.requests[0][0] == "/jsrpc"


def test_usdc_and_usdt(server):
    server.reply = _balances(ETH="1", USDC="250", USDT="300")
    rpc = _rpc(server)
    assert rpc.get_balance(OWNER, USDC_ADDRESS) == 250
    assert rpc.get_balance(OWNER, USDT_ADDRESS) == 300


def test_missing_or_bad_balance_is_zero(server):
    server.reply = _balances(ETH="not-a-number")
    rpc = _rpc(server)
    assert rpc.get_balance(OWNER, "0x0") == 0
    assert rpc.get_balance(OWNER, USDC_ADDRESS) == 0
    server.reply = {"result": None}
    assert rpc.get_balance(OWNER, "0x0") == 0


def test_unsupported_token(server):
    with pytest.raises(NotImplementedError):
        _rpc(server).get_balance(OWNER, "0x2222222222222222222222222222222222222222")
    assert server.requests == []


def test_token_address_case_matters(server):
    with pytest.raises(NotImplementedError):
        _rpc(server).get_balance(OWNER, USDC_ADDRESS.lower())


def test_balance_at_block_number_matches_current(server):
    server.reply = _balances(USDT="77")
    rpc = _rpc(server)
    assert rpc.get_balance_at_block_number(OWNER, USDT_ADDRESS, 12345) == rpc.get_balance(
        OWNER, USDT_ADDRESS
    )