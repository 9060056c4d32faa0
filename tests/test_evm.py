import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from owlkit.evm import estimate_gas, to_body, transfer_body

CHECKSUMMED = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
SENDER = "0xAbCdEf0000000000000000000000000000000001"


class _Handler(BaseHTTPRequestHandler):
    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length)
        self.server.requests.append(json.loads(body))
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


def _url(server):
    return f"http://127.0.0.1:{server.server_address[1]}"


def test_to_body_checksums_recipient():
    body = json.loads(to_body(CHECKSUMMED.lower(), 0, None, 21000))
    assert body["to"] == CHECKSUMMED
    assert body["value"] == "0x0"
    assert int(body["gas"], 16) == 21000
    assert "input" not in body


def test_to_body_key_order_and_compact():
    raw = to_body(CHECKSUMMED, None, b"", 1)
    assert raw.startswith(b'{"gas":')
    assert b" " not in raw
    assert json.loads(raw)["input"] == "0x"


def test_to_body_input_hex():
    body = json.loads(to_body(f"  {CHECKSUMMED} ", 255, bytes([0xA9, 0x05, 0x9C]), 60000))
    assert body["input"] == "0xa9059c"
    assert int(body["value"], 16) == 255
    assert body["to"] == CHECKSUMMED


def test_to_body_pads_short_address():
    body = json.loads(to_body("0x1", 0, None, 0))
    assert body["to"] == "0x0000000000000000000000000000000000000001"


def test_estimate_gas_adds_margin(server):
    server.reply = {"jsonrpc": "2.0", "id": 1, "result": "0x5208"}
    assert estimate_gas(_url(server), SENDER, CHECKSUMMED, None, None) == 31500
    request = server.requests[0]
    assert request["method"] == "eth_estimateGas"
    call = request["params"][0]
    assert call["from"] == SENDER.lower()
    assert call["to"] == CHECKSUMMED.lower()
    assert call["value"] == "0x0"
    assert "input" not in call


def test_estimate_gas_sends_data_and_value(server):
    server.reply = {"jsonrpc": "2.0", "id": 1, "result": "0x10"}
    estimate_gas(_url(server), SENDER, CHECKSUMMED, 10, b"\x01\x02")
    call = server.requests[0]["params"][0]
    assert call["input"] == "0x0102"
    assert int(call["value"], 16) == 10


def test_estimate_gas_rpc_error(server):
    server.reply = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "reverted"}}
    with pytest.raises(RuntimeError, match="reverted"):
        estimate_gas(_url(server), SENDER, CHECKSUMMED, None, None)


def test_transfer_body_uses_estimate(server):
    server.reply = {"jsonrpc": "2.0", "id": 1, "result": "0x64"}
    body = json.loads(transfer_body(_url(server), SENDER, CHECKSUMMED.lower(), 7))
    assert int(body["gas"], 16) == 150
    assert int(body["value"], 16) == 7
    assert body["to"] == CHECKSUMMED
    assert server.requests[0]["params"][0]["value"] == "0x7"