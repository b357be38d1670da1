"""
JSON-RPC error envelopes and body decoding.
"""

import orjson
import pytest

from inkmatch.mcp.types import ErrorCode, json_loads, make_error_envelope, parse_error_envelope


def test_router_error_codes():
    assert ErrorCode.PARSE_ERROR == -32700


def test_parse_error_envelope():
    assert parse_error_envelope() == {
        "jsonrpc": "2.0",
        "error": {"code": -32700, "message": "Parse error"},
        "id": None,
    }


def test_envelope_with_id_and_data():
    envelope = make_error_envelope(-32602, "Bad params", id=7, data={"field": "style"})
    assert envelope["id"] == 7
    assert envelope["error"] == {"code": -32602, "message": "Bad params", "data": {"field": "style"}}


def test_json_loads_accepts_text():
    assert json_loads('{"a": 1}') == {"a": 1}


@pytest.mark.parametrize("payload", [b"", b"{", b"\xff"])
def test_json_loads_rejects_garbage(payload):
    with pytest.raises(orjson.JSONDecodeError):
        json_loads(payload)
