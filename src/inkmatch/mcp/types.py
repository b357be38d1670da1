"""
JSON-RPC 2.0 error envelopes

The transport library produces all regular protocol traffic; the router only
needs to answer requests it rejects before a transport sees them.
"""

from __future__ import annotations

from typing import Any

import orjson


class ErrorCode:
    """JSON-RPC 2.0 error codes the router answers with."""

    PARSE_ERROR = -32700


def make_error_envelope(
    code: int,
    message: str,
    id: str | int | None = None,
    data: Any | None = None,
) -> dict[str, Any]:
    """Factory for a JSON-RPC error response body."""
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "error": error, "id": id}


def parse_error_envelope() -> dict[str, Any]:
    """Body returned for a request whose payload is not valid JSON."""
    return make_error_envelope(ErrorCode.PARSE_ERROR, "Parse error")


def json_loads(data: bytes | str) -> Any:
    """Decode a UTF-8 JSON payload.

    Raises:
        orjson.JSONDecodeError: the payload is empty, not UTF-8 or not JSON
    """
    if isinstance(data, str):
        data = data.encode()
    return orjson.loads(data)


__all__ = [
    "ErrorCode",
    "json_loads",
    "make_error_envelope",
    "parse_error_envelope",
]
