"""
router.py - HTTP request router

Classifies every inbound request and either answers it directly or hands it
to the transport bound to its session:

    OPTIONS <endpoint>                          -> 204 CORS preflight
    GET /                                       -> 200 status payload
    GET /public/<file>                          -> 200 file, inferred type
    GET    <endpoint>, session resolves         -> transport (server push stream)
    GET    <endpoint>, otherwise                -> 400
    POST   <endpoint>, body not JSON            -> 400 JSON-RPC parse error
    POST   <endpoint>, session resolves         -> transport
    POST   <endpoint>, otherwise                -> new transport; registered once
                                                   it confirms a session id
    DELETE <endpoint>, session resolves         -> transport, then close + evict
    DELETE <endpoint>, otherwise                -> 404
    anything else                               -> 404

The router keeps no per-request state; sessions live in the SessionRegistry.
Session transports serve in a task group owned by `run()`, which must wrap
the application lifespan.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator
from pathlib import Path

import anyio
import orjson
from anyio.abc import TaskGroup
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from inkmatch import APP_NAME, __version__
from inkmatch.config.logging import get_logger

from .sessions import SessionRegistry
from .transport import SessionTransport, TransportEvent, TransportFactory
from .types import json_loads, parse_error_envelope

logger = get_logger("inkmatch.mcp.router")

SESSION_HEADER = "mcp-session-id"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": f"Content-Type, {SESSION_HEADER}",
    "Access-Control-Expose-Headers": SESSION_HEADER,
}

CONTENT_TYPES = {
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
}
DEFAULT_CONTENT_TYPE = "text/plain"


def not_found() -> Response:
    return PlainTextResponse("Not found", status_code=404)


def without_session_header(scope: Scope) -> Scope:
    """Copy of `scope` with any session id header removed."""
    header = SESSION_HEADER.encode()
    headers = [(name, value) for name, value in scope["headers"] if name.lower() != header]
    return {**scope, "headers": headers}


class RequestRouter:
    """ASGI application implementing the session-aware routing table."""

    def __init__(
        self,
        sessions: SessionRegistry,
        transport_factory: TransportFactory,
        *,
        endpoint: str = "/mcp",
        static_prefix: str = "/public/",
        static_dir: Path | None = None,
    ):
        self.sessions = sessions
        self.endpoint = endpoint
        self.static_prefix = static_prefix
        self.static_dir = static_dir
        self._transport_factory = transport_factory
        self._task_group: TaskGroup | None = None

    @contextlib.asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        """Own the task group session transports run in."""
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.info("Session router started", endpoint=self.endpoint)
            try:
                yield
            finally:
                with anyio.CancelScope(shield=True):
                    await self.sessions.close_all()
                tg.cancel_scope.cancel()
                self._task_group = None
                logger.info("Session router stopped")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        path = request.url.path
        method = request.method

        if path == self.endpoint:
            response = await self._route_endpoint(request, scope, receive, send)
        elif method == "GET" and path == "/":
            response = self.status()
        elif method == "GET" and path.startswith(self.static_prefix):
            response = await self.static_asset(path[len(self.static_prefix) :])
        else:
            response = not_found()

        if response is not None:
            await response(scope, receive, send)

    def status(self) -> Response:
        return JSONResponse({"status": "ok", "app": APP_NAME, "version": __version__})

    async def static_asset(self, relative: str) -> Response:
        """Serve a file below the static directory; anything else is a 404."""
        if self.static_dir is None or not relative:
            return not_found()
        root = Path(self.static_dir).resolve()
        candidate = (root / relative).resolve()
        if not candidate.is_relative_to(root) or not candidate.is_file():
            return not_found()
        try:
            content = await anyio.Path(candidate).read_bytes()
        except OSError as e:
            logger.warning("Static asset unreadable", path=str(candidate), error=str(e))
            return not_found()
        media_type = CONTENT_TYPES.get(candidate.suffix.lstrip(".").lower(), DEFAULT_CONTENT_TYPE)
        return Response(content, media_type=media_type)

    async def _route_endpoint(
        self,
        request: Request,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> Response | None:
        """Endpoint traffic. Returns a response, or None once a transport answered."""
        method = request.method
        session_id = request.headers.get(SESSION_HEADER)

        if method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)

        if method == "GET":
            transport = self.sessions.get(session_id)
            if transport is None:
                return PlainTextResponse("Missing or invalid session ID", status_code=400)
            await transport.handle_request(scope, receive, send)
            return None

        if method == "POST":
            body = await request.body()
            try:
                message = json_loads(body)
            except orjson.JSONDecodeError:
                logger.warning("Rejected malformed request body", session_id=session_id)
                return JSONResponse(parse_error_envelope(), status_code=400)

            transport = self.sessions.get(session_id)
            if transport is not None:
                await transport.handle_request(scope, receive, send, body=body)
                return None

            rpc_method = message.get("method") if isinstance(message, dict) else None
            if session_id is not None:
                logger.info("Unknown session id, opening a new session", session_id=session_id)
                scope = without_session_header(scope)
            await self._open_session(scope, receive, send, body, rpc_method)
            return None

        if method == "DELETE":
            transport = self.sessions.get(session_id)
            if transport is None:
                return PlainTextResponse("Session not found", status_code=404)
            await transport.handle_request(scope, receive, send)
            self.sessions.remove(session_id)
            await transport.close()
            return None

        return not_found()

    async def _open_session(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
        body: bytes,
        rpc_method: str | None,
    ) -> None:
        if self._task_group is None:
            raise RuntimeError("RequestRouter is not running. Wrap the app lifespan in run().")

        transport = self._transport_factory(self.sessions.mint_id())
        transport.subscribe(self._on_transport_event)
        await transport.start(self._task_group)
        await transport.handle_request(scope, receive, send, body=body)

        if transport.session_id is None:
            logger.info("Request did not open a session", method=rpc_method)
            await transport.close()

    def _on_transport_event(self, transport: SessionTransport, event: TransportEvent) -> None:
        if event is TransportEvent.INITIALIZED:
            self.sessions.create(transport)


__all__ = [
    "CONTENT_TYPES",
    "CORS_HEADERS",
    "RequestRouter",
    "SESSION_HEADER",
    "without_session_header",
]
