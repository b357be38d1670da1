"""
transport.py - Per-session protocol transport

The wire protocol (Streamable HTTP, JSON-RPC framing, SSE) is implemented by
the MCP SDK. This module wraps one SDK transport per session and exposes the
three things the router needs:

- hand an inbound request to the transport (`handle_request`)
- read the session id the transport settled on (`session_id`)
- observe lifecycle events (`subscribe`): INITIALIZED once the transport has
  confirmed the session to the client, CLOSED once it is terminated or its
  serving task ends. Each event fires at most once.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Protocol, runtime_checkable

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from starlette.types import Message, Receive, Scope, Send

from inkmatch.config.logging import get_logger

logger = get_logger("inkmatch.mcp.transport")


class TransportEvent(str, Enum):
    INITIALIZED = "initialized"
    CLOSED = "closed"


TransportListener = Callable[["SessionTransport", TransportEvent], None]


@runtime_checkable
class SessionTransport(Protocol):
    """What the router and the session registry know about a transport."""

    @property
    def session_id(self) -> str | None:
        """Session id once confirmed to the client, else None."""
        ...

    def subscribe(self, listener: TransportListener) -> None: ...

    async def start(self, task_group: TaskGroup) -> None:
        """Start serving the bound tool context in `task_group`."""
        ...

    async def handle_request(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
        body: bytes | None = None,
    ) -> None:
        """Serve one HTTP request. `body` replays an already-consumed request body."""
        ...

    async def close(self) -> None: ...


TransportFactory = Callable[[str], SessionTransport]


class BaseSessionTransport:
    """Listener bookkeeping shared by transport implementations."""

    def __init__(self, proposed_session_id: str):
        self.proposed_session_id = proposed_session_id
        self._listeners: list[TransportListener] = []
        self._fired: set[TransportEvent] = set()

    @property
    def initialized(self) -> bool:
        return TransportEvent.INITIALIZED in self._fired

    @property
    def closed(self) -> bool:
        return TransportEvent.CLOSED in self._fired

    @property
    def session_id(self) -> str | None:
        return self.proposed_session_id if self.initialized else None

    def subscribe(self, listener: TransportListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: TransportEvent) -> None:
        if event in self._fired:
            return
        self._fired.add(event)
        for listener in list(self._listeners):
            listener(self, event)


def replay_body(body: bytes, receive: Receive) -> Receive:
    """Receive callable that yields `body` first, then defers to `receive`."""
    delivered = False

    async def replay() -> Message:
        nonlocal delivered
        if not delivered:
            delivered = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class StreamableSessionTransport(BaseSessionTransport):
    """One MCP Streamable HTTP session backed by the SDK transport."""

    def __init__(
        self,
        session_id: str,
        server_factory: Callable[[], Server],
        *,
        json_response: bool = False,
    ):
        super().__init__(session_id)
        self._server_factory = server_factory
        self._http = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=json_response,
        )

    async def start(self, task_group: TaskGroup) -> None:
        await task_group.start(self._serve)

    async def _serve(self, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        server = self._server_factory()
        async with self._http.connect() as streams:
            read_stream, write_stream = streams
            task_status.started()
            try:
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options(),
                    stateless=False,
                )
            except Exception:
                logger.exception("Session crashed", session_id=self.proposed_session_id)
            finally:
                self._emit(TransportEvent.CLOSED)

    async def handle_request(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
        body: bytes | None = None,
    ) -> None:
        if body is not None:
            receive = replay_body(body, receive)
        await self._http.handle_request(scope, receive, self._watch_confirmation(send))

    def _watch_confirmation(self, send: Send) -> Send:
        # The SDK confirms a session by answering successfully with the
        # session header; error responses carry the header too.
        header = MCP_SESSION_ID_HEADER.lower().encode()

        async def watched_send(message: Message) -> None:
            if message["type"] == "http.response.start" and not self.initialized:
                status = message.get("status", 200)
                names = {name.lower() for name, _ in message.get("headers", [])}
                if 200 <= status < 300 and header in names:
                    self._emit(TransportEvent.INITIALIZED)
            await send(message)

        return watched_send

    async def close(self) -> None:
        if not self._http.is_terminated:
            await self._http.terminate()
        self._emit(TransportEvent.CLOSED)


def streamable_transport_factory(
    server_factory: Callable[[], Server],
    *,
    json_response: bool = False,
) -> TransportFactory:
    """Factory minting a transport bound to a fresh tool-serving context."""

    def create(session_id: str) -> SessionTransport:
        return StreamableSessionTransport(session_id, server_factory, json_response=json_response)

    return create


__all__ = [
    "BaseSessionTransport",
    "SessionTransport",
    "StreamableSessionTransport",
    "TransportEvent",
    "TransportFactory",
    "TransportListener",
    "replay_body",
    "streamable_transport_factory",
]
