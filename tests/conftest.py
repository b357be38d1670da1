"""
InkMatch Test Configuration

Shared fakes and fixtures:
- FakeTransport: scripted session transport (no MCP SDK involved)
- FakeClock: manual time for the job poller
- app/serve: the full router app over httpx's ASGI transport
"""

from __future__ import annotations

import contextlib
from typing import Any

import httpx
import orjson
import pytest

from inkmatch.config.settings import Settings, set_settings
from inkmatch.generation.service import ImageGenerator
from inkmatch.mcp.transport import BaseSessionTransport, TransportEvent

REPLICATE_URL = "https://api.replicate.test/v1/predictions"


class FakeTransport(BaseSessionTransport):
    """Transport double that confirms its session on the first POST it answers.

    With `confirm=False` it answers every request with a 400 and never
    confirms, like a transport handed a non-initialize first request.
    """

    def __init__(self, session_id: str, *, confirm: bool = True):
        super().__init__(session_id)
        self.confirm = confirm
        self.started = False
        self.close_calls = 0
        self.requests: list[tuple[str, bytes]] = []
        self.headers: list[dict[str, str]] = []

    async def start(self, task_group) -> None:
        self.started = True

    async def handle_request(self, scope, receive, send, body=None) -> None:
        method = scope["method"]
        if body is None:
            body = b""
            more = True
            while more:
                message = await receive()
                body += message.get("body", b"")
                more = message.get("more_body", False)
        self.requests.append((method, body))
        self.headers.append({k.decode().lower(): v.decode() for k, v in scope["headers"]})

        if self.confirm and method == "POST":
            self._emit(TransportEvent.INITIALIZED)

        if self.initialized:
            status = 200
            headers = [
                (b"content-type", b"application/json"),
                (b"mcp-session-id", self.proposed_session_id.encode()),
            ]
            payload = {"handled": method, "session": self.proposed_session_id}
        else:
            status = 400
            headers = [(b"content-type", b"application/json")]
            payload = {"handled": method, "session": None}

        await send({"type": "http.response.start", "status": status, "headers": headers})
        await send({"type": "http.response.body", "body": orjson.dumps(payload)})

    async def close(self) -> None:
        self.close_calls += 1
        self._emit(TransportEvent.CLOSED)


class FakeTransportFactory:
    """Records every transport the router mints."""

    def __init__(self, *, confirm: bool = True):
        self.confirm = confirm
        self.created: list[FakeTransport] = []

    def __call__(self, session_id: str) -> FakeTransport:
        transport = FakeTransport(session_id, confirm=self.confirm)
        self.created.append(transport)
        return transport


class FakeClock:
    """Manual clock: sleeping advances time instantly."""

    def __init__(self, start: float = 0.0):
        self.current = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds


@pytest.fixture(autouse=True)
def clean_settings():
    """Reset the process-wide settings around every test."""
    set_settings(None)
    yield
    set_settings(None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def static_dir(tmp_path):
    """Static root with one file of each served type."""
    root = tmp_path / "public"
    root.mkdir()
    (root / "inkmatch-widget.html").write_text("<html>widget</html>", encoding="utf-8")
    (root / "app.css").write_text("body {}", encoding="utf-8")
    (root / "app.js").write_text("console.log(1)", encoding="utf-8")
    (root / "notes.txt").write_text("notes", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")
    return root


@pytest.fixture
def settings(static_dir):
    return Settings(static_dir=static_dir, replicate_api_token=None)


@pytest.fixture
def disabled_generator():
    return ImageGenerator(None, REPLICATE_URL)


@pytest.fixture
def transport_factory():
    return FakeTransportFactory()


@pytest.fixture
def app(settings, transport_factory, disabled_generator):
    from inkmatch.app import create_app

    return create_app(settings, transport_factory=transport_factory, generator=disabled_generator)


@pytest.fixture
def serve(app):
    """Factory for an HTTP client bound to a running app.

    The lifespan owns an anyio task group, so it is entered inside the test
    body rather than across fixture setup and teardown.
    """

    @contextlib.asynccontextmanager
    async def running():
        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                yield client

    return running
