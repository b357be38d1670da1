"""
End-to-end session lifecycle over the real MCP Streamable HTTP transport.

JSON response mode is used because httpx's ASGI transport buffers whole
responses, which an open SSE stream would never finish.
"""

from __future__ import annotations

import contextlib

import httpx
import pytest

from inkmatch.app import create_app
from inkmatch.config.settings import Settings

pytestmark = pytest.mark.integration

PROTOCOL_VERSION = "2025-03-26"
BASE_HEADERS = {
    "accept": "application/json, text/event-stream",
    "content-type": "application/json",
}


def rpc(method: str, params: dict | None = None, id: int | None = 1) -> dict:
    message = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        message["params"] = params
    if id is not None:
        message["id"] = id
    return message


class McpClient:
    """Minimal JSON-RPC client over one MCP session."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http
        self.session_id: str | None = None
        self._next_id = 1

    def headers(self) -> dict[str, str]:
        headers = dict(BASE_HEADERS)
        if self.session_id:
            headers["mcp-session-id"] = self.session_id
            headers["mcp-protocol-version"] = PROTOCOL_VERSION
        return headers

    async def initialize(self) -> dict:
        response = await self.http.post(
            "/mcp",
            json=rpc(
                "initialize",
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {},
                    "clientInfo": {"name": "inkmatch-tests", "version": "0.0.1"},
                },
            ),
            headers=self.headers(),
        )
        assert response.status_code == 200, response.text
        self.session_id = response.headers["mcp-session-id"]

        notified = await self.http.post(
            "/mcp", json=rpc("notifications/initialized", id=None), headers=self.headers()
        )
        assert notified.status_code == 202
        return response.json()["result"]

    async def request(self, method: str, params: dict | None = None) -> httpx.Response:
        self._next_id += 1
        return await self.http.post(
            "/mcp", json=rpc(method, params, id=self._next_id), headers=self.headers()
        )

    async def call(self, method: str, params: dict | None = None) -> dict:
        response = await self.request(method, params)
        assert response.status_code == 200, response.text
        body = response.json()
        assert "error" not in body, body
        return body["result"]


@pytest.fixture
def app(static_dir, disabled_generator):
    settings = Settings(static_dir=static_dir, json_response=True, replicate_api_token=None)
    return create_app(settings, generator=disabled_generator)


@pytest.fixture
def session_client(app):
    @contextlib.asynccontextmanager
    async def running():
        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
                yield McpClient(http)

    return running


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_initialize_registers_session(self, session_client, app):
        async with session_client() as client:
            result = await client.initialize()

            assert result["serverInfo"]["name"] == "inkmatch"
            assert result["serverInfo"]["version"] == "1.0.0"
            assert client.session_id.startswith("inkmatch-")
            assert client.session_id in app.state.sessions

    @pytest.mark.asyncio
    async def test_tools_listed(self, session_client):
        async with session_client() as client:
            await client.initialize()
            result = await client.call("tools/list")

        tools = {tool["name"]: tool for tool in result["tools"]}
        assert set(tools) == {
            "generate_tattoo_preview",
            "explore_tattoo_styles",
            "recommend_tattoo_style",
        }
        preview = tools["generate_tattoo_preview"]
        assert preview["inputSchema"]["required"] == ["style"]
        assert preview["_meta"]["openai/outputTemplate"] == "ui://widget/inkmatch.html"
        assert preview["annotations"]["openWorldHint"] is True

    @pytest.mark.asyncio
    async def test_preview_without_token_degrades(self, session_client):
        async with session_client() as client:
            await client.initialize()
            result = await client.call(
                "tools/call",
                {"name": "generate_tattoo_preview", "arguments": {"style": "minimalist"}},
            )

        assert result.get("isError") is not True
        structured = result["structuredContent"]
        assert structured["generated"] is False
        assert structured["image_url"] is None
        assert "ref=chatgpt" in structured["inkmatch_url"]
        assert "style=minimalist" in structured["inkmatch_url"]
        assert result["content"][0]["text"].startswith("I've captured your preferences")

    @pytest.mark.asyncio
    async def test_invalid_arguments_are_tool_errors(self, session_client):
        async with session_client() as client:
            await client.initialize()
            result = await client.call(
                "tools/call",
                {"name": "generate_tattoo_preview", "arguments": {"style": "pointillism"}},
            )
        assert result["isError"] is True

    @pytest.mark.asyncio
    async def test_widget_resource(self, session_client):
        async with session_client() as client:
            await client.initialize()
            listed = await client.call("resources/list")
            read = await client.call("resources/read", {"uri": "ui://widget/inkmatch.html"})

        assert [r["uri"] for r in listed["resources"]] == ["ui://widget/inkmatch.html"]
        contents = read["contents"][0]
        assert contents["mimeType"] == "text/html+skybridge"
        assert contents["text"] == "<html>widget</html>"
        assert contents["_meta"]["openai/widgetPrefersBorder"] is True
        assert contents["_meta"]["openai/widgetCSP"]["image_domains"] == [
            "https://replicate.delivery",
            "https://*.replicate.delivery",
        ]

    @pytest.mark.asyncio
    async def test_delete_ends_session(self, session_client, app):
        async with session_client() as client:
            await client.initialize()
            session_id = client.session_id

            response = await client.http.delete("/mcp", headers=client.headers())
            assert response.status_code == 200
            assert session_id not in app.state.sessions

            stream = await client.http.get("/mcp", headers=client.headers())
            assert stream.status_code == 400

            again = await client.http.delete("/mcp", headers=client.headers())
            assert again.status_code == 404

            # A non-initialize POST on the dead id cannot open a session
            stale = await client.request("tools/list")
            assert stale.status_code == 400
            assert len(app.state.sessions) == 0

    @pytest.mark.asyncio
    async def test_initialize_with_stale_header_opens_new_session(self, session_client, app):
        """A client still sending a dead session id can start over."""
        async with session_client() as client:
            await client.initialize()
            old_id = client.session_id
            await client.http.delete("/mcp", headers=client.headers())

            # initialize() sends the old id in its headers
            result = await client.initialize()
            assert result["serverInfo"]["name"] == "inkmatch"
            assert client.session_id != old_id
            assert list(app.state.sessions.ids()) == [client.session_id]

            listed = await client.call("tools/list")
            assert len(listed["tools"]) == 3

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, session_client, app):
        async with session_client() as first:
            await first.initialize()
            second = McpClient(first.http)
            await second.initialize()

            assert first.session_id != second.session_id
            assert len(app.state.sessions) == 2

            await first.http.delete("/mcp", headers=first.headers())
            result = await second.call("tools/list")
            assert len(result["tools"]) == 3

    @pytest.mark.asyncio
    async def test_non_initialize_first_request_opens_nothing(self, session_client, app):
        async with session_client() as client:
            response = await client.request("tools/list")
            assert response.status_code == 400
            assert len(app.state.sessions) == 0

    @pytest.mark.asyncio
    async def test_shutdown_closes_sessions(self, session_client, app):
        async with session_client() as client:
            await client.initialize()
        assert len(app.state.sessions) == 0
