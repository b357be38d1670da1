"""
server.py - Tool-serving context for one MCP session

Binds a `ToolRegistry` (and the preview widget resource) to an MCP low-level
`Server`. A fresh server is built for every session; the registry behind it
is shared and read-only.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from pydantic import AnyUrl

from inkmatch import APP_NAME, __version__
from inkmatch.config.logging import get_logger
from inkmatch.tools.registry import ToolDescriptor, ToolRegistry
from inkmatch.tools.tattoo import WIDGET_URI

logger = get_logger("inkmatch.mcp.server")

WIDGET_FILENAME = "inkmatch-widget.html"
WIDGET_MIME_TYPE = "text/html+skybridge"
WIDGET_META: dict[str, Any] = {
    "openai/widgetPrefersBorder": True,
    "openai/widgetCSP": {
        "connect_domains": ["https://inkmatch.io"],
        "image_domains": ["https://replicate.delivery", "https://*.replicate.delivery"],
    },
}


def load_widget(static_dir: Path) -> str | None:
    """Read the preview widget HTML, or None when it is not shipped."""
    path = Path(static_dir) / WIDGET_FILENAME
    if not path.is_file():
        logger.warning("Widget HTML not found, widget resource disabled", path=str(path))
        return None
    return path.read_text(encoding="utf-8")


def to_mcp_tool(descriptor: ToolDescriptor) -> types.Tool:
    return types.Tool(
        name=descriptor.name,
        title=descriptor.title or None,
        description=descriptor.description,
        inputSchema=descriptor.input_schema,
        annotations=types.ToolAnnotations(**descriptor.annotations)
        if descriptor.annotations
        else None,
        _meta=dict(descriptor.meta) or None,
    )


def create_mcp_server(tools: ToolRegistry, widget_html: str | None = None) -> Server:
    """Create the MCP server exposing `tools` (and the widget, if given)."""
    server: Server = Server(APP_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [to_mcp_tool(descriptor) for descriptor in tools]

    # The registry validates against the declared shape itself
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> Any:
        result = await tools.dispatch(name, arguments)
        content = [types.TextContent(type="text", text=result.narration)]
        return content, result.structured

    if widget_html is not None:

        @server.list_resources()
        async def list_resources() -> list[types.Resource]:
            return [
                types.Resource(
                    uri=AnyUrl(WIDGET_URI),
                    name="inkmatch-widget",
                    description="AI tattoo design preview with personalized recommendations",
                    mimeType=WIDGET_MIME_TYPE,
                    _meta=WIDGET_META,
                )
            ]

        @server.read_resource()
        async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
            if str(uri) != WIDGET_URI:
                raise ValueError(f"Unknown resource: {uri}")
            return [
                ReadResourceContents(
                    content=widget_html, mime_type=WIDGET_MIME_TYPE, meta=WIDGET_META
                )
            ]

    return server


__all__ = [
    "WIDGET_FILENAME",
    "WIDGET_MIME_TYPE",
    "create_mcp_server",
    "load_widget",
    "to_mcp_tool",
]
