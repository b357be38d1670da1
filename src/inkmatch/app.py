"""
app.py - ASGI application factory

Wires settings, the image generator, the tool registry, the widget and the
session router into one Starlette app. Every path goes to the router; the
lifespan owns the task group session transports run in.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator

from starlette.applications import Starlette
from starlette.routing import Route

from inkmatch.config.logging import get_logger
from inkmatch.config.settings import Settings, get_settings
from inkmatch.generation.service import ImageGenerator
from inkmatch.mcp.router import RequestRouter
from inkmatch.mcp.server import create_mcp_server, load_widget
from inkmatch.mcp.sessions import SessionRegistry
from inkmatch.mcp.transport import TransportFactory, streamable_transport_factory
from inkmatch.tools.tattoo import build_tool_registry

logger = get_logger("inkmatch.app")


def create_app(
    settings: Settings | None = None,
    *,
    transport_factory: TransportFactory | None = None,
    generator: ImageGenerator | None = None,
) -> Starlette:
    """Build the InkMatch ASGI app.

    Args:
        settings: Effective settings (process-wide settings when omitted)
        transport_factory: Override for the per-session transport
        generator: Override for the image generator
    """
    settings = settings or get_settings()
    generator = generator or ImageGenerator.from_settings(settings)

    if transport_factory is None:
        tools = build_tool_registry(
            generator,
            inkmatch_url=settings.inkmatch_url,
            model_version=settings.replicate_model_version,
        )
        widget_html = load_widget(settings.static_dir)
        transport_factory = streamable_transport_factory(
            lambda: create_mcp_server(tools, widget_html),
            json_response=settings.json_response,
        )

    sessions = SessionRegistry()
    router = RequestRouter(
        sessions,
        transport_factory,
        endpoint=settings.mcp_path,
        static_prefix=settings.static_prefix,
        static_dir=settings.static_dir,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        if not generator.enabled:
            logger.warning("REPLICATE_API_TOKEN not set - image generation will be disabled")
        logger.info(
            "InkMatch MCP server ready",
            endpoint=settings.mcp_path,
            static_dir=str(settings.static_dir),
        )
        async with router.run():
            yield

    app = Starlette(routes=[Route("/{path:path}", endpoint=router)], lifespan=lifespan)
    app.state.router = router
    app.state.sessions = sessions
    app.state.settings = settings
    return app


__all__ = ["create_app"]
