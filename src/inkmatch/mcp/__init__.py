"""
inkmatch.mcp - MCP session layer

Modules:
    types: JSON-RPC error envelopes
    server: Tool-serving context (MCP low-level Server per session)
    transport: Per-session Streamable HTTP transport and lifecycle events
    sessions: Session registry
    router: Session-aware HTTP request router
"""

from .router import RequestRouter
from .server import create_mcp_server, load_widget
from .sessions import Session, SessionRegistry
from .transport import (
    SessionTransport,
    StreamableSessionTransport,
    TransportEvent,
    streamable_transport_factory,
)

__all__ = [
    "RequestRouter",
    "Session",
    "SessionRegistry",
    "SessionTransport",
    "StreamableSessionTransport",
    "TransportEvent",
    "create_mcp_server",
    "load_widget",
    "streamable_transport_factory",
]
