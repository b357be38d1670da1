"""
sessions.py - Session registry

Maps session ids to their bound transport. One transport per id; a session
is reachable from the moment it is created until it is removed explicitly or
its transport reports CLOSED, whichever comes first.

All access happens on the event loop thread and every mutation is synchronous,
so no lock is needed.
"""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime

from inkmatch.config.logging import get_logger

from .transport import SessionTransport, TransportEvent

logger = get_logger("inkmatch.mcp.sessions")

_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 6


@dataclass
class Session:
    session_id: str
    transport: SessionTransport
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class SessionRegistry:
    """Owns session creation, lookup and eviction."""

    def __init__(self, prefix: str = "inkmatch"):
        self.prefix = prefix
        self._sessions: dict[str, Session] = {}

    def mint_id(self) -> str:
        """Generate a fresh session id: `<prefix>-<epoch ms>-<6 base36 chars>`.

        Candidates that collide with a live session are redrawn.
        """
        while True:
            suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
            candidate = f"{self.prefix}-{int(time.time() * 1000)}-{suffix}"
            if candidate not in self._sessions:
                return candidate

    def create(self, transport: SessionTransport) -> str:
        """Register a transport under the id it settled on.

        Raises:
            ValueError: the transport has no confirmed id, or the id is taken
        """
        session_id = transport.session_id
        if not session_id:
            raise ValueError("Transport has not confirmed a session id")
        if session_id in self._sessions:
            raise ValueError(f"Session id already registered: {session_id}")

        self._sessions[session_id] = Session(session_id=session_id, transport=transport)
        transport.subscribe(self._on_transport_event)
        logger.info("Session created", session_id=session_id, active=len(self._sessions))
        return session_id

    def get(self, session_id: str | None) -> SessionTransport | None:
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        return session.transport if session else None

    def session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def remove(self, session_id: str | None) -> None:
        """Evict a session. Removing an unknown id is a no-op."""
        if session_id and self._sessions.pop(session_id, None) is not None:
            logger.info("Session removed", session_id=session_id, active=len(self._sessions))

    def _on_transport_event(self, transport: SessionTransport, event: TransportEvent) -> None:
        if event is not TransportEvent.CLOSED:
            return
        session_id = transport.session_id
        session = self._sessions.get(session_id) if session_id else None
        # Only evict the entry still bound to this transport
        if session is not None and session.transport is transport:
            logger.debug("Transport closed, evicting session", session_id=session_id)
            self.remove(session_id)

    async def close_all(self) -> None:
        """Close every live transport (server shutdown)."""
        for session in list(self._sessions.values()):
            await session.transport.close()
        self._sessions.clear()

    def ids(self) -> list[str]:
        return list(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


__all__ = ["Session", "SessionRegistry"]
