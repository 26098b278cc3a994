#!/usr/bin/env python3
# src/mcp_openapi/protocol/session_manager.py
"""
MCP session lifecycle management for the HTTP transport.

Sessions are created by ``initialize``, refreshed by every later call and
removed by a periodic sweep once idle for longer than the TTL. All access to
the session table goes through one lock.
"""

import asyncio
import logging
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..auth import AuthContext
from ..constants import SESSION_SWEEP_INTERVAL_SECONDS, SESSION_TTL_SECONDS
from ..errors import InvalidSession, MissingSession

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """MCP session state"""

    session_id: str
    client_info: dict[str, Any]
    protocol_version: str
    created_at: float
    last_activity: float
    auth_context: AuthContext = field(default_factory=AuthContext)

    def idle_time(self, now: float) -> float:
        return now - self.last_activity

    def is_expired(self, now: float, ttl: float) -> bool:
        return self.idle_time(now) > ttl


class SessionManager:
    """Manage MCP sessions."""

    def __init__(
        self,
        ttl: float = SESSION_TTL_SECONDS,
        sweep_interval: float = SESSION_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create_session(
        self, client_info: dict[str, Any], protocol_version: str, auth_context: AuthContext | None = None
    ) -> str:
        """Create a new session."""
        now = self._clock()
        session_id = str(uuid.uuid4())
        session = Session(
            session_id=session_id,
            client_info=client_info,
            protocol_version=protocol_version,
            created_at=now,
            last_activity=now,
            auth_context=auth_context or AuthContext(),
        )
        with self._lock:
            self._sessions[session_id] = session
        logger.debug(f"Created session {session_id[:8]}... for {client_info.get('name', 'unknown')}")
        return session_id

    def get_session(self, session_id: str) -> Session | None:
        """Get session by ID without refreshing it."""
        with self._lock:
            return self._sessions.get(session_id)

    def touch(self, session_id: str | None) -> Session:
        """Look up a session and refresh its activity.

        Raises:
            MissingSession: If no session id was presented.
            InvalidSession: If the id is unknown or the session has expired.
        """
        if not session_id:
            raise MissingSession()
        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.is_expired(now, self.ttl):
                raise InvalidSession(session_id)
            session.last_activity = now
            return session

    def sweep(self) -> int:
        """Remove sessions idle longer than the TTL. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if s.is_expired(now, self.ttl)]
            for sid in expired:
                del self._sessions[sid]
        for sid in expired:
            logger.debug(f"Cleaned up expired session {sid[:8]}...")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    # ------------------------------------------------------------------
    # Periodic sweep
    # ------------------------------------------------------------------

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            removed = self.sweep()
            if removed:
                logger.info(f"Swept {removed} expired session(s)")

    def start_sweeper(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
