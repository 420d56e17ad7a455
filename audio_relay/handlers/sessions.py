"""Admission control and shutdown for live relay sessions."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from audio_relay.realtime.session import RelaySession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Tracks admitted downstream sockets and the session each one owns."""

    def __init__(self, *, max_sessions: int) -> None:
        self._max = max(1, int(max_sessions))
        self._lock = asyncio.Lock()
        self._admitted: set[int] = set()
        self._sessions: dict[str, RelaySession] = {}

    async def admit(self, ws: Any) -> bool:
        """Attempt to admit a websocket connection (without accepting it)."""
        key = id(ws)
        async with self._lock:
            if len(self._admitted) >= self._max:
                return False
            self._admitted.add(key)
            return True

    async def register(self, session: RelaySession) -> None:
        async with self._lock:
            self._sessions[session.session_id] = session

    async def release(self, ws: Any, session: RelaySession | None = None) -> None:
        async with self._lock:
            self._admitted.discard(id(ws))
            if session is not None:
                self._sessions.pop(session.session_id, None)

    def get_session_count(self) -> int:
        return len(self._admitted)

    async def close_all(self) -> None:
        async with self._lock:
            sessions = list(self._sessions.values())
        for session in sessions:
            with contextlib.suppress(Exception):
                await session.close()
        if sessions:
            logger.info("closed %d relay sessions on shutdown", len(sessions))


__all__ = ["SessionRegistry"]
