"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import logging
import contextlib

from fastapi import WebSocket

from audio_relay.state import RuntimeDeps
from audio_relay.realtime import RelaySession
from audio_relay.config.websocket import (
    WS_CLOSE_BUSY_CODE,
    WS_ERROR_AUTH_FAILED,
    WS_CLOSE_UNAUTHORIZED_CODE,
    WS_ERROR_SERVER_AT_CAPACITY,
)

from .errors import reject_connection
from .auth import authenticate_websocket
from .message_loop import run_message_loop

logger = logging.getLogger(__name__)


async def _prepare_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> bool:
    if not await authenticate_websocket(ws, expected_api_key=runtime_deps.settings.auth.api_key):
        await reject_connection(
            ws,
            error_code=WS_ERROR_AUTH_FAILED,
            message=(
                "Authentication required. Provide valid API key via 'api_key' query parameter or 'X-API-Key' header."
            ),
            close_code=WS_CLOSE_UNAUTHORIZED_CODE,
        )
        return False

    if not await runtime_deps.sessions.admit(ws):
        await reject_connection(
            ws,
            error_code=WS_ERROR_SERVER_AT_CAPACITY,
            message="Server cannot accept new connections. Please try again later.",
            close_code=WS_CLOSE_BUSY_CODE,
        )
        return False

    try:
        await ws.accept()
    except Exception:
        with contextlib.suppress(Exception):
            await runtime_deps.sessions.release(ws)
        raise
    return True


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    session: RelaySession | None = None
    admitted = False
    try:
        if not await _prepare_connection(ws, runtime_deps):
            return
        admitted = True

        session = runtime_deps.relay_bridge.new_session(ws)
        await runtime_deps.sessions.register(session)
        logger.info(
            "WebSocket connection accepted session_id=%s. Active: %s",
            session.session_id,
            runtime_deps.sessions.get_session_count(),
        )

        await session.start()
        await run_message_loop(ws, session)
    finally:
        if session is not None:
            with contextlib.suppress(Exception):
                await session.close()

        if admitted:
            with contextlib.suppress(Exception):
                await runtime_deps.sessions.release(ws, session)
            logger.info(
                "WebSocket connection closed session_id=%s. Active: %s",
                session.session_id if session is not None else None,
                runtime_deps.sessions.get_session_count(),
            )


__all__ = ["handle_websocket_connection"]
