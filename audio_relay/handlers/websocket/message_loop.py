"""Downstream receive loop: binary audio in, everything else ignored."""

from __future__ import annotations

import logging

from fastapi import WebSocket, WebSocketDisconnect

from audio_relay.errors import AudioBacklogError
from audio_relay.realtime import RelaySession
from audio_relay.config.websocket import WS_CLOSE_BACKLOG_CODE, WS_CLOSE_BACKLOG_REASON

logger = logging.getLogger(__name__)


async def run_message_loop(ws: WebSocket, session: RelaySession) -> None:
    try:
        while not session.closed:
            message = await ws.receive()
            if message.get("type") == "websocket.disconnect":
                logger.info("session %s: client disconnected", session.session_id)
                return

            data = message.get("bytes")
            if data is None:
                logger.warning("session %s: ignoring non-binary message from client", session.session_id)
                continue

            try:
                await session.handle_audio(data)
            except AudioBacklogError as exc:
                logger.warning(
                    "session %s: audio backlog exceeded (%d pending + %d > %d bytes); disconnecting client",
                    session.session_id,
                    exc.pending_bytes,
                    exc.chunk_bytes,
                    exc.limit_bytes,
                )
                await session.close(code=WS_CLOSE_BACKLOG_CODE, reason=WS_CLOSE_BACKLOG_REASON)
                return
    except WebSocketDisconnect:
        logger.info("session %s: client disconnected", session.session_id)
    except RuntimeError:
        # Starlette raises once the socket is closed underneath a pending receive.
        logger.debug("session %s: receive on closed socket", session.session_id, exc_info=True)
    finally:
        await session.close()


__all__ = ["run_message_loop"]
