"""Send and error helpers for the downstream WebSocket."""

from __future__ import annotations

import logging
from typing import Any

import orjson
from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from audio_relay.config.websocket import WS_KEY_CODE, WS_KEY_TYPE, WS_KEY_MESSAGE

logger = logging.getLogger(__name__)


def is_connected(ws: WebSocket) -> bool:
    return (
        getattr(ws, "client_state", None) == WebSocketState.CONNECTED
        and getattr(ws, "application_state", None) == WebSocketState.CONNECTED
    )


def build_error_message(code: str, message: str) -> dict[str, Any]:
    return {WS_KEY_TYPE: "error", WS_KEY_CODE: code, WS_KEY_MESSAGE: message}


async def safe_send_text(ws: WebSocket, text: str) -> bool:
    try:
        await ws.send_text(text)
    except WebSocketDisconnect:
        return False
    except Exception:
        logger.debug("WebSocket send failed", exc_info=True)
        return False
    return True


async def safe_send_json(ws: WebSocket, data: dict[str, Any]) -> bool:
    return await safe_send_text(ws, orjson.dumps(data).decode("utf-8"))


async def send_error(ws: WebSocket, *, error_code: str, message: str) -> bool:
    return await safe_send_json(ws, build_error_message(error_code, message))


async def reject_connection(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    close_code: int,
) -> None:
    # Accept so we can send a structured error, then close.
    try:
        await ws.accept()
    except Exception:
        return
    await send_error(ws, error_code=error_code, message=message)
    try:
        await ws.close(code=close_code, reason=message)
    except Exception:
        return


__all__ = [
    "build_error_message",
    "is_connected",
    "reject_connection",
    "safe_send_json",
    "safe_send_text",
    "send_error",
]
