"""Client connection to the upstream realtime API."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import AsyncIterator

import orjson
from websockets.protocol import State
from websockets.exceptions import WebSocketException, ConnectionClosedError
from websockets.asyncio.client import ClientConnection, connect

from audio_relay.state.settings import UpstreamSettings
from audio_relay.config.upstream import HEADER_OPENAI_BETA, HEADER_AUTHORIZATION

logger = logging.getLogger(__name__)


def build_headers(settings: UpstreamSettings) -> list[tuple[str, str]]:
    headers: list[tuple[str, str]] = []
    if settings.api_key:
        headers.append((HEADER_AUTHORIZATION, f"Bearer {settings.api_key}"))
    if settings.beta_header:
        headers.append((HEADER_OPENAI_BETA, settings.beta_header))
    return headers


class UpstreamConnection:
    """One websockets client socket to the realtime API.

    Outbound events are JSON-encoded with orjson and serialized through a FIFO
    lock so appends and commits reach the peer in call order.
    """

    def __init__(self, settings: UpstreamSettings) -> None:
        self._settings = settings
        self._conn: ClientConnection | None = None
        self._send_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None and self._conn.state is State.OPEN

    async def connect(self) -> None:
        if self._conn is not None:
            return
        self._conn = await connect(
            self._settings.url,
            additional_headers=build_headers(self._settings),
            open_timeout=self._settings.open_timeout_s,
            max_size=None,
        )
        logger.info("upstream: connected to %s", self._settings.url)

    async def send_event(self, event: dict[str, Any]) -> bool:
        if self._conn is None:
            return False
        async with self._send_lock:
            try:
                await self._conn.send(orjson.dumps(event).decode("utf-8"))
            except WebSocketException:
                logger.warning("upstream: send of %s failed; socket is closed", event.get("type"))
                return False
        return True

    async def messages(self) -> AsyncIterator[str | bytes]:
        if self._conn is None:
            return
        try:
            async for message in self._conn:
                yield message
        except ConnectionClosedError as exc:
            logger.warning("upstream: connection lost: %s", exc)

    async def close(self) -> None:
        if self._conn is None:
            return
        with contextlib.suppress(Exception):
            await self._conn.close()


__all__ = ["UpstreamConnection", "build_headers"]
