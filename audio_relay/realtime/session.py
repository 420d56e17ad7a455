"""One downstream client wired to its own upstream realtime connection."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any

from fastapi import WebSocket

from audio_relay.state import SessionState
from audio_relay.state.settings import StreamingSettings
from audio_relay.config.websocket import WS_CLOSE_UPSTREAM_CLOSED_CODE, WS_CLOSE_UPSTREAM_CLOSED_REASON
from audio_relay.handlers.websocket.errors import is_connected, safe_send_json

from .buffer import FrameBuffer
from .parser import parse_upstream_event
from .tracker import ResponseTracker
from .transport import Upstream
from .dispatch import UPSTREAM_HANDLERS
from .protocol import (
    build_commit_event,
    build_append_event,
    build_transcript_message,
    build_response_create_event,
)
from .scheduler import CommitScheduler

logger = logging.getLogger(__name__)


class RelaySession:
    """Owns every piece of mutable relay state for a single downstream client.

    Lifecycle: ``start`` launches the commit scheduler and the upstream task
    (handshake then read loop). ``close`` is idempotent and is reached from the
    downstream receive loop, from the upstream task when the peer goes away, and
    on backlog overflow.
    """

    def __init__(
        self,
        *,
        ws: WebSocket,
        upstream: Upstream,
        streaming: StreamingSettings,
        state: SessionState | None = None,
    ) -> None:
        self.ws = ws
        self.upstream = upstream
        self.state = state or SessionState()
        self.buffer = FrameBuffer(max_pending_bytes=streaming.max_pending_audio_bytes)
        self.tracker = ResponseTracker()
        self.scheduler = CommitScheduler(self.commit_tick, interval_s=streaming.commit_interval_s)
        self.upstream_ready = asyncio.Event()

        self._modalities = tuple(streaming.response_modalities)
        self._upstream_task: asyncio.Task | None = None
        self._closed = False

    @property
    def session_id(self) -> str:
        return self.state.session_id

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def upstream_open(self) -> bool:
        return self.upstream_ready.is_set() and self.upstream.is_open

    async def start(self) -> None:
        self.scheduler.start()
        if self._upstream_task is None:
            self._upstream_task = asyncio.create_task(self._run_upstream())

    async def _run_upstream(self) -> None:
        try:
            await self.upstream.connect()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("session %s: upstream handshake failed", self.session_id, exc_info=True)
            await self.close_from_upstream()
            return

        await self._on_upstream_open()
        try:
            async for raw in self.upstream.messages():
                await self.handle_upstream_message(raw)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("session %s: upstream reader failed", self.session_id)

        logger.info("session %s: disconnected from upstream", self.session_id)
        await self.close_from_upstream()

    async def _on_upstream_open(self) -> None:
        logger.info(
            "session %s: upstream ready; %d bytes buffered during handshake",
            self.session_id,
            self.buffer.pending_bytes,
        )
        self.upstream_ready.set()
        await self.flush()

    async def handle_audio(self, chunk: Any) -> None:
        """Buffer a downstream frame and forward it if upstream is ready.

        Raises ``AudioBacklogError`` when the frame would exceed the backlog bound.
        """
        self.state.frames_received += 1
        if not self.buffer.append(chunk):
            self.state.frames_rejected += 1
            return
        await self.flush()

    async def flush(self) -> bool:
        data = self.buffer.flush_if_ready(self.upstream_open)
        if data is None:
            if len(self.buffer):
                logger.debug(
                    "session %s: waiting for upstream; %d bytes buffered",
                    self.session_id,
                    self.buffer.pending_bytes,
                )
            return False

        sent = await self.upstream.send_event(build_append_event(data))
        if sent:
            self.buffer.mark_appended()
            self.state.appends_sent += 1
            self.state.bytes_forwarded += len(data)
            logger.debug("session %s: appended %d bytes upstream", self.session_id, len(data))
        return sent

    async def commit_tick(self) -> None:
        if not self.upstream_open:
            logger.debug("session %s: upstream not open; skipping commit", self.session_id)
            return
        if not self.buffer.take_commit():
            return
        if await self.upstream.send_event(build_commit_event()):
            self.state.commits_sent += 1
            logger.debug("session %s: commit sent", self.session_id)

    async def handle_upstream_message(self, raw: str | bytes) -> None:
        try:
            event = parse_upstream_event(raw)
        except ValueError as exc:
            logger.warning("session %s: discarding upstream message: %s", self.session_id, exc)
            return

        handler = UPSTREAM_HANDLERS.get(event["type"])
        if handler is None:
            logger.warning("session %s: unhandled upstream event type %r", self.session_id, event["type"])
            return
        await handler(self, event)

    async def request_response(self) -> None:
        if not self.tracker.begin():
            return
        if await self.upstream.send_event(build_response_create_event(self._modalities)):
            self.state.responses_requested += 1
            logger.info("session %s: requested %s response", self.session_id, "+".join(self._modalities))
            return
        # Nothing reached the peer, so nothing is outstanding.
        self.tracker.finish()

    async def send_transcript(self, text: str) -> bool:
        if self._closed or not is_connected(self.ws):
            logger.debug("session %s: downstream gone; dropping transcript", self.session_id)
            return False
        sent = await safe_send_json(self.ws, build_transcript_message(text))
        if sent:
            self.state.transcripts_forwarded += 1
        return sent

    async def close_from_upstream(self) -> None:
        await self.close(code=WS_CLOSE_UPSTREAM_CLOSED_CODE, reason=WS_CLOSE_UPSTREAM_CLOSED_REASON)

    async def close(self, *, code: int | None = None, reason: str | None = None) -> None:
        """Tear the session down once; later calls are no-ops.

        With ``code`` set the downstream socket is closed too.
        """
        if self._closed:
            return
        self._closed = True

        await self.scheduler.stop()

        task = self._upstream_task
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.upstream.close()
        self.buffer.clear()

        if code is not None and is_connected(self.ws):
            with contextlib.suppress(Exception):
                await self.ws.close(code=code, reason=reason or "")

        logger.info("session closed: %s", self.state.summary())


__all__ = ["RelaySession"]
