"""Dispatch handlers for upstream realtime events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from collections.abc import Callable, Awaitable

from .protocol import (
    EVENT_ERROR,
    EVENT_RESPONSE_DONE,
    EVENT_AUDIO_COMMITTED,
    EVENT_TRANSCRIPT_DONE,
    EVENT_RESPONSE_CREATED,
    error_message,
)

if TYPE_CHECKING:
    from .session import RelaySession

logger = logging.getLogger(__name__)

HandlerFn = Callable[["RelaySession", dict[str, Any]], Awaitable[None]]


async def _handle_committed(session: RelaySession, _event: dict[str, Any]) -> None:
    logger.debug("session %s: audio buffer committed", session.session_id)
    await session.request_response()


async def _handle_response_created(session: RelaySession, _event: dict[str, Any]) -> None:
    logger.debug("session %s: response creation acknowledged", session.session_id)


async def _handle_transcript_done(session: RelaySession, event: dict[str, Any]) -> None:
    transcript = event.get("transcript")
    if not isinstance(transcript, str):
        logger.warning("session %s: transcript event without text; dropping", session.session_id)
        return
    logger.info("session %s: transcript received (%d chars)", session.session_id, len(transcript))
    await session.send_transcript(transcript)


async def _handle_response_done(session: RelaySession, _event: dict[str, Any]) -> None:
    logger.debug("session %s: response done", session.session_id)
    session.tracker.finish()


async def _handle_error(session: RelaySession, event: dict[str, Any]) -> None:
    # No retry: the next committed segment gets a fresh response request.
    logger.warning("session %s: upstream error: %s", session.session_id, error_message(event))
    session.state.upstream_errors += 1
    session.tracker.finish()


UPSTREAM_HANDLERS: dict[str, HandlerFn] = {
    EVENT_AUDIO_COMMITTED: _handle_committed,
    EVENT_RESPONSE_CREATED: _handle_response_created,
    EVENT_TRANSCRIPT_DONE: _handle_transcript_done,
    EVENT_RESPONSE_DONE: _handle_response_done,
    EVENT_ERROR: _handle_error,
}

__all__ = ["UPSTREAM_HANDLERS"]
