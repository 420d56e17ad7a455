"""Realtime protocol message builders and event type names."""

from __future__ import annotations

import base64
from typing import Any
from collections.abc import Sequence

from audio_relay.config.websocket import WS_KEY_TEXT, WS_KEY_TYPE

# Outbound (relay -> upstream)
EVENT_AUDIO_APPEND = "input_audio_buffer.append"
EVENT_AUDIO_COMMIT = "input_audio_buffer.commit"
EVENT_RESPONSE_CREATE = "response.create"

# Inbound (upstream -> relay)
EVENT_AUDIO_COMMITTED = "input_audio_buffer.committed"
EVENT_RESPONSE_CREATED = "response.created"
EVENT_TRANSCRIPT_DONE = "response.audio_transcript.done"
EVENT_RESPONSE_DONE = "response.done"
EVENT_ERROR = "error"

# Outbound (relay -> downstream)
DOWNSTREAM_TRANSCRIPT = "transcript"


def build_append_event(audio: bytes) -> dict[str, Any]:
    return {
        "type": EVENT_AUDIO_APPEND,
        "audio": base64.b64encode(audio).decode("ascii"),
    }


def build_commit_event() -> dict[str, Any]:
    return {"type": EVENT_AUDIO_COMMIT}


def build_response_create_event(modalities: Sequence[str]) -> dict[str, Any]:
    return {
        "type": EVENT_RESPONSE_CREATE,
        "response": {"modalities": list(modalities)},
    }


def build_transcript_message(text: str) -> dict[str, Any]:
    return {WS_KEY_TYPE: DOWNSTREAM_TRANSCRIPT, WS_KEY_TEXT: text}


def error_message(event: dict[str, Any]) -> str:
    """Pull a readable message out of an upstream ``error`` event."""
    err = event.get("error")
    if isinstance(err, dict):
        message = err.get("message")
        if isinstance(message, str) and message:
            return message
    if isinstance(err, str) and err:
        return err
    return "unknown error"


__all__ = [
    "DOWNSTREAM_TRANSCRIPT",
    "EVENT_AUDIO_APPEND",
    "EVENT_AUDIO_COMMIT",
    "EVENT_AUDIO_COMMITTED",
    "EVENT_ERROR",
    "EVENT_RESPONSE_CREATE",
    "EVENT_RESPONSE_CREATED",
    "EVENT_RESPONSE_DONE",
    "EVENT_TRANSCRIPT_DONE",
    "build_append_event",
    "build_commit_event",
    "build_response_create_event",
    "build_transcript_message",
    "error_message",
]
