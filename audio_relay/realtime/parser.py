"""Upstream event parsing/validation."""

from __future__ import annotations

from typing import Any

import orjson


def parse_upstream_event(raw: str | bytes) -> dict[str, Any]:
    try:
        event = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc

    if not isinstance(event, dict):
        raise ValueError("event must be a JSON object")

    event_type = event.get("type")
    if not isinstance(event_type, str) or not event_type.strip():
        raise ValueError("event missing non-empty 'type'")

    event["type"] = event_type.strip()
    return event


__all__ = ["parse_upstream_event"]
