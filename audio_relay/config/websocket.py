"""WebSocket protocol configuration and constants."""

from __future__ import annotations

ENV_WS_ENDPOINT_PATH = "WS_ENDPOINT_PATH"
DEFAULT_WS_ENDPOINT_PATH = "/"

ENV_RELAY_HOST = "RELAY_HOST"
DEFAULT_RELAY_HOST = "0.0.0.0"  # noqa: S104
ENV_RELAY_PORT = "RELAY_PORT"
DEFAULT_RELAY_PORT = 3000

# Message keys
WS_KEY_TYPE = "type"
WS_KEY_TEXT = "text"
WS_KEY_CODE = "code"
WS_KEY_MESSAGE = "message"

# Close codes
WS_CLOSE_UNAUTHORIZED_CODE = 4001
WS_CLOSE_BUSY_CODE = 4002
WS_CLOSE_UPSTREAM_CLOSED_CODE = 4003
WS_CLOSE_BACKLOG_CODE = 4008

WS_CLOSE_UPSTREAM_CLOSED_REASON = "upstream closed"
WS_CLOSE_BACKLOG_REASON = "audio backlog exceeded"

# Errors (code values on rejection frames)
WS_ERROR_AUTH_FAILED = "authentication_failed"
WS_ERROR_SERVER_AT_CAPACITY = "server_at_capacity"

__all__ = [
    "DEFAULT_RELAY_HOST",
    "DEFAULT_RELAY_PORT",
    "DEFAULT_WS_ENDPOINT_PATH",
    "ENV_RELAY_HOST",
    "ENV_RELAY_PORT",
    "ENV_WS_ENDPOINT_PATH",
    "WS_CLOSE_BACKLOG_CODE",
    "WS_CLOSE_BACKLOG_REASON",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_UNAUTHORIZED_CODE",
    "WS_CLOSE_UPSTREAM_CLOSED_CODE",
    "WS_CLOSE_UPSTREAM_CLOSED_REASON",
    "WS_ERROR_AUTH_FAILED",
    "WS_ERROR_SERVER_AT_CAPACITY",
    "WS_KEY_CODE",
    "WS_KEY_MESSAGE",
    "WS_KEY_TEXT",
    "WS_KEY_TYPE",
]
