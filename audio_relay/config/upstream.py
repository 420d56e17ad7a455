"""Upstream realtime API connection settings (env names and defaults only)."""

from __future__ import annotations

ENV_OPENAI_REALTIME_URL = "OPENAI_REALTIME_URL"
DEFAULT_OPENAI_REALTIME_URL = "wss://api.openai.com/v1/realtime"

# Appended to the URL as ?model= unless the URL already carries one.
ENV_OPENAI_REALTIME_MODEL = "OPENAI_REALTIME_MODEL"
DEFAULT_OPENAI_REALTIME_MODEL = "gpt-4o-realtime-preview-2024-10-01"

ENV_OPENAI_BETA_HEADER = "OPENAI_BETA_HEADER"
DEFAULT_OPENAI_BETA_HEADER = "realtime=v1"

ENV_OPENAI_REALTIME_OPEN_TIMEOUT_S = "OPENAI_REALTIME_OPEN_TIMEOUT_S"
DEFAULT_OPENAI_REALTIME_OPEN_TIMEOUT_S = 10.0

HEADER_AUTHORIZATION = "Authorization"
HEADER_OPENAI_BETA = "OpenAI-Beta"

__all__ = [
    "DEFAULT_OPENAI_BETA_HEADER",
    "DEFAULT_OPENAI_REALTIME_MODEL",
    "DEFAULT_OPENAI_REALTIME_OPEN_TIMEOUT_S",
    "DEFAULT_OPENAI_REALTIME_URL",
    "ENV_OPENAI_BETA_HEADER",
    "ENV_OPENAI_REALTIME_MODEL",
    "ENV_OPENAI_REALTIME_OPEN_TIMEOUT_S",
    "ENV_OPENAI_REALTIME_URL",
    "HEADER_AUTHORIZATION",
    "HEADER_OPENAI_BETA",
]
