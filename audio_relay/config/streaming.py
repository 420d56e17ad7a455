"""Audio buffering and commit cadence settings (env names and defaults only)."""

from __future__ import annotations

ENV_RELAY_COMMIT_INTERVAL_S = "RELAY_COMMIT_INTERVAL_S"
DEFAULT_RELAY_COMMIT_INTERVAL_S = 0.5

# Upper bound on audio held while the upstream socket is not open. Past this the
# downstream producer is disconnected instead of growing the buffer forever.
ENV_RELAY_MAX_PENDING_AUDIO_BYTES = "RELAY_MAX_PENDING_AUDIO_BYTES"
DEFAULT_RELAY_MAX_PENDING_AUDIO_BYTES = 16 * 1024 * 1024

# Comma-separated list sent as response.modalities. Audio synthesis is not requested.
ENV_RELAY_RESPONSE_MODALITIES = "RELAY_RESPONSE_MODALITIES"
DEFAULT_RELAY_RESPONSE_MODALITIES: tuple[str, ...] = ("text",)

DISABLED_VALUES = {"0", "none", "null", "disabled", "disable", "off", "false"}

__all__ = [
    "DEFAULT_RELAY_COMMIT_INTERVAL_S",
    "DEFAULT_RELAY_MAX_PENDING_AUDIO_BYTES",
    "DEFAULT_RELAY_RESPONSE_MODALITIES",
    "DISABLED_VALUES",
    "ENV_RELAY_COMMIT_INTERVAL_S",
    "ENV_RELAY_MAX_PENDING_AUDIO_BYTES",
    "ENV_RELAY_RESPONSE_MODALITIES",
]
