"""Secrets and authentication configuration."""

from __future__ import annotations

# Bearer credential for the upstream realtime API.
ENV_OPENAI_API_KEY = "OPENAI_API_KEY"

# Optional shared key downstream clients must present. Unset means open access.
ENV_RELAY_API_KEY = "RELAY_API_KEY"

__all__ = ["ENV_OPENAI_API_KEY", "ENV_RELAY_API_KEY"]
