"""Runtime dependency construction (relay bridge + admission control)."""

from __future__ import annotations

import logging

from audio_relay.state import RuntimeDeps
from audio_relay.state.settings import AppSettings
from audio_relay.realtime.bridge import RelayBridge
from audio_relay.config.secrets import ENV_OPENAI_API_KEY
from audio_relay.handlers.sessions import SessionRegistry

from .settings_loader import load_settings

logger = logging.getLogger(__name__)


def build_runtime_deps(settings: AppSettings | None = None) -> RuntimeDeps:
    settings = settings or load_settings()

    if not settings.upstream.api_key:
        logger.warning("%s is not set; upstream handshakes will be rejected", ENV_OPENAI_API_KEY)

    relay_bridge = RelayBridge(upstream=settings.upstream, streaming=settings.streaming)
    sessions = SessionRegistry(max_sessions=settings.limits.max_concurrent_connections)

    logger.info(
        "relay: upstream=%s commit_interval=%.3fs max_pending_audio_bytes=%s",
        settings.upstream.url,
        settings.streaming.commit_interval_s,
        settings.streaming.max_pending_audio_bytes or "unbounded",
    )

    return RuntimeDeps(
        sessions=sessions,
        relay_bridge=relay_bridge,
        settings=settings,
    )


__all__ = ["RuntimeDeps", "build_runtime_deps"]
