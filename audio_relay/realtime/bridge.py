"""Factories for wiring downstream clients to upstream realtime sessions."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import WebSocket

from audio_relay.state import SessionState
from audio_relay.state.settings import UpstreamSettings, StreamingSettings

from .session import RelaySession
from .upstream import UpstreamConnection
from .transport import Upstream

UpstreamFactory = Callable[[UpstreamSettings], Upstream]


class RelayBridge:
    """Builds one ``RelaySession`` (and one fresh upstream socket) per client."""

    def __init__(
        self,
        *,
        upstream: UpstreamSettings,
        streaming: StreamingSettings,
        upstream_factory: UpstreamFactory = UpstreamConnection,
    ) -> None:
        self._upstream_settings = upstream
        self._streaming = streaming
        self._upstream_factory = upstream_factory

    def new_session(self, ws: WebSocket, state: SessionState | None = None) -> RelaySession:
        return RelaySession(
            ws=ws,
            upstream=self._upstream_factory(self._upstream_settings),
            streaming=self._streaming,
            state=state,
        )


__all__ = ["RelayBridge"]
