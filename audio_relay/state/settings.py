"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AuthSettings:
    api_key: str


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    max_concurrent_connections: int


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    endpoint_path: str
    host: str
    port: int


@dataclass(frozen=True, slots=True)
class UpstreamSettings:
    url: str
    model: str
    api_key: str
    beta_header: str
    open_timeout_s: float


@dataclass(frozen=True, slots=True)
class StreamingSettings:
    commit_interval_s: float
    max_pending_audio_bytes: int
    response_modalities: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AppSettings:
    auth: AuthSettings
    limits: LimitsSettings
    websocket: WebSocketSettings
    upstream: UpstreamSettings
    streaming: StreamingSettings


__all__ = [
    "AppSettings",
    "AuthSettings",
    "LimitsSettings",
    "StreamingSettings",
    "UpstreamSettings",
    "WebSocketSettings",
]
