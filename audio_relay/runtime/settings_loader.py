"""Environment parsing for runtime settings."""

from __future__ import annotations

import os
from urllib.parse import urlparse, parse_qsl, urlencode, urlunparse

from audio_relay.config.secrets import ENV_RELAY_API_KEY, ENV_OPENAI_API_KEY
from audio_relay.state.settings import (
    AppSettings,
    AuthSettings,
    LimitsSettings,
    UpstreamSettings,
    StreamingSettings,
    WebSocketSettings,
)
from audio_relay.config.limits import (
    ENV_MAX_CONCURRENT_CONNECTIONS,
    DEFAULT_MAX_CONCURRENT_CONNECTIONS,
)
from audio_relay.config.websocket import (
    ENV_RELAY_HOST,
    ENV_RELAY_PORT,
    DEFAULT_RELAY_HOST,
    DEFAULT_RELAY_PORT,
    ENV_WS_ENDPOINT_PATH,
    DEFAULT_WS_ENDPOINT_PATH,
)
from audio_relay.config.streaming import (
    DISABLED_VALUES,
    ENV_RELAY_COMMIT_INTERVAL_S,
    ENV_RELAY_RESPONSE_MODALITIES,
    DEFAULT_RELAY_COMMIT_INTERVAL_S,
    ENV_RELAY_MAX_PENDING_AUDIO_BYTES,
    DEFAULT_RELAY_RESPONSE_MODALITIES,
    DEFAULT_RELAY_MAX_PENDING_AUDIO_BYTES,
)
from audio_relay.config.upstream import (
    ENV_OPENAI_BETA_HEADER,
    ENV_OPENAI_REALTIME_URL,
    ENV_OPENAI_REALTIME_MODEL,
    DEFAULT_OPENAI_BETA_HEADER,
    DEFAULT_OPENAI_REALTIME_URL,
    DEFAULT_OPENAI_REALTIME_MODEL,
    ENV_OPENAI_REALTIME_OPEN_TIMEOUT_S,
    DEFAULT_OPENAI_REALTIME_OPEN_TIMEOUT_S,
)


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _csv_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    values = tuple(part.strip() for part in raw.split(",") if part.strip())
    return values or default


def _limit_env(name: str, default: int) -> int:
    """Non-negative byte limit; 0 and the disabled spellings turn the limit off."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    if raw.strip().lower() in DISABLED_VALUES:
        return 0
    try:
        return max(0, int(raw))
    except ValueError:
        return default


def build_upstream_url(url: str, model: str) -> str:
    """Add ``?model=`` to the realtime URL unless it already selects one."""
    if not model:
        return url
    parsed = urlparse(url)
    query_params = dict(parse_qsl(parsed.query, keep_blank_values=True))
    if "model" in query_params:
        return url
    query_params["model"] = model
    new_query = urlencode(query_params)
    return urlunparse((parsed.scheme, parsed.netloc, parsed.path, parsed.params, new_query, parsed.fragment))


def _load_auth_settings() -> AuthSettings:
    api_key = (os.getenv(ENV_RELAY_API_KEY) or "").strip()
    return AuthSettings(api_key=api_key)


def _load_limits_settings() -> LimitsSettings:
    max_connections = _int_env(ENV_MAX_CONCURRENT_CONNECTIONS, DEFAULT_MAX_CONCURRENT_CONNECTIONS)
    return LimitsSettings(max_concurrent_connections=max(1, max_connections))


def _load_websocket_settings() -> WebSocketSettings:
    path = _str_env(ENV_WS_ENDPOINT_PATH, DEFAULT_WS_ENDPOINT_PATH)
    if not path.startswith("/"):
        path = f"/{path}"
    return WebSocketSettings(
        endpoint_path=path,
        host=_str_env(ENV_RELAY_HOST, DEFAULT_RELAY_HOST),
        port=_int_env(ENV_RELAY_PORT, DEFAULT_RELAY_PORT),
    )


def _load_upstream_settings() -> UpstreamSettings:
    model = _str_env(ENV_OPENAI_REALTIME_MODEL, DEFAULT_OPENAI_REALTIME_MODEL)
    url = build_upstream_url(_str_env(ENV_OPENAI_REALTIME_URL, DEFAULT_OPENAI_REALTIME_URL), model)
    open_timeout = _float_env(ENV_OPENAI_REALTIME_OPEN_TIMEOUT_S, DEFAULT_OPENAI_REALTIME_OPEN_TIMEOUT_S)
    if open_timeout <= 0:
        open_timeout = DEFAULT_OPENAI_REALTIME_OPEN_TIMEOUT_S

    return UpstreamSettings(
        url=url,
        model=model,
        api_key=(os.getenv(ENV_OPENAI_API_KEY) or "").strip(),
        beta_header=_str_env(ENV_OPENAI_BETA_HEADER, DEFAULT_OPENAI_BETA_HEADER),
        open_timeout_s=open_timeout,
    )


def _load_streaming_settings() -> StreamingSettings:
    commit_interval = _float_env(ENV_RELAY_COMMIT_INTERVAL_S, DEFAULT_RELAY_COMMIT_INTERVAL_S)
    if commit_interval <= 0:
        commit_interval = DEFAULT_RELAY_COMMIT_INTERVAL_S

    return StreamingSettings(
        commit_interval_s=commit_interval,
        max_pending_audio_bytes=_limit_env(ENV_RELAY_MAX_PENDING_AUDIO_BYTES, DEFAULT_RELAY_MAX_PENDING_AUDIO_BYTES),
        response_modalities=_csv_env(ENV_RELAY_RESPONSE_MODALITIES, DEFAULT_RELAY_RESPONSE_MODALITIES),
    )


def load_settings() -> AppSettings:
    return AppSettings(
        auth=_load_auth_settings(),
        limits=_load_limits_settings(),
        websocket=_load_websocket_settings(),
        upstream=_load_upstream_settings(),
        streaming=_load_streaming_settings(),
    )


__all__ = ["build_upstream_url", "load_settings"]
