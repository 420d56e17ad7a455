"""Main FastAPI server for the realtime audio relay."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, WebSocket
from fastapi.responses import ORJSONResponse

from audio_relay.runtime.logging import configure_logging
from audio_relay.runtime.settings_loader import load_settings
from audio_relay.runtime.dependencies import build_runtime_deps
from audio_relay.handlers.websocket.manager import handle_websocket_connection

logger = logging.getLogger(__name__)

configure_logging()

_settings = load_settings()


@asynccontextmanager
async def _lifespan(app: FastAPI):
    runtime_deps = build_runtime_deps(_settings)
    app.state.runtime_deps = runtime_deps
    logger.info("runtime: ready")
    try:
        yield
    finally:
        deps = getattr(app.state, "runtime_deps", None)
        if deps is not None:
            await deps.shutdown()


app = FastAPI(default_response_class=ORJSONResponse, lifespan=_lifespan)


@app.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/healthz")
async def healthz() -> dict[str, str | int]:
    deps = getattr(app.state, "runtime_deps", None)
    active = deps.sessions.get_session_count() if deps is not None else 0
    return {"status": "ok", "active_sessions": active}


@app.websocket(_settings.websocket.endpoint_path)
async def websocket_endpoint(websocket: WebSocket) -> None:
    runtime_deps = getattr(app.state, "runtime_deps", None)
    if runtime_deps is None:
        raise RuntimeError("Runtime dependencies are not initialized")
    await handle_websocket_connection(websocket, runtime_deps)


def main() -> None:
    uvicorn.run(app, host=_settings.websocket.host, port=_settings.websocket.port, log_config=None)


if __name__ == "__main__":
    main()
