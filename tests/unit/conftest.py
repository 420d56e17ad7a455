from __future__ import annotations

import asyncio
from typing import Any
from collections.abc import Callable, AsyncIterator

import orjson
import pytest
from starlette.websockets import WebSocketState

from audio_relay.realtime import RelaySession
from audio_relay.state.settings import StreamingSettings


class FakeWebSocket:
    """Just enough of starlette's WebSocket for the relay."""

    def __init__(
        self,
        *,
        accepted: bool = False,
        query_params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.query_params = query_params or {}
        self.headers = headers or {}
        state = WebSocketState.CONNECTED if accepted else WebSocketState.CONNECTING
        self.client_state = state
        self.application_state = state
        self.sent: list[str] = []
        self.close_code: int | None = None
        self.close_reason: str | None = None
        self._inbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    async def accept(self) -> None:
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_text(self, text: str) -> None:
        if self.application_state != WebSocketState.CONNECTED:
            raise RuntimeError("send on closed websocket")
        self.sent.append(text)

    async def receive(self) -> dict[str, Any]:
        return await self._inbox.get()

    async def close(self, *, code: int = 1000, reason: str | None = None) -> None:
        self.close_code = code
        self.close_reason = reason or ""
        self.client_state = WebSocketState.DISCONNECTED
        self.application_state = WebSocketState.DISCONNECTED
        self._inbox.put_nowait({"type": "websocket.disconnect", "code": code})

    def feed_bytes(self, data: bytes) -> None:
        self._inbox.put_nowait({"type": "websocket.receive", "bytes": data})

    def feed_text(self, text: str) -> None:
        self._inbox.put_nowait({"type": "websocket.receive", "text": text})

    def disconnect(self, code: int = 1000) -> None:
        self.client_state = WebSocketState.DISCONNECTED
        self._inbox.put_nowait({"type": "websocket.disconnect", "code": code})

    def messages(self) -> list[dict[str, Any]]:
        return [orjson.loads(text) for text in self.sent]


class FakeUpstream:
    """In-memory upstream peer; the handshake completes when ``open_gate`` is set."""

    def __init__(self, *, fail_connect: bool = False) -> None:
        self.open_gate = asyncio.Event()
        self.fail_connect = fail_connect
        self.is_open = False
        self.closed = False
        self.sent: list[dict[str, Any]] = []
        self._inbox: asyncio.Queue[str | bytes | None] = asyncio.Queue()

    async def connect(self) -> None:
        await self.open_gate.wait()
        if self.fail_connect:
            raise OSError("handshake refused")
        self.is_open = True

    async def send_event(self, event: dict[str, Any]) -> bool:
        if not self.is_open:
            return False
        self.sent.append(event)
        return True

    async def messages(self) -> AsyncIterator[str | bytes]:
        while True:
            raw = await self._inbox.get()
            if raw is None:
                return
            yield raw

    async def close(self) -> None:
        self.closed = True
        self.is_open = False
        self._inbox.put_nowait(None)

    def feed(self, raw: str | bytes) -> None:
        self._inbox.put_nowait(raw)

    def hang_up(self) -> None:
        self.is_open = False
        self._inbox.put_nowait(None)

    def sent_types(self) -> list[str]:
        return [event["type"] for event in self.sent]


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.fixture
def streaming_settings() -> StreamingSettings:
    # Long interval: tests drive commit ticks by hand unless they say otherwise.
    return StreamingSettings(commit_interval_s=60.0, max_pending_audio_bytes=0, response_modalities=("text",))


@pytest.fixture
def fake_ws() -> FakeWebSocket:
    return FakeWebSocket(accepted=True)


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def until() -> Callable[..., Any]:
    return wait_until


@pytest.fixture
def make_session(
    fake_ws: FakeWebSocket,
    fake_upstream: FakeUpstream,
    streaming_settings: StreamingSettings,
) -> Callable[..., RelaySession]:
    def _make(**overrides: Any) -> RelaySession:
        settings = StreamingSettings(
            commit_interval_s=overrides.pop("commit_interval_s", streaming_settings.commit_interval_s),
            max_pending_audio_bytes=overrides.pop("max_pending_audio_bytes", streaming_settings.max_pending_audio_bytes),
            response_modalities=streaming_settings.response_modalities,
        )
        return RelaySession(
            ws=overrides.pop("ws", fake_ws),
            upstream=overrides.pop("upstream", fake_upstream),
            streaming=settings,
        )

    return _make


@pytest.fixture
def new_ws() -> type[FakeWebSocket]:
    return FakeWebSocket


@pytest.fixture
def new_upstream() -> type[FakeUpstream]:
    return FakeUpstream
