from __future__ import annotations

import base64
import asyncio

import orjson
import pytest

from audio_relay.errors import AudioBacklogError
from audio_relay.realtime.status import ResponseState
from audio_relay.config.websocket import WS_CLOSE_UPSTREAM_CLOSED_CODE


def _event(**fields: object) -> str:
    return orjson.dumps(fields).decode("utf-8")


def _appended_audio(upstream) -> list[bytes]:
    return [base64.b64decode(e["audio"]) for e in upstream.sent if e["type"] == "input_audio_buffer.append"]


@pytest.mark.asyncio
async def test_audio_buffered_before_handshake_is_sent_as_one_append(make_session, fake_upstream, until) -> None:
    session = make_session()
    await session.start()

    chunks = [b"\x01" * 10, b"\x02" * 20, b"\x03" * 5]
    for chunk in chunks:
        await session.handle_audio(chunk)
    assert fake_upstream.sent == []

    fake_upstream.open_gate.set()
    await until(lambda: fake_upstream.sent)

    appended = _appended_audio(fake_upstream)
    assert len(appended) == 1
    assert len(appended[0]) == 35
    assert appended[0] == b"".join(chunks)

    await session.close()


@pytest.mark.asyncio
async def test_forwarded_bytes_match_arrival_order(make_session, fake_upstream, until) -> None:
    session = make_session()
    await session.start()

    early = [b"a", b"bb"]
    for chunk in early:
        await session.handle_audio(chunk)
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open and fake_upstream.sent)

    late = [b"ccc", b"dddd", b"e"]
    for chunk in late:
        await session.handle_audio(chunk)

    assert b"".join(_appended_audio(fake_upstream)) == b"".join(early + late)
    assert session.state.bytes_forwarded == len(b"".join(early + late))
    await session.close()


@pytest.mark.asyncio
async def test_non_binary_audio_is_counted_and_ignored(make_session, fake_upstream, until) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    await session.handle_audio("not audio")
    assert fake_upstream.sent == []
    assert session.state.frames_rejected == 1
    await session.close()


@pytest.mark.asyncio
async def test_commit_only_follows_an_append(make_session, fake_upstream, until) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    await session.commit_tick()
    assert fake_upstream.sent_types() == []

    await session.handle_audio(b"\x00" * 8)
    await session.commit_tick()
    await session.commit_tick()
    assert fake_upstream.sent_types() == ["input_audio_buffer.append", "input_audio_buffer.commit"]

    await session.handle_audio(b"\x00" * 8)
    await session.handle_audio(b"\x00" * 8)
    await session.commit_tick()
    assert fake_upstream.sent_types().count("input_audio_buffer.commit") == 2
    assert session.state.commits_sent == 2
    await session.close()


@pytest.mark.asyncio
async def test_commit_skipped_while_upstream_not_open(make_session, fake_upstream, until) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)
    await session.handle_audio(b"\x00" * 4)

    fake_upstream.is_open = False
    await session.commit_tick()
    assert "input_audio_buffer.commit" not in fake_upstream.sent_types()
    assert session.buffer.commit_pending is True

    fake_upstream.is_open = True
    await session.commit_tick()
    assert fake_upstream.sent_types()[-1] == "input_audio_buffer.commit"
    await session.close()


@pytest.mark.asyncio
async def test_scheduler_commits_on_its_own(make_session, fake_upstream, until) -> None:
    session = make_session(commit_interval_s=0.01)
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    await session.handle_audio(b"\x00" * 16)
    await until(lambda: "input_audio_buffer.commit" in fake_upstream.sent_types())

    await asyncio.sleep(0.05)
    assert fake_upstream.sent_types().count("input_audio_buffer.commit") == 1
    await session.close()


@pytest.mark.asyncio
async def test_repeated_committed_acks_request_one_response(make_session, fake_upstream, until) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    await session.handle_upstream_message(_event(type="input_audio_buffer.committed"))
    await session.handle_upstream_message(_event(type="input_audio_buffer.committed"))

    creates = [e for e in fake_upstream.sent if e["type"] == "response.create"]
    assert creates == [{"type": "response.create", "response": {"modalities": ["text"]}}]
    assert session.tracker.state is ResponseState.ACTIVE
    await session.close()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "terminal",
    [
        {"type": "response.done"},
        {"type": "error", "error": {"message": "rate limited"}},
    ],
)
async def test_done_or_error_allows_the_next_response(make_session, fake_upstream, until, terminal) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    await session.handle_upstream_message(_event(type="input_audio_buffer.committed"))
    await session.handle_upstream_message(_event(type="response.created"))
    assert session.tracker.is_active is True

    await session.handle_upstream_message(orjson.dumps(terminal))
    assert session.tracker.state is ResponseState.IDLE

    await session.handle_upstream_message(_event(type="input_audio_buffer.committed"))
    assert fake_upstream.sent_types().count("response.create") == 2
    await session.close()


@pytest.mark.asyncio
async def test_error_while_idle_keeps_tracker_idle(make_session, fake_upstream, until) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    await session.handle_upstream_message(_event(type="error", error={"message": "invalid_request"}))
    assert session.tracker.state is ResponseState.IDLE
    assert session.state.upstream_errors == 1
    assert fake_upstream.sent == []
    await session.close()


@pytest.mark.asyncio
async def test_transcript_is_forwarded_downstream_once(make_session, fake_ws, fake_upstream, until) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    await session.handle_upstream_message(_event(type="response.audio_transcript.done", transcript="hello"))

    assert fake_ws.messages() == [{"type": "transcript", "text": "hello"}]
    assert session.state.transcripts_forwarded == 1
    await session.close()


@pytest.mark.asyncio
async def test_transcript_dropped_when_downstream_is_gone(make_session, fake_ws, fake_upstream, until) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    fake_ws.disconnect()
    await session.handle_upstream_message(_event(type="response.audio_transcript.done", transcript="late"))
    assert fake_ws.sent == []
    await session.close()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[]",
        '{"transcript": "no type"}',
        '{"type": "rate_limits.updated", "rate_limits": []}',
        '{"type": "response.audio_transcript.done"}',
    ],
)
async def test_malformed_or_unknown_upstream_messages_are_dropped(
    make_session, fake_ws, fake_upstream, until, raw
) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    await session.handle_upstream_message(raw)
    assert fake_ws.sent == []
    assert fake_upstream.sent == []
    assert session.tracker.state is ResponseState.IDLE
    assert session.closed is False
    await session.close()


@pytest.mark.asyncio
async def test_upstream_events_flow_through_the_reader_task(make_session, fake_ws, fake_upstream, until) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    fake_upstream.feed(_event(type="input_audio_buffer.committed"))
    fake_upstream.feed(_event(type="response.audio_transcript.done", transcript="hi there"))
    fake_upstream.feed(_event(type="response.done"))

    await until(lambda: fake_ws.sent and not session.tracker.is_active)
    assert fake_upstream.sent_types() == ["response.create"]
    assert fake_ws.messages() == [{"type": "transcript", "text": "hi there"}]
    await session.close()


@pytest.mark.asyncio
async def test_downstream_close_stops_timer_and_closes_upstream(make_session, fake_upstream, until) -> None:
    session = make_session(commit_interval_s=0.01)
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)
    await session.handle_audio(b"\x00" * 4)

    await session.close()

    assert fake_upstream.closed is True
    assert session.scheduler.running is False
    ticks = session.scheduler.ticks
    await asyncio.sleep(0.05)
    assert session.scheduler.ticks == ticks


@pytest.mark.asyncio
async def test_close_is_idempotent(make_session, fake_ws, fake_upstream) -> None:
    session = make_session()
    await session.start()

    await session.close()
    await session.close()

    assert session.closed is True
    assert fake_upstream.closed is True
    # Downstream-initiated close leaves the client socket alone.
    assert fake_ws.close_code is None


@pytest.mark.asyncio
async def test_close_during_handshake_cancels_upstream_task(make_session, fake_upstream) -> None:
    session = make_session()
    await session.start()
    await session.handle_audio(b"\x00" * 4)

    await session.close()
    assert fake_upstream.closed is True
    assert session.upstream_open is False
    assert session.buffer.pending_bytes == 0


@pytest.mark.asyncio
async def test_upstream_hang_up_closes_the_session(make_session, fake_ws, fake_upstream, until) -> None:
    session = make_session(commit_interval_s=0.01)
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    fake_upstream.hang_up()
    await until(lambda: fake_ws.close_code is not None)

    assert session.scheduler.running is False
    assert fake_ws.close_code == WS_CLOSE_UPSTREAM_CLOSED_CODE


@pytest.mark.asyncio
async def test_failed_handshake_closes_the_session(make_session, fake_ws, new_upstream, until) -> None:
    upstream = new_upstream(fail_connect=True)
    session = make_session(upstream=upstream)
    await session.start()

    upstream.open_gate.set()
    await until(lambda: fake_ws.close_code is not None)
    assert session.closed is True
    assert fake_ws.close_code == WS_CLOSE_UPSTREAM_CLOSED_CODE


@pytest.mark.asyncio
async def test_backlog_bound_surfaces_while_upstream_is_down(make_session, fake_upstream) -> None:
    session = make_session(max_pending_audio_bytes=32)
    await session.start()

    await session.handle_audio(b"\x00" * 30)
    with pytest.raises(AudioBacklogError):
        await session.handle_audio(b"\x00" * 3)
    assert session.buffer.pending_bytes == 30
    await session.close()


@pytest.mark.asyncio
async def test_sessions_do_not_share_buffers(make_session, new_ws, new_upstream, until) -> None:
    up_a, up_b = new_upstream(), new_upstream()
    a = make_session(ws=new_ws(accepted=True), upstream=up_a)
    b = make_session(ws=new_ws(accepted=True), upstream=up_b)
    await a.start()
    await b.start()

    await a.handle_audio(b"A" * 3)
    await b.handle_audio(b"B" * 5)
    up_a.open_gate.set()
    await until(lambda: up_a.sent)

    assert _appended_audio(up_a) == [b"AAA"]
    assert up_b.sent == []
    assert b.buffer.pending_bytes == 5

    await a.close()
    await b.close()


@pytest.mark.asyncio
async def test_close_right_after_start_releases_upstream(make_session, fake_upstream) -> None:
    session = make_session()
    await session.start()
    await session.close()

    assert session.closed is True
    assert fake_upstream.closed is True
    assert session.scheduler.running is False
    assert session._upstream_task.done() is True


@pytest.mark.asyncio
async def test_failed_append_does_not_lead_to_a_commit(make_session, fake_upstream, until) -> None:
    session = make_session()
    await session.start()
    fake_upstream.open_gate.set()
    await until(lambda: session.upstream_open)

    original_send = fake_upstream.send_event

    async def drop_appends(event):
        if event["type"] == "input_audio_buffer.append":
            return False
        return await original_send(event)

    fake_upstream.send_event = drop_appends
    await session.handle_audio(b"\x00" * 8)
    await session.commit_tick()

    assert fake_upstream.sent == []
    assert session.buffer.commit_pending is False
    assert session.state.commits_sent == 0
    await session.close()
