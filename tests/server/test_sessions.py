"""Tests for remote_gateway.server.sessions module."""

from __future__ import annotations

import asyncio
import json

import pytest
from pydantic import BaseModel

from remote_gateway.core.exceptions import NoActiveSessionError
from remote_gateway.mcp.registry import ToolRegistry
from remote_gateway.server.jsonrpc import McpProtocol, ServerInfo
from remote_gateway.server.sessions import SessionManager, SessionState
from remote_gateway.server.sse import EventSink


def _ping(request_id) -> dict:
    return {"jsonrpc": "2.0", "id": request_id, "method": "ping"}


async def _read_reply(sink: EventSink):
    stream = sink.stream()
    try:
        frame = await anext(stream)
    finally:
        await stream.aclose()
    return json.loads(frame.split("data: ", 1)[1])


@pytest.fixture
def manager(protocol) -> SessionManager:
    return SessionManager(protocol)


# ============================================================================
# Session lifecycle
# ============================================================================


class TestSessionLifecycle:
    async def test_starts_idle(self, manager):
        assert manager.state == SessionState.IDLE
        assert manager.active is None

    async def test_open(self, manager):
        session = await manager.open_session(EventSink("s1"))

        assert manager.state == SessionState.ACTIVE
        assert manager.active is session
        assert session.session_id == "s1"

    async def test_last_stream_wins(self, manager):
        first_sink = EventSink("s1")
        await manager.open_session(first_sink)
        second = await manager.open_session(EventSink("s2"))

        assert manager.active is second
        assert first_sink.closed

    async def test_close_active(self, manager):
        sink = EventSink("s1")
        await manager.open_session(sink)

        assert manager.close_session("s1") is True
        assert manager.state == SessionState.IDLE
        assert sink.closed

    async def test_close_stale_is_noop(self, manager):
        await manager.open_session(EventSink("s1"))
        second = await manager.open_session(EventSink("s2"))

        assert manager.close_session("s1") is False
        assert manager.active is second

    async def test_close_when_idle(self, manager):
        assert manager.close_session("s1") is False

    async def test_shutdown(self, manager):
        sink = EventSink("s1")
        await manager.open_session(sink)

        await manager.shutdown()

        assert manager.active is None
        assert sink.closed


# ============================================================================
# Message routing
# ============================================================================


class TestRouting:
    async def test_no_session(self, manager, store):
        with pytest.raises(NoActiveSessionError):
            await manager.route_message(
                {
                    "jsonrpc": "2.0",
                    "id": 1,
                    "method": "tools/call",
                    "params": {"name": "transcribe", "arguments": {"audio_url": "https://x/a.mp3"}},
                }
            )
        assert len(store) == 0

    async def test_submit_without_session(self, manager):
        with pytest.raises(NoActiveSessionError):
            manager.submit(_ping(1))

    async def test_reply_written_to_stream(self, manager):
        sink = EventSink("s1")
        await manager.open_session(sink)

        reply = await manager.route_message(_ping(1))

        assert reply == {"jsonrpc": "2.0", "result": {}, "id": 1}
        assert await _read_reply(sink) == reply

    async def test_notification_writes_nothing(self, manager):
        sink = EventSink("s1", keepalive_seconds=60)
        await manager.open_session(sink)

        assert await manager.route_message({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None
        assert sink._queue.empty()

    async def test_closed_stream_swallows_reply(self, manager):
        sink = EventSink("s1")
        session = await manager.open_session(sink)
        sink.close()

        reply = await session.handle_inbound(_ping(1))
        assert reply["id"] == 1

    async def test_submit_runs_in_background(self, manager):
        sink = EventSink("s1")
        session = await manager.open_session(sink)

        task = manager.submit(_ping(7))
        assert session.pending == 1
        await task

        assert session.pending == 0
        assert (await _read_reply(sink))["id"] == 7

    async def test_in_flight_call_survives_supersede(self, manager):
        first_sink = EventSink("s1")
        first = await manager.open_session(first_sink)
        task = manager.submit(_ping(1))

        await manager.open_session(EventSink("s2"))
        reply = await task

        assert reply["id"] == 1
        assert first.closed

    async def test_concurrent_replies_keep_their_ids(self, manager):
        sink = EventSink("s1")
        await manager.open_session(sink)

        await asyncio.gather(*(manager.route_message(_ping(i)) for i in range(5)))
        sink.close()

        ids = []
        async for frame in sink.stream():
            ids.append(json.loads(frame.split("data: ", 1)[1])["id"])
        assert sorted(ids) == [0, 1, 2, 3, 4]


class TestBatches:
    async def test_batch_reply(self, manager):
        sink = EventSink("s1")
        await manager.open_session(sink)

        notification = {"jsonrpc": "2.0", "method": "notifications/initialized"}
        reply = await manager.route_message([_ping(1), notification, _ping(2)])

        assert [r["id"] for r in reply] == [1, 2]
        assert await _read_reply(sink) == reply

    async def test_empty_batch(self, manager):
        await manager.open_session(EventSink("s1"))

        reply = await manager.route_message([])
        assert reply["error"]["code"] == -32600

    async def test_all_notifications_batch(self, manager):
        await manager.open_session(EventSink("s1"))

        assert await manager.route_message([{"jsonrpc": "2.0", "method": "ping"}]) is None


# ============================================================================
# Suspended handlers
# ============================================================================


class LabelInput(BaseModel):
    label: str


class LabelOutput(BaseModel):
    label: str


@pytest.fixture
def gate() -> asyncio.Event:
    return asyncio.Event()


@pytest.fixture
def gated_manager(gate) -> SessionManager:
    async def wait_for_gate(params: LabelInput) -> LabelOutput:
        await gate.wait()
        return LabelOutput(label=params.label)

    registry = ToolRegistry()
    registry.register("wait", LabelInput, LabelOutput, wait_for_gate)
    return SessionManager(McpProtocol(registry, ServerInfo(name="test-gateway", version="0")))


def _wait_call(request_id, label: str) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": "wait", "arguments": {"label": label}},
    }


class TestSuspendedHandlers:
    async def test_slow_call_does_not_block_later_messages(self, gated_manager, gate):
        sink = EventSink("s1", keepalive_seconds=60)
        await gated_manager.open_session(sink)
        stream = sink.stream()

        slow = gated_manager.submit(_wait_call("slow", "a"))
        fast = gated_manager.submit(_ping("fast"))
        await fast

        first = json.loads((await anext(stream)).split("data: ", 1)[1])
        assert first["id"] == "fast"
        assert not slow.done()

        gate.set()
        await slow

        second = json.loads((await anext(stream)).split("data: ", 1)[1])
        assert second["id"] == "slow"
        assert second["result"]["structuredContent"] == {"label": "a"}
        await stream.aclose()

    async def test_stream_closed_while_handler_suspended(self, gated_manager, gate):
        sink = EventSink("s1", keepalive_seconds=60)
        session = await gated_manager.open_session(sink)

        slow = gated_manager.submit(_wait_call(1, "a"))
        await asyncio.sleep(0)
        assert gated_manager.close_session("s1") is True

        gate.set()
        reply = await slow

        assert reply["id"] == 1
        assert reply["result"]["isError"] is False
        assert session.pending == 0
        assert gated_manager.state == SessionState.IDLE
