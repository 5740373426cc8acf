"""Tests for the SSE connection lifecycle."""

from __future__ import annotations

import json

import pytest

from ghl_mcp.mcp.sse import (
    CLOSED,
    CONNECTING,
    HEARTBEAT_FRAME,
    OPEN,
    SSEConnection,
    encode_event,
)


def _connection(scheduler, **overrides):
    settings = {
        "heartbeat_interval": 25.0,
        "max_duration": 50.0,
        "tools_changed_delay": 0.1,
        "close_delay": 0.1,
    }
    settings.update(overrides)
    return SSEConnection(timer_factory=scheduler, **settings)


def _drain(connection):
    """Collect every frame; only valid once the connection has closed."""

    return list(connection.stream())


def _data(frame):
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: "):-2])


def test_encode_event_frames_json():
    assert encode_event({"a": 1}) == 'data: {"a": 1}\n\n'
    assert encode_event("raw") == "data: raw\n\n"


def test_open_pushes_initialized_then_tools_changed(scheduler):
    connection = _connection(scheduler)
    assert connection.state == CONNECTING

    connection.open()
    assert connection.state == OPEN

    (tools_changed,) = scheduler.with_interval(0.1)
    tools_changed.fire()
    connection.close("test")

    frames = [_data(frame) for frame in _drain(connection)]
    assert [frame["method"] for frame in frames] == [
        "notification/initialized",
        "notification/tools/list_changed",
    ]
    assert all("id" not in frame for frame in frames)


def test_open_arms_heartbeat_and_deadline(scheduler):
    connection = _connection(scheduler)
    connection.open()

    assert len(scheduler.with_interval(25.0)) == 1
    assert len(scheduler.with_interval(50.0)) == 1
    assert all(timer.started and timer.daemon for timer in scheduler.timers)


def test_heartbeat_repeats_until_closed(scheduler):
    connection = _connection(scheduler)
    connection.open()

    scheduler.with_interval(25.0)[-1].fire()
    scheduler.with_interval(25.0)[-1].fire()
    assert len(scheduler.with_interval(25.0)) == 3

    connection.close("test")
    frames = _drain(connection)
    assert frames.count(HEARTBEAT_FRAME) == 2


def test_deadline_closes_connection_and_cancels_timers(scheduler):
    connection = _connection(scheduler)
    connection.open()

    (deadline,) = scheduler.with_interval(50.0)
    deadline.fire()

    assert connection.state == CLOSED
    assert connection.close_reason == "deadline"
    assert all(timer.cancelled for timer in scheduler.timers)
    assert [_data(frame)["method"] for frame in _drain(connection)] == [
        "notification/initialized"
    ]


def test_close_is_idempotent(scheduler):
    connection = _connection(scheduler)
    connection.open()

    assert connection.close("client disconnected") is True
    assert connection.close("deadline") is False
    assert connection.close_reason == "client disconnected"

    frames = _drain(connection)
    assert len(frames) == 1


def test_no_frames_after_close(scheduler):
    connection = _connection(scheduler)
    connection.open()
    heartbeat = scheduler.with_interval(25.0)[0]
    tools_changed = scheduler.with_interval(0.1)[0]

    connection.close("client disconnected")

    # Callbacks that raced with teardown must not write to the dead stream.
    heartbeat.function()
    tools_changed.function()
    assert connection.push({"late": True}) is False
    assert connection.push_comment("late") is False

    frames = _drain(connection)
    assert len(frames) == 1
    assert _data(frames[0])["method"] == "notification/initialized"
    assert len(scheduler.with_interval(25.0)) == 1


def test_respond_pushes_response_before_closing(scheduler):
    connection = _connection(scheduler)
    connection.open(handshake=False)

    response = {"jsonrpc": "2.0", "id": 1, "result": {}}
    assert connection.respond(response) is True
    assert connection.state == OPEN

    (close_timer,) = scheduler.with_interval(0.1)
    close_timer.fire()
    assert connection.state == CLOSED
    assert connection.close_reason == "response delivered"
    assert [_data(frame) for frame in _drain(connection)] == [response]


def test_fail_closes_immediately(scheduler):
    connection = _connection(scheduler)
    connection.open(handshake=False)

    error = {"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}}
    connection.fail(error)

    assert connection.state == CLOSED
    assert [_data(frame) for frame in _drain(connection)] == [error]


def test_unencodable_payload_tears_connection_down(scheduler):
    connection = _connection(scheduler)
    connection.open(handshake=False)

    assert connection.push({"bad": object()}) is False
    assert connection.state == CLOSED
    assert connection.close_reason == "stream error"


def test_client_disconnect_closes_through_stream(scheduler):
    connection = _connection(scheduler)
    connection.open()

    stream = connection.stream()
    first = next(stream)
    assert _data(first)["method"] == "notification/initialized"

    stream.close()
    assert connection.state == CLOSED
    assert connection.close_reason == "client disconnected"
    assert all(timer.cancelled for timer in scheduler.timers)


def test_idle_stream_yields_on_heartbeat_then_tears_down(scheduler):
    connection = _connection(scheduler)
    connection.open()
    stream = connection.stream()
    assert _data(next(stream))["method"] == "notification/initialized"

    scheduler.with_interval(0.1)[0].fire()
    assert _data(next(stream))["method"] == "notification/tools/list_changed"

    # an idle stream still produces a write every heartbeat
    scheduler.with_interval(25.0)[0].fire()
    assert next(stream) == HEARTBEAT_FRAME
    rearmed = scheduler.with_interval(25.0)[-1]
    deadline = scheduler.with_interval(50.0)[0]
    assert not rearmed.cancelled and not deadline.cancelled

    # the failed heartbeat write makes the server close the body iterator
    stream.close()
    assert connection.close_reason == "client disconnected"
    assert rearmed.cancelled and deadline.cancelled


def test_reopen_gets_fresh_independent_timers(scheduler):
    first = _connection(scheduler)
    first.open()
    scheduler.with_interval(50.0)[0].fire()
    assert first.state == CLOSED

    second = _connection(scheduler)
    assert second.state == CONNECTING
    second.open()

    assert second.id != first.id
    assert second.state == OPEN
    live = scheduler.live()
    assert {timer.interval for timer in live} == {0.1, 25.0, 50.0}
    second.close("test")


def test_open_twice_is_rejected(scheduler):
    connection = _connection(scheduler)
    connection.open()
    with pytest.raises(RuntimeError):
        connection.open()
    connection.close("test")
