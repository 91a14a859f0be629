from __future__ import annotations

import asyncio

import pytest

from jobwire.core.events import ConnectionEvent
from jobwire.core.state import ConnectionState
from jobwire.protocol.frame import Frame, FrameType
from jobwire.utils.live_probe import LiveProbe


@pytest.mark.asyncio
async def test_live_probe_wait_authenticated_and_closed() -> None:
    probe = LiveProbe()
    await probe.handle_state_change(ConnectionEvent(ConnectionState.CONNECTING, ConnectionState.DISCONNECTED))
    await probe.handle_state_change(ConnectionEvent(ConnectionState.AUTHENTICATED, ConnectionState.OPEN))
    await probe.wait_state(ConnectionState.AUTHENTICATED, timeout=0.1)
    await probe.handle_state_change(ConnectionEvent(ConnectionState.CLOSED, ConnectionState.AUTHENTICATED))
    await probe.wait_state(ConnectionState.CLOSED, timeout=0.1)

    with pytest.raises(asyncio.TimeoutError):
        await probe.wait_state(ConnectionState.AUTHENTICATED, timeout=0.05)


@pytest.mark.asyncio
async def test_live_probe_frames_are_consumed_in_order() -> None:
    probe = LiveProbe()
    await probe.handle_frame(Frame(FrameType.MESSAGE_SENT, {"messageId": 1}))
    await probe.handle_frame(Frame(FrameType.MESSAGE_SENT, {"messageId": 2}))

    first = await probe.wait_for_frame("message_sent", timeout=0.1)
    second = await probe.wait_for_frame("message_sent", timeout=0.1)

    assert (first["messageId"], second["messageId"]) == (1, 2)


@pytest.mark.asyncio
async def test_live_probe_wait_for_frame_timeout() -> None:
    probe = LiveProbe()
    with pytest.raises(asyncio.TimeoutError):
        await probe.wait_for_frame("message_sent", timeout=0.05)


@pytest.mark.asyncio
async def test_live_probe_keeps_last_reason() -> None:
    probe = LiveProbe()
    reason = RuntimeError("closed abnormally")
    await probe.handle_state_change(
        ConnectionEvent(ConnectionState.RECONNECTING, ConnectionState.AUTHENTICATED, reason=reason)
    )

    assert probe.last_reason is reason
