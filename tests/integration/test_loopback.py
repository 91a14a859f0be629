from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import pytest
import websockets

from jobwire.client.client import ChatClient
from jobwire.core.state import ConnectionState


class _Backend:
    """Minimal in-process stand-in for the messaging server."""

    def __init__(self, *, close_first_with: int | None = None) -> None:
        self.close_first_with = close_first_with
        self.connections = 0
        self.received: list[dict[str, Any]] = []
        self._next_message_id = 100

    async def handler(self, ws: Any) -> None:
        self.connections += 1
        number = self.connections
        await ws.send(json.dumps({"type": "connection_ack", "connectionId": f"conn-{number}"}))
        try:
            async for raw in ws:
                frame = json.loads(raw)
                self.received.append(frame)
                if frame["type"] == "authenticate":
                    await ws.send(
                        json.dumps({"type": "authenticated", "userId": frame["userId"], "connectionId": f"conn-{number}"})
                    )
                    if number == 1 and self.close_first_with is not None:
                        await ws.close(self.close_first_with, "server restart")
                        return
                elif frame["type"] == "send_message":
                    self._next_message_id += 1
                    await ws.send(json.dumps({"type": "message_sent", "messageId": self._next_message_id}))
        except websockets.exceptions.ConnectionClosed:
            pass


async def _wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout=timeout)


def _client(port: int) -> ChatClient:
    return ChatClient(
        ws_url=f"ws://127.0.0.1:{port}/ws",
        open_timeout=2.0,
        close_timeout=1.0,
        reconnect_base_delay_ms=10.0,
        reconnect_jitter_ms=0.0,
    )


@pytest.mark.asyncio
async def test_loopback_authenticate_and_send() -> None:
    backend = _Backend()
    async with websockets.serve(backend.handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        client = _client(port)
        confirmations: list[Any] = []

        async def _on_frame(frame) -> None:
            if frame.type == "message_sent":
                confirmations.append(frame["messageId"])

        client.on_frame = _on_frame
        await client.connect(42)
        await client.send_message("hi", 7)
        await client.send_message("hi", 7)

        await _wait_for(lambda: len(confirmations) == 2)

        assert client.is_connected() is True
        assert client.connection_id == "conn-1"
        sent = [f for f in backend.received if f["type"] == "send_message"]
        assert [f["content"] for f in sent] == ["hi", "hi"]
        assert backend.received[0]["type"] == "authenticate"

        await client.disconnect()
        assert client.state is ConnectionState.CLOSED


@pytest.mark.asyncio
async def test_loopback_reconnects_after_abnormal_close() -> None:
    backend = _Backend(close_first_with=1011)
    async with websockets.serve(backend.handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        client = _client(port)

        await client.connect(42)
        await _wait_for(lambda: backend.connections == 2 and client.is_connected())

        assert client.connection_id == "conn-2"
        assert client.reconnect_attempts == 0
        await client.disconnect()


@pytest.mark.asyncio
async def test_loopback_normal_close_stays_down() -> None:
    backend = _Backend(close_first_with=1000)
    async with websockets.serve(backend.handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        client = _client(port)

        await client.connect(42)
        await _wait_for(lambda: client.state is ConnectionState.DISCONNECTED)
        await asyncio.sleep(0.2)

        assert backend.connections == 1
        assert client.reconnect_attempts == 0
        await client.disconnect()
