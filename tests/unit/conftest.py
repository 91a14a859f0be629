from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import pytest

from jobwire.client.client import ChatClient
from jobwire.core.errors import CloseCode, ConnectionError


class FakeTimerHandle:
    def __init__(self, due_ms: float, seq: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers:
    """Manual clock standing in for ``loop.call_later``."""

    def __init__(self) -> None:
        self.now_ms = 0.0
        self._seq = 0
        self._handles: list[FakeTimerHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimerHandle:
        self._seq += 1
        handle = FakeTimerHandle(self.now_ms + delay * 1000.0, self._seq, callback)
        self._handles.append(handle)
        return handle

    def pending(self) -> list[float]:
        """Remaining delays (ms) of armed timers, soonest first."""
        return sorted(h.due_ms - self.now_ms for h in self._handles if not h.cancelled)

    def advance(self, ms: float) -> None:
        target = self.now_ms + ms
        while True:
            due = [h for h in self._handles if not h.cancelled and h.due_ms <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due_ms, h.seq))
            self._handles.remove(handle)
            self.now_ms = handle.due_ms
            handle.callback()
        self._handles = [h for h in self._handles if not h.cancelled]
        self.now_ms = target


class FakeTransport:
    def __init__(self, url: str, owner: FakeTransportFactory, **options: Any) -> None:
        self.url = url
        self.options = options
        self._owner = owner
        self.on_message: Any = None
        self.on_close: Any = None
        self.sent: list[dict[str, Any]] = []
        self.open = False
        self.closed_with: tuple[int, str] | None = None

    async def connect(self) -> None:
        if self._owner.gate is not None:
            await self._owner.gate.wait()
        if self._owner.fail_next > 0:
            self._owner.fail_next -= 1
            raise ConnectionError(f"Failed to connect to {self.url}", code=int(CloseCode.ABNORMAL_CLOSURE))
        self.open = True

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.open = False
        self.closed_with = (int(code), reason)

    async def send(self, data: str) -> None:
        if not self.open:
            raise ConnectionError("WebSocket is disconnected")
        self.sent.append(json.loads(data))

    def is_open(self) -> bool:
        return self.open

    def sent_types(self) -> list[str]:
        return [frame["type"] for frame in self.sent]

    async def feed(self, frame: dict[str, Any] | str) -> None:
        if self.on_message is None:
            return
        data = frame if isinstance(frame, str) else json.dumps(frame)
        await self.on_message(data)

    async def drop(self, code: int = 1006, reason: str = "") -> None:
        self.open = False
        if self.on_close is not None:
            await self.on_close(code, reason)


class FakeTransportFactory:
    def __init__(self) -> None:
        self.transports: list[FakeTransport] = []
        self.fail_next = 0
        self.gate: asyncio.Event | None = None

    def __call__(self, url: str, **options: Any) -> FakeTransport:
        transport = FakeTransport(url, self, **options)
        self.transports.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.transports[-1]


@pytest.fixture
def timers() -> FakeTimers:
    return FakeTimers()


@pytest.fixture
def transports() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
def make_client(timers: FakeTimers, transports: FakeTransportFactory) -> Callable[..., ChatClient]:
    def _make(**overrides: Any) -> ChatClient:
        return ChatClient(
            ws_url="ws://test.local/ws",
            transport_factory=transports,
            call_later=timers.call_later,
            rng=lambda: 0.0,
            **overrides,
        )

    return _make


@pytest.fixture
def client(make_client: Callable[..., ChatClient]) -> ChatClient:
    return make_client()
