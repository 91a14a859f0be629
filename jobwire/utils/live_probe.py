"""Helpers for live connection probing in integration tests/examples."""

from __future__ import annotations

import asyncio
from typing import Any

from jobwire.core.state import ConnectionState


class LiveProbe:
    """Collects state changes and inbound frames and provides async wait helpers."""

    def __init__(self) -> None:
        self._state_events: dict[ConnectionState, asyncio.Event] = {state: asyncio.Event() for state in ConnectionState}
        self._frame_condition = asyncio.Condition()
        self._frames_by_type: dict[str, list[Any]] = {}
        self.last_reason: Exception | None = None

    async def handle_state_change(self, event: Any) -> None:
        state = getattr(event, "state", None)
        if not isinstance(state, ConnectionState):
            return
        for other, flag in self._state_events.items():
            if other is state:
                flag.set()
            else:
                flag.clear()
        reason = getattr(event, "reason", None)
        if reason is not None:
            self.last_reason = reason

    async def handle_frame(self, frame: Any) -> None:
        frame_type = getattr(frame, "type", None)
        if not isinstance(frame_type, str):
            return
        async with self._frame_condition:
            self._frames_by_type.setdefault(frame_type, []).append(frame)
            self._frame_condition.notify_all()

    async def wait_state(self, state: ConnectionState, timeout: float) -> None:
        await asyncio.wait_for(self._state_events[state].wait(), timeout=timeout)

    async def wait_for_frame(self, frame_type: str, timeout: float) -> Any:
        async def _wait() -> Any:
            async with self._frame_condition:
                while True:
                    existing = self._frames_by_type.get(frame_type)
                    if existing:
                        return existing.pop(0)
                    await self._frame_condition.wait()

        return await asyncio.wait_for(_wait(), timeout=timeout)
