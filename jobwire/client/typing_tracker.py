"""Who is typing right now.

``user_typing`` (re)arms a per-user expiry timer; expiry removes the user
exactly as an explicit ``user_stopped_typing`` would.
"""

from __future__ import annotations

import logging
from typing import Any

from jobwire.infra.timers import CallLater, TimerHandle, loop_call_later

logger = logging.getLogger(__name__)

DEFAULT_TYPING_TIMEOUT_MS = 3000.0


class TypingTracker:
    def __init__(self, *, call_later: CallLater | None = None, timeout_ms: float = DEFAULT_TYPING_TIMEOUT_MS) -> None:
        self._call_later = call_later or loop_call_later
        self.timeout_ms = timeout_ms
        self._timers: dict[Any, TimerHandle] = {}

    def started(self, user_id: Any) -> None:
        previous = self._timers.pop(user_id, None)
        if previous is not None:
            previous.cancel()
        self._timers[user_id] = self._call_later(self.timeout_ms / 1000.0, lambda: self._expire(user_id))

    def stopped(self, user_id: Any) -> None:
        handle = self._timers.pop(user_id, None)
        if handle is not None:
            handle.cancel()

    def is_typing(self, user_id: Any) -> bool:
        return user_id in self._timers

    def typing(self) -> frozenset[Any]:
        return frozenset(self._timers)

    def clear(self) -> None:
        timers = list(self._timers.values())
        self._timers.clear()
        for handle in timers:
            handle.cancel()

    def _expire(self, user_id: Any) -> None:
        if self._timers.pop(user_id, None) is not None:
            logger.debug("typing indicator for %s expired", user_id, extra={"user_id": user_id})
