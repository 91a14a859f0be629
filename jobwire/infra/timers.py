"""Timer seam used by the reconnect scheduler and typing tracker.

Both take a ``call_later(delay_seconds, callback)`` callable returning a handle
with ``cancel()``. In production that is the running event loop's
``call_later``; tests substitute a manual clock.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


CallLater = Callable[[float, Callable[[], None]], TimerHandle]


def loop_call_later(delay: float, callback: Callable[[], None]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)
