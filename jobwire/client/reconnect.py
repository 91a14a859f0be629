"""Reconnect backoff scheduling.

One pending timer at most. Attempts are counted per abnormal closure and
reset by the owner on every successful authentication. While the hosting
page is hidden a due reconnect is parked until visibility returns; parking
does not count as an attempt.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable

from jobwire.infra.timers import CallLater, TimerHandle, loop_call_later

logger = logging.getLogger(__name__)

DEFAULT_BASE_DELAY_MS = 1000.0
DEFAULT_MULTIPLIER = 1.5
DEFAULT_MAX_DELAY_MS = 15000.0
DEFAULT_JITTER_MS = 1000.0
DEFAULT_MAX_ATTEMPTS = 15


def compute_backoff_delay(
    attempt: int,
    *,
    base_delay_ms: float = DEFAULT_BASE_DELAY_MS,
    multiplier: float = DEFAULT_MULTIPLIER,
    max_delay_ms: float = DEFAULT_MAX_DELAY_MS,
    jitter_ms: float = DEFAULT_JITTER_MS,
    rng: Callable[[], float] = random.random,
) -> float:
    """Returns ``min(base * multiplier**attempt, max) + uniform(0, jitter)`` in ms."""
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    capped = min(base_delay_ms * multiplier**attempt, max_delay_ms)
    return capped + rng() * jitter_ms


class ReconnectScheduler:
    def __init__(
        self,
        callback: Callable[[], None],
        *,
        call_later: CallLater | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay_ms: float = DEFAULT_BASE_DELAY_MS,
        multiplier: float = DEFAULT_MULTIPLIER,
        max_delay_ms: float = DEFAULT_MAX_DELAY_MS,
        jitter_ms: float = DEFAULT_JITTER_MS,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self._callback = callback
        self._call_later = call_later or loop_call_later
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.multiplier = multiplier
        self.max_delay_ms = max_delay_ms
        self.jitter_ms = jitter_ms
        self._rng = rng

        self.attempts = 0
        self.exhausted = False
        self.visible = True
        self._handle: TimerHandle | None = None
        self._deferred = False

    @property
    def pending(self) -> bool:
        return self._handle is not None or self._deferred

    @property
    def deferred(self) -> bool:
        return self._deferred

    def compute_delay(self, attempt: int) -> float:
        return compute_backoff_delay(
            attempt,
            base_delay_ms=self.base_delay_ms,
            multiplier=self.multiplier,
            max_delay_ms=self.max_delay_ms,
            jitter_ms=self.jitter_ms,
            rng=self._rng,
        )

    def schedule(self) -> float | None:
        """Counts one more attempt and arms the timer.

        Returns the delay in milliseconds, or ``None`` once the attempt budget
        is spent (``exhausted`` is then set and no timer is armed).
        """
        self.cancel()
        attempt = self.attempts + 1
        if attempt > self.max_attempts:
            self.exhausted = True
            logger.error("reconnect attempts exhausted (%s)", self.max_attempts)
            return None

        self.attempts = attempt
        delay_ms = self.compute_delay(attempt)
        self._handle = self._call_later(delay_ms / 1000.0, self._fire)
        logger.info(
            "reconnect attempt %s/%s in %.0fms",
            attempt,
            self.max_attempts,
            delay_ms,
            extra={"attempt": attempt, "delay_ms": round(delay_ms)},
        )
        return delay_ms

    def cancel(self) -> None:
        handle = self._handle
        self._handle = None
        self._deferred = False
        if handle is not None:
            handle.cancel()

    def reset(self) -> None:
        self.cancel()
        self.attempts = 0
        self.exhausted = False

    def set_visible(self, visible: bool) -> None:
        self.visible = visible
        if visible and self._deferred:
            logger.info("page visible again; running deferred reconnect")
            self._deferred = False
            self._callback()

    def _fire(self) -> None:
        self._handle = None
        if not self.visible:
            logger.info("page hidden; deferring reconnect attempt %s", self.attempts)
            self._deferred = True
            return
        self._callback()
