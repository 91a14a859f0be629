"""Connection state enum and its transition table."""

from __future__ import annotations

import logging
from enum import Enum

from jobwire.core.errors import StateTransitionError

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    AUTHENTICATED = "authenticated"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.DISCONNECTED: frozenset({ConnectionState.CONNECTING, ConnectionState.CLOSED}),
    ConnectionState.CONNECTING: frozenset(
        {
            ConnectionState.OPEN,
            ConnectionState.RECONNECTING,
            ConnectionState.DISCONNECTED,
            ConnectionState.CLOSED,
        }
    ),
    ConnectionState.OPEN: frozenset(
        {
            ConnectionState.AUTHENTICATED,
            ConnectionState.RECONNECTING,
            ConnectionState.DISCONNECTED,
            ConnectionState.CLOSED,
        }
    ),
    ConnectionState.AUTHENTICATED: frozenset(
        {ConnectionState.RECONNECTING, ConnectionState.DISCONNECTED, ConnectionState.CLOSED}
    ),
    ConnectionState.RECONNECTING: frozenset(
        {ConnectionState.CONNECTING, ConnectionState.DISCONNECTED, ConnectionState.CLOSED}
    ),
    ConnectionState.CLOSED: frozenset({ConnectionState.CONNECTING}),
}

# States in which connect() has nothing to do.
ACTIVE_STATES = frozenset({ConnectionState.CONNECTING, ConnectionState.OPEN, ConnectionState.AUTHENTICATED})


def can_transition(current: ConnectionState, target: ConnectionState) -> bool:
    return target in TRANSITIONS[current]


class ConnectionStateMachine:
    """Holds the single live ConnectionState value.

    Callers answer "connected?" style questions from ``state``; no boolean
    flags are kept alongside it.
    """

    def __init__(self, initial: ConnectionState = ConnectionState.DISCONNECTED) -> None:
        self._state = initial

    @property
    def state(self) -> ConnectionState:
        return self._state

    def transition(self, target: ConnectionState) -> ConnectionState:
        """Move to ``target`` and return the previous state."""
        previous = self._state
        if not can_transition(previous, target):
            raise StateTransitionError(f"illegal transition {previous.value} -> {target.value}")
        self._state = target
        logger.debug("state %s -> %s", previous.value, target.value)
        return previous
