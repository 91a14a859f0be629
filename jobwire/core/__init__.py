"""Core types shared across jobwire."""

from .entities import MessageRecord, MessageStatus
from .errors import (
    CloseCode,
    ConnectionError,
    JobwireError,
    ProtocolError,
    ReconnectExhaustedError,
    ServerError,
    StateTransitionError,
)
from .events import ConnectionEvent
from .state import TRANSITIONS, ConnectionState, ConnectionStateMachine, can_transition

__all__ = [
    "CloseCode",
    "ConnectionError",
    "ConnectionEvent",
    "ConnectionState",
    "ConnectionStateMachine",
    "JobwireError",
    "MessageRecord",
    "MessageStatus",
    "ProtocolError",
    "ReconnectExhaustedError",
    "ServerError",
    "StateTransitionError",
    "TRANSITIONS",
    "can_transition",
]
