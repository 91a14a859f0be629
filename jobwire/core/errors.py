from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from jobwire.protocol.frame import Frame


class JobwireError(Exception):
    """Base exception for jobwire."""
    pass


class ConnectionError(JobwireError):
    """Raised when the transport cannot be opened or used."""
    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class ReconnectExhaustedError(ConnectionError):
    """Raised (and surfaced) once the reconnect budget is spent."""
    def __init__(self, attempts: int):
        super().__init__(
            f"Reconnection exhausted after {attempts} attempts; call connect() again or reload",
            code=int(CloseCode.ABNORMAL_CLOSURE),
        )
        self.attempts = attempts


class ProtocolError(JobwireError):
    """Raised when an inbound frame body cannot be decoded."""
    pass


class StateTransitionError(JobwireError):
    """Raised on a move the connection state table does not allow."""
    pass


class ServerError(JobwireError):
    """Server-pushed application error. Non-fatal."""
    def __init__(self, message: str, frame: Optional["Frame"] = None):
        super().__init__(message)
        self.frame = frame


class CloseCode(IntEnum):
    """WebSocket close codes (RFC 6455 section 7.4.1)."""
    NORMAL_CLOSURE = 1000
    GOING_AWAY = 1001
    PROTOCOL_ERROR = 1002
    UNSUPPORTED_DATA = 1003
    NO_STATUS_RECEIVED = 1005
    ABNORMAL_CLOSURE = 1006
    INVALID_PAYLOAD = 1007
    POLICY_VIOLATION = 1008
    MESSAGE_TOO_BIG = 1009
    INTERNAL_ERROR = 1011
