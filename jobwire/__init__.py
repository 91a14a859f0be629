"""Real-time messaging client for the job marketplace backend."""

__version__ = "0.1.0"

__all__ = [
    "ChatClient",
    "ConnectionState",
    "ConnectionEvent",
    "Frame",
    "FrameType",
    "MessageRecord",
    "MessageStatus",
    "JobwireError",
    "ConnectionError",
    "ReconnectExhaustedError",
    "ServerError",
    "CloseCode",
]


def __getattr__(name: str) -> object:
    """Lazy exports so importing the package does not import websockets."""
    if name == "ChatClient":
        from .client.client import ChatClient

        return ChatClient

    if name in {"ConnectionState", "ConnectionEvent"}:
        from .core.events import ConnectionEvent
        from .core.state import ConnectionState

        return {"ConnectionState": ConnectionState, "ConnectionEvent": ConnectionEvent}[name]

    if name in {"Frame", "FrameType"}:
        from .protocol.frame import Frame, FrameType

        return {"Frame": Frame, "FrameType": FrameType}[name]

    if name in {"MessageRecord", "MessageStatus"}:
        from .core.entities import MessageRecord, MessageStatus

        return {"MessageRecord": MessageRecord, "MessageStatus": MessageStatus}[name]

    if name in {"JobwireError", "ConnectionError", "ReconnectExhaustedError", "ServerError", "CloseCode"}:
        from .core.errors import CloseCode, ConnectionError, JobwireError, ReconnectExhaustedError, ServerError

        return {
            "JobwireError": JobwireError,
            "ConnectionError": ConnectionError,
            "ReconnectExhaustedError": ReconnectExhaustedError,
            "ServerError": ServerError,
            "CloseCode": CloseCode,
        }[name]

    raise AttributeError(f"module 'jobwire' has no attribute {name!r}")
