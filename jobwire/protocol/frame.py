"""Wire frame type and builders for outbound frames."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any


class FrameType(str, Enum):
    # outbound
    AUTHENTICATE = "authenticate"
    JOIN_ROOM = "join_room"
    LEAVE_ROOM = "leave_room"
    SEND_MESSAGE = "send_message"
    TYPING = "typing"
    STOP_TYPING = "stop_typing"
    MARK_READ = "mark_read"
    PONG = "pong"
    # inbound
    CONNECTION_ACK = "connection_ack"
    AUTHENTICATED = "authenticated"
    ROOM_JOINED = "room_joined"
    USER_JOINED_ROOM = "user_joined_room"
    USER_LEFT_ROOM = "user_left_room"
    NEW_MESSAGE = "new_message"
    MESSAGE_SENT = "message_sent"
    MESSAGE_DELIVERED = "message_delivered"
    MESSAGE_READ = "message_read"
    USER_TYPING = "user_typing"
    USER_STOPPED_TYPING = "user_stopped_typing"
    USER_STATUS_CHANGE = "user_status_change"
    PING = "ping"
    ERROR = "error"


@dataclass(frozen=True)
class Frame:
    """One JSON message. ``payload`` holds every key except ``type``."""

    type: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", _type_value(self.type))
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.payload[key]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, **self.payload}


def _type_value(value: Any) -> str:
    if isinstance(value, FrameType):
        return value.value
    return value


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def make_frame(frame_type: FrameType | str, **fields: Any) -> Frame:
    """Builds a frame stamped with the current time. ``None`` fields are dropped."""
    payload = {key: value for key, value in fields.items() if value is not None}
    payload.setdefault("timestamp", utc_timestamp())
    return Frame(type=frame_type, payload=payload)


def authenticate_frame(user_id: Any) -> Frame:
    return make_frame(FrameType.AUTHENTICATE, userId=user_id)


def join_room_frame(job_id: Any, *, user_id: Any = None) -> Frame:
    return make_frame(FrameType.JOIN_ROOM, jobId=job_id, userId=user_id)


def leave_room_frame(job_id: Any, *, user_id: Any = None) -> Frame:
    return make_frame(FrameType.LEAVE_ROOM, jobId=job_id, userId=user_id)


def send_message_frame(content: str, recipient_id: Any, job_id: Any = None, *, user_id: Any = None) -> Frame:
    return make_frame(
        FrameType.SEND_MESSAGE,
        content=content,
        recipientId=recipient_id,
        jobId=job_id,
        userId=user_id,
    )


def typing_frame(recipient_id: Any, job_id: Any = None, *, user_id: Any = None) -> Frame:
    return make_frame(FrameType.TYPING, recipientId=recipient_id, jobId=job_id, userId=user_id)


def stop_typing_frame(recipient_id: Any, job_id: Any = None, *, user_id: Any = None) -> Frame:
    return make_frame(FrameType.STOP_TYPING, recipientId=recipient_id, jobId=job_id, userId=user_id)


def mark_read_frame(message_id: Any, *, user_id: Any = None) -> Frame:
    return make_frame(FrameType.MARK_READ, messageId=message_id, userId=user_id)


def pong_frame() -> Frame:
    return make_frame(FrameType.PONG)
