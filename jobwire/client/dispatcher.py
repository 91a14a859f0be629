"""Routes inbound frames to the state they affect."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

from jobwire.core.entities import MessageRecord, MessageStatus
from jobwire.protocol.frame import Frame, FrameType

if TYPE_CHECKING:
    from jobwire.client.client import ChatClient

logger = logging.getLogger(__name__)

FrameHandler = Callable[[Frame], Awaitable[None]]

_STATUS_BY_TYPE = {
    FrameType.MESSAGE_SENT.value: MessageStatus.SENT,
    FrameType.MESSAGE_DELIVERED.value: MessageStatus.DELIVERED,
    FrameType.MESSAGE_READ.value: MessageStatus.READ,
}


class Dispatcher:
    """Closed routing table from frame ``type`` to exactly one handler.

    The dispatcher is the only writer of the client's presence, typing, room
    and message-log state.
    """

    def __init__(self, client: ChatClient) -> None:
        self.client = client
        self._routes: dict[str, FrameHandler] = {
            FrameType.CONNECTION_ACK.value: self._on_connection_ack,
            FrameType.AUTHENTICATED.value: self._on_authenticated,
            FrameType.ROOM_JOINED.value: self._on_room_joined,
            FrameType.USER_JOINED_ROOM.value: self._on_user_joined_room,
            FrameType.USER_LEFT_ROOM.value: self._on_user_left_room,
            FrameType.NEW_MESSAGE.value: self._on_new_message,
            FrameType.MESSAGE_SENT.value: self._on_message_status,
            FrameType.MESSAGE_DELIVERED.value: self._on_message_status,
            FrameType.MESSAGE_READ.value: self._on_message_status,
            FrameType.USER_TYPING.value: self._on_user_typing,
            FrameType.USER_STOPPED_TYPING.value: self._on_user_stopped_typing,
            FrameType.USER_STATUS_CHANGE.value: self._on_user_status_change,
            FrameType.PING.value: self._on_ping,
            FrameType.PONG.value: self._on_pong,
            FrameType.ERROR.value: self._on_error,
        }

    @property
    def known_types(self) -> frozenset[str]:
        return frozenset(self._routes)

    async def dispatch(self, frame: Frame) -> bool:
        """Runs the handler for ``frame``. Never raises.

        Returns False for unknown types and for handlers that failed.
        """
        handler = self._routes.get(frame.type)
        if handler is None:
            logger.info("ignoring unknown frame type %r", frame.type, extra={"frame_type": frame.type})
            return False
        try:
            await handler(frame)
        except Exception:
            logger.exception("handler for %s failed", frame.type, extra={"frame_type": frame.type})
            return False
        return True

    async def _on_connection_ack(self, frame: Frame) -> None:
        await self.client._handle_connection_ack(frame)

    async def _on_authenticated(self, frame: Frame) -> None:
        await self.client._handle_authenticated(frame)

    async def _on_room_joined(self, frame: Frame) -> None:
        job_id = frame.get("jobId")
        if job_id is None:
            return
        members = frame.get("members")
        self.client._rooms.joined(job_id, members if isinstance(members, (list, tuple)) else None)
        logger.debug("joined room %s", job_id)

    async def _on_user_joined_room(self, frame: Frame) -> None:
        job_id, user_id = frame.get("jobId"), frame.get("userId")
        if job_id is None or user_id is None:
            return
        self.client._rooms.user_joined(job_id, user_id)

    async def _on_user_left_room(self, frame: Frame) -> None:
        job_id, user_id = frame.get("jobId"), frame.get("userId")
        if job_id is None or user_id is None:
            return
        self.client._rooms.user_left(job_id, user_id, local_user_id=self.client.user_id)

    async def _on_new_message(self, frame: Frame) -> None:
        record = _record_from_frame(frame)
        if record is None:
            logger.warning("new_message without an id dropped")
            return
        self.client._message_log.append(record, local_user_id=self.client.user_id)

    async def _on_message_status(self, frame: Frame) -> None:
        message_id = frame.get("messageId")
        if message_id is None:
            return
        self.client._message_log.advance(message_id, _STATUS_BY_TYPE[frame.type])

    async def _on_user_typing(self, frame: Frame) -> None:
        user_id = frame.get("userId")
        if user_id is None:
            return
        self.client._typing.started(user_id)

    async def _on_user_stopped_typing(self, frame: Frame) -> None:
        user_id = frame.get("userId")
        if user_id is None:
            return
        self.client._typing.stopped(user_id)

    async def _on_user_status_change(self, frame: Frame) -> None:
        user_id = frame.get("userId")
        if user_id is None:
            return
        self.client._presence.apply_status(user_id, frame.get("status"))

    async def _on_ping(self, frame: Frame) -> None:
        await self.client._send_pong()

    async def _on_pong(self, frame: Frame) -> None:
        logger.debug("pong received")

    async def _on_error(self, frame: Frame) -> None:
        await self.client._handle_server_error(frame)


def _record_from_frame(frame: Frame) -> MessageRecord | None:
    nested = frame.get("message")
    source: Mapping[str, Any] = nested if isinstance(nested, Mapping) else frame.payload
    message_id = source.get("messageId", source.get("id"))
    if message_id is None:
        return None
    status_raw = source.get("status")
    try:
        status = MessageStatus(status_raw) if status_raw is not None else MessageStatus.SENT
    except ValueError:
        status = MessageStatus.SENT
    return MessageRecord(
        id=message_id,
        sender_id=source.get("senderId"),
        content=str(source.get("content", "")),
        status=status,
        recipient_id=source.get("recipientId"),
        job_id=source.get("jobId"),
        timestamp=source.get("timestamp"),
        sender_name=source.get("senderName"),
    )
