"""Real-time connection manager for the marketplace messaging backend."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from jobwire.client.dispatcher import Dispatcher
from jobwire.client.message_log import MessageLog
from jobwire.client.outbound_queue import OutboundQueue
from jobwire.client.presence import PresenceTracker
from jobwire.client.reconnect import ReconnectScheduler
from jobwire.client.rooms import RoomTracker
from jobwire.client.typing_tracker import TypingTracker
from jobwire.core.errors import CloseCode, JobwireError, ProtocolError, ReconnectExhaustedError, ServerError
from jobwire.core.errors import ConnectionError as JobwireConnectionError
from jobwire.core.events import ConnectionEvent
from jobwire.core.state import ACTIVE_STATES, ConnectionState, ConnectionStateMachine
from jobwire.defaults.config import DEFAULT_CONNECTION_CONFIG, build_ws_url
from jobwire.infra.timers import loop_call_later
from jobwire.infra.websocket import WebSocketTransport
from jobwire.protocol import frame as frames
from jobwire.protocol.frame_codec import decode_frame, encode_frame

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from jobwire.core.entities import MessageRecord
    from jobwire.infra.timers import CallLater
    from jobwire.protocol.frame import Frame

logger = logging.getLogger(__name__)


class ChatClient:
    """Owns the single live messaging connection.

    ``connect(user_id)`` opens the socket, authenticates, and flushes frames
    queued while offline. Abnormal closures are retried with capped, jittered
    backoff; ``disconnect()`` closes with the normal-closure code and never
    reconnects. Presence, typing, room and message state are rebuilt from
    inbound frames by the dispatcher and exposed read-only.
    """

    def __init__(
        self,
        host: str | None = None,
        *,
        ws_url: str | None = None,
        transport_factory: Callable[..., Any] | None = None,
        call_later: CallLater | None = None,
        rng: Callable[[], float] | None = None,
        **config_overrides: Any,
    ) -> None:
        self.config: dict[str, Any] = {**DEFAULT_CONNECTION_CONFIG, **config_overrides}
        if host is not None:
            self.config["host"] = host
        self.ws_url = ws_url or build_ws_url(
            str(self.config["host"]),
            secure=bool(self.config["secure"]),
            path=str(self.config["ws_path"]),
        )

        self._transport_factory = transport_factory or WebSocketTransport
        call_later = call_later or loop_call_later

        self._machine = ConnectionStateMachine()
        self._transport: Any | None = None
        self._queue = OutboundQueue()
        scheduler_options: dict[str, Any] = {} if rng is None else {"rng": rng}
        self._scheduler = ReconnectScheduler(
            self._on_reconnect_due,
            call_later=call_later,
            max_attempts=int(self.config["max_reconnect_attempts"]),
            base_delay_ms=float(self.config["reconnect_base_delay_ms"]),
            multiplier=float(self.config["reconnect_multiplier"]),
            max_delay_ms=float(self.config["reconnect_max_delay_ms"]),
            jitter_ms=float(self.config["reconnect_jitter_ms"]),
            **scheduler_options,
        )
        self._presence = PresenceTracker()
        self._typing = TypingTracker(call_later=call_later, timeout_ms=float(self.config["typing_timeout_ms"]))
        self._rooms = RoomTracker()
        self._message_log = MessageLog()
        self._dispatcher = Dispatcher(self)

        self.user_id: Any | None = None
        self.connection_id: str | None = None
        self.last_connected: datetime | None = None
        self._connect_task: asyncio.Task[None] | None = None

        self.on_state_change: Callable[[ConnectionEvent], Awaitable[None]] = self._default_state_handler
        self.on_frame: Callable[[Frame], Awaitable[None]] = self._default_frame_handler
        self.on_server_error: Callable[[ServerError], Awaitable[None]] = self._default_server_error_handler
        self.on_reconnect_exhausted: Callable[[ReconnectExhaustedError], Awaitable[None]] = (
            self._default_exhausted_handler
        )

    async def __aenter__(self) -> ChatClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()

    # -- read-only views -------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._machine.state

    def is_connected(self) -> bool:
        return self._machine.state is ConnectionState.AUTHENTICATED

    @property
    def reconnect_attempts(self) -> int:
        return self._scheduler.attempts

    @property
    def reconnect_exhausted(self) -> bool:
        return self._scheduler.exhausted

    @property
    def online_users(self) -> frozenset[Any]:
        return self._presence.online()

    @property
    def typing_users(self) -> frozenset[Any]:
        return self._typing.typing()

    @property
    def rooms(self) -> frozenset[Any]:
        return self._rooms.rooms()

    def room_members(self, job_id: Any) -> frozenset[Any]:
        return self._rooms.members(job_id)

    @property
    def messages(self) -> tuple[MessageRecord, ...]:
        return self._message_log.records()

    @property
    def unread_counts(self) -> dict[Any, int]:
        return self._message_log.unread_counts()

    @property
    def queued_frames(self) -> int:
        return len(self._queue)

    # -- lifecycle -------------------------------------------------------

    async def connect(self, user_id: Any) -> None:
        if self.state in ACTIVE_STATES:
            logger.debug("connect() ignored while %s", self.state.value, extra={"state": self.state})
            return
        self.user_id = user_id
        self._scheduler.cancel()
        if self._scheduler.exhausted:
            self._scheduler.reset()
        await self._open_transport()

    async def disconnect(self) -> None:
        self._scheduler.cancel()
        self._cancel_connect_task()
        event = None
        if self.state is not ConnectionState.CLOSED:
            event = self._transition(ConnectionState.CLOSED)
        self._typing.clear()
        self._rooms.clear()
        self._presence.clear()
        await self._discard_transport("client disconnect")
        if event is not None:
            await self._notify(event)

    async def force_reconnect(self) -> None:
        """Starts over with a fresh attempt budget, dropping the current socket."""
        if self.user_id is None:
            raise JobwireError("force_reconnect() requires a prior connect(user_id)")
        self._scheduler.reset()
        self._cancel_connect_task()
        self._typing.clear()
        self._rooms.clear()
        await self._discard_transport("forced reconnect")
        if self.state not in (ConnectionState.DISCONNECTED, ConnectionState.CLOSED):
            await self._notify(self._transition(ConnectionState.DISCONNECTED))
        await self._open_transport()

    def set_page_visible(self, visible: bool) -> None:
        self._scheduler.set_visible(visible)

    # -- caller-facing operations ----------------------------------------

    async def send_frame(self, frame: Frame) -> bool:
        """Sends now when authenticated with nothing queued ahead, else queues.

        Returns True if the frame went out immediately.
        """
        if self.state is ConnectionState.AUTHENTICATED and not self._queue:
            try:
                await self._send_direct(frame)
                return True
            except JobwireConnectionError as exc:
                logger.warning("send of %s failed, queueing: %s", frame.type, exc, extra={"frame_type": frame.type})
        self._queue.enqueue(frame)
        return False

    async def send_message(self, content: str, recipient_id: Any, job_id: Any = None) -> bool:
        return await self.send_frame(frames.send_message_frame(content, recipient_id, job_id, user_id=self.user_id))

    async def join_room(self, job_id: Any) -> bool:
        return await self.send_frame(frames.join_room_frame(job_id, user_id=self.user_id))

    async def leave_room(self, job_id: Any) -> bool:
        return await self.send_frame(frames.leave_room_frame(job_id, user_id=self.user_id))

    async def start_typing(self, recipient_id: Any, job_id: Any = None) -> bool:
        return await self.send_frame(frames.typing_frame(recipient_id, job_id, user_id=self.user_id))

    async def stop_typing(self, recipient_id: Any, job_id: Any = None) -> bool:
        return await self.send_frame(frames.stop_typing_frame(recipient_id, job_id, user_id=self.user_id))

    async def mark_read(self, message_id: Any) -> bool:
        return await self.send_frame(frames.mark_read_frame(message_id, user_id=self.user_id))

    # -- transport plumbing ----------------------------------------------

    async def _open_transport(self) -> None:
        await self._discard_transport("replaced")
        await self._notify(self._transition(ConnectionState.CONNECTING))
        if self.state is not ConnectionState.CONNECTING:
            return

        transport = self._transport_factory(
            self.ws_url,
            open_timeout=float(self.config["open_timeout"]),
            close_timeout=float(self.config["close_timeout"]),
        )

        async def _on_message(data: str) -> None:
            await self._handle_raw_message(transport, data)

        async def _on_close(code: int, reason: str) -> None:
            await self._handle_transport_close(transport, code, reason)

        transport.on_message = _on_message
        transport.on_close = _on_close
        self._transport = transport
        logger.info("connecting to %s", self.ws_url, extra={"user_id": self.user_id})

        try:
            await transport.connect()
        except JobwireConnectionError as exc:
            if self._transport is not transport:
                return
            self._transport = None
            logger.warning("open failed: %s", exc, extra={"close_code": exc.code})
            await self._handle_abnormal_close(exc)
            return

        if self._transport is not transport or self.state is not ConnectionState.CONNECTING:
            # disconnect() or a newer connect ran while the socket was opening
            _detach(transport)
            await transport.close(CloseCode.NORMAL_CLOSURE, "superseded")
            return

        await self._notify(self._transition(ConnectionState.OPEN))
        if self.state is not ConnectionState.OPEN:
            return
        try:
            await self._send_direct(frames.authenticate_frame(self.user_id))
        except JobwireConnectionError as exc:
            logger.warning("could not send authenticate frame: %s", exc)

    async def _discard_transport(self, reason: str) -> None:
        transport = self._transport
        self._transport = None
        if transport is None:
            return
        _detach(transport)
        try:
            await transport.close(CloseCode.NORMAL_CLOSURE, reason)
        except Exception as exc:
            logger.debug("closing transport failed: %s", exc)

    async def _send_direct(self, frame: Frame) -> None:
        transport = self._transport
        if transport is None or not transport.is_open():
            raise JobwireConnectionError("Cannot send frame: not connected")
        await _send_on(transport, frame)

    async def _handle_raw_message(self, transport: Any, data: str) -> None:
        if transport is not self._transport:
            return
        try:
            frame = decode_frame(data)
        except ProtocolError as exc:
            logger.warning("dropping malformed frame: %s", exc)
            return

        logger.debug("received %s", frame.type, extra={"frame_type": frame.type})
        await self._dispatcher.dispatch(frame)
        try:
            await self.on_frame(frame)
        except Exception:
            logger.exception("on_frame callback failed for %s", frame.type)

    async def _handle_transport_close(self, transport: Any, code: int, reason: str) -> None:
        if transport is not self._transport:
            return
        self._transport = None
        self._typing.clear()
        self._rooms.clear()
        logger.info("transport closed: %s %s", code, reason, extra={"close_code": code})

        if code == CloseCode.NORMAL_CLOSURE:
            await self._notify(self._transition(ConnectionState.DISCONNECTED))
            return
        detail = f"connection closed abnormally ({code})"
        if reason:
            detail = f"{detail}: {reason}"
        await self._handle_abnormal_close(JobwireConnectionError(detail, code=code))

    async def _handle_abnormal_close(self, reason: Exception) -> None:
        if self._scheduler.attempts >= self._scheduler.max_attempts:
            self._scheduler.schedule()
            exhausted = ReconnectExhaustedError(self._scheduler.attempts)
            await self._notify(self._transition(ConnectionState.DISCONNECTED, reason=exhausted))
            try:
                await self.on_reconnect_exhausted(exhausted)
            except Exception:
                logger.exception("on_reconnect_exhausted callback failed")
            return

        # RECONNECTING must be set before the timer is armed
        event = self._transition(ConnectionState.RECONNECTING, reason=reason)
        self._scheduler.schedule()
        await self._notify(event)

    def _on_reconnect_due(self) -> None:
        if self.state is not ConnectionState.RECONNECTING:
            return
        self._connect_task = asyncio.get_running_loop().create_task(self._run_reconnect())

    async def _run_reconnect(self) -> None:
        if self.state is not ConnectionState.RECONNECTING:
            return
        try:
            await self._open_transport()
        except Exception:
            logger.exception("reconnect attempt crashed")

    def _cancel_connect_task(self) -> None:
        task = self._connect_task
        self._connect_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    # -- dispatcher hooks ------------------------------------------------

    async def _handle_connection_ack(self, frame: Frame) -> None:
        connection_id = frame.get("connectionId")
        if connection_id is not None:
            self.connection_id = str(connection_id)
        logger.debug("connection acknowledged", extra={"connection_id": self.connection_id})

    async def _handle_authenticated(self, frame: Frame) -> None:
        if self.state is not ConnectionState.OPEN:
            logger.warning("authenticated frame ignored while %s", self.state.value, extra={"state": self.state})
            return
        connection_id = frame.get("connectionId")
        if connection_id is not None:
            self.connection_id = str(connection_id)
        self.last_connected = datetime.now(timezone.utc)
        self._scheduler.reset()
        event = self._transition(ConnectionState.AUTHENTICATED)

        transport = self._transport
        if transport is not None:

            async def _send(queued: Frame) -> None:
                await _send_on(transport, queued)

            await self._queue.flush(_send, transport.is_open)
        await self._notify(event)

    async def _send_pong(self) -> None:
        await self._send_direct(frames.pong_frame())

    async def _handle_server_error(self, frame: Frame) -> None:
        message = str(frame.get("message") or "unknown server error")
        logger.error("server error: %s", message, extra={"connection_id": self.connection_id})
        try:
            await self.on_server_error(ServerError(message, frame))
        except Exception:
            logger.exception("on_server_error callback failed")

    # -- state -----------------------------------------------------------

    def _transition(self, target: ConnectionState, reason: Exception | None = None) -> ConnectionEvent:
        previous = self._machine.transition(target)
        logger.info("connection %s -> %s", previous.value, target.value, extra={"state": target})
        return ConnectionEvent(state=target, previous=previous, reason=reason)

    async def _notify(self, event: ConnectionEvent) -> None:
        try:
            await self.on_state_change(event)
        except Exception:
            logger.exception("on_state_change callback failed")

    async def _default_state_handler(self, event: ConnectionEvent) -> None:
        logger.debug("connection update: %s", event)

    async def _default_frame_handler(self, frame: Frame) -> None:
        logger.debug("frame: %s", frame.type)

    async def _default_server_error_handler(self, error: ServerError) -> None:
        logger.debug("server error surfaced: %s", error)

    async def _default_exhausted_handler(self, error: ReconnectExhaustedError) -> None:
        logger.error("%s", error)


async def _send_on(transport: Any, frame: Frame) -> None:
    await transport.send(encode_frame(frame))
    logger.debug("sent %s", frame.type, extra={"frame_type": frame.type})


def _detach(transport: Any) -> None:
    transport.on_message = None
    transport.on_close = None
