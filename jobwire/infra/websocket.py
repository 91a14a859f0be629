from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import websockets
from websockets.protocol import State

from jobwire.core.errors import CloseCode, ConnectionError

logger = logging.getLogger(__name__)


class WebSocketTransport:
    """Async WebSocket transport carrying UTF-8 JSON text frames."""

    def __init__(self, url: str, *, open_timeout: float = 10.0, close_timeout: float = 5.0) -> None:
        self.url = url
        self.open_timeout = open_timeout
        self.close_timeout = close_timeout
        self._ws: Any | None = None
        self._recv_task: asyncio.Task[None] | None = None
        self._closing = False
        self.on_message: Callable[[str], Awaitable[None]] | None = None
        self.on_close: Callable[[int, str], Awaitable[None]] | None = None

    async def connect(self) -> None:
        """Opens the socket and starts the receive loop."""
        try:
            self._ws = await websockets.connect(
                self.url,
                open_timeout=self.open_timeout,
                close_timeout=self.close_timeout,
                ping_interval=None,  # liveness is the server's application-level ping/pong
            )
        except Exception as e:
            raise ConnectionError(f"Failed to connect to {self.url}: {e}", code=int(CloseCode.ABNORMAL_CLOSURE)) from e

        self._closing = False
        self._recv_task = asyncio.create_task(self._listen_loop())

    async def close(self, code: int = CloseCode.NORMAL_CLOSURE, reason: str = "") -> None:
        """Closes the socket locally. ``on_close`` is not fired for a local close."""
        self._closing = True
        task = self._recv_task
        self._recv_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        ws = self._ws
        self._ws = None
        if ws is not None:
            await ws.close(code=int(code), reason=reason)

    async def send(self, data: str) -> None:
        if not self.is_open():
            raise ConnectionError("WebSocket is disconnected")
        try:
            await self._ws.send(data)
        except websockets.exceptions.ConnectionClosed as e:
            raise ConnectionError(f"WebSocket closed while sending: {e}", code=_close_code(e)) from e

    def is_open(self) -> bool:
        ws = self._ws
        if ws is None:
            return False

        # websockets<=11 style API
        if hasattr(ws, "closed"):
            return not bool(getattr(ws, "closed"))

        # websockets>=12 style API
        state = getattr(ws, "state", None)
        if state is None:
            return False
        return state == State.OPEN or state == 1

    async def _listen_loop(self) -> None:
        """Receives frames in arrival order and hands each to ``on_message``."""
        code = int(CloseCode.ABNORMAL_CLOSURE)
        reason = ""
        try:
            while True:
                message = await self._ws.recv()
                if isinstance(message, bytes):
                    try:
                        message = message.decode("utf-8")
                    except UnicodeDecodeError:
                        logger.warning("dropping non UTF-8 binary frame (%d bytes)", len(message))
                        continue
                if self.on_message is None:
                    continue
                try:
                    await self.on_message(message)
                except Exception:
                    logger.exception("message handler failed")
        except websockets.exceptions.ConnectionClosed as e:
            code = _close_code(e)
            reason = _close_reason(e)
        except asyncio.CancelledError:
            return
        except Exception as e:
            logger.warning("receive loop failed: %s", e)

        self._ws = None
        if self._closing or self.on_close is None:
            return
        await self.on_close(code, reason)


def _close_code(exc: websockets.exceptions.ConnectionClosed) -> int:
    rcvd = getattr(exc, "rcvd", None)
    if rcvd is not None:
        return int(rcvd.code)
    return int(CloseCode.ABNORMAL_CLOSURE)


def _close_reason(exc: websockets.exceptions.ConnectionClosed) -> str:
    rcvd = getattr(exc, "rcvd", None)
    if rcvd is not None:
        return str(rcvd.reason or "")
    return ""
