from __future__ import annotations

import logging
from collections import deque
from collections.abc import Awaitable, Callable, Iterator

from jobwire.core.errors import ConnectionError
from jobwire.protocol.frame import Frame

logger = logging.getLogger(__name__)


class OutboundQueue:
    """FIFO of frames waiting for an authenticated connection.

    Frames leave the queue only after the transport accepted them.
    """

    def __init__(self) -> None:
        self._frames: deque[Frame] = deque()

    def enqueue(self, frame: Frame) -> None:
        self._frames.append(frame)
        logger.debug("queued %s (%d pending)", frame.type, len(self._frames), extra={"frame_type": frame.type})

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(tuple(self._frames))

    def snapshot(self) -> tuple[Frame, ...]:
        return tuple(self._frames)

    async def flush(self, send: Callable[[Frame], Awaitable[None]], is_open: Callable[[], bool]) -> int:
        """Sends queued frames in order until empty or the transport goes away.

        Frames appended while a flush is running are drained by the same flush.
        Returns the number of frames sent.
        """
        sent = 0
        while self._frames:
            if not is_open():
                logger.info("transport closed mid-flush; %d frames stay queued", len(self._frames))
                break
            frame = self._frames[0]
            try:
                await send(frame)
            except ConnectionError as exc:
                logger.warning("flush stopped at %s: %s", frame.type, exc, extra={"frame_type": frame.type})
                break
            if self._frames and self._frames[0] is frame:
                self._frames.popleft()
            sent += 1
        if sent:
            logger.info("flushed %d queued frames", sent)
        return sent
