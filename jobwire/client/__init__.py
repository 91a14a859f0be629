"""Client package public exports."""

from .client import ChatClient
from .dispatcher import Dispatcher
from .message_log import MessageLog
from .outbound_queue import OutboundQueue
from .presence import PresenceTracker
from .reconnect import ReconnectScheduler, compute_backoff_delay
from .rooms import RoomTracker
from .typing_tracker import TypingTracker

__all__ = [
    "ChatClient",
    "Dispatcher",
    "MessageLog",
    "OutboundQueue",
    "PresenceTracker",
    "ReconnectScheduler",
    "RoomTracker",
    "TypingTracker",
    "compute_backoff_delay",
]
