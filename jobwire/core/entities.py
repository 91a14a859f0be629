from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class MessageStatus(str, Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    MessageStatus.SENT: 0,
    MessageStatus.DELIVERED: 1,
    MessageStatus.READ: 2,
}


@dataclass
class MessageRecord:
    id: Any
    sender_id: Any
    content: str
    status: MessageStatus = MessageStatus.SENT
    recipient_id: Optional[Any] = None
    job_id: Optional[Any] = None
    timestamp: Optional[str] = None
    sender_name: Optional[str] = None
