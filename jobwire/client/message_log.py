"""Ordered log of delivered messages with monotonic delivery status."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from jobwire.core.entities import MessageRecord, MessageStatus

logger = logging.getLogger(__name__)


class MessageLog:
    def __init__(self) -> None:
        self._records: list[MessageRecord] = []
        self._by_id: dict[Any, MessageRecord] = {}
        self._unread: dict[Any, int] = {}

    def append(self, record: MessageRecord, *, local_user_id: Any = None) -> bool:
        """Adds a record. Returns False for an id already in the log."""
        if record.id is not None and record.id in self._by_id:
            logger.debug("ignoring duplicate message %s", record.id)
            return False
        self._records.append(record)
        if record.id is not None:
            self._by_id[record.id] = record
        if record.sender_id is not None and record.sender_id != local_user_id:
            self._unread[record.sender_id] = self._unread.get(record.sender_id, 0) + 1
        return True

    def advance(self, message_id: Any, status: MessageStatus) -> bool:
        """Moves a record's status forward. Unknown ids and backward moves are no-ops."""
        record = self._by_id.get(message_id)
        if record is None:
            logger.debug("status %s for unknown message %s ignored", status.value, message_id)
            return False
        if status.rank <= record.status.rank:
            return False
        record.status = status
        return True

    def get(self, message_id: Any) -> MessageRecord | None:
        record = self._by_id.get(message_id)
        return dataclasses.replace(record) if record is not None else None

    def records(self) -> tuple[MessageRecord, ...]:
        return tuple(dataclasses.replace(record) for record in self._records)

    def unread_counts(self) -> dict[Any, int]:
        return dict(self._unread)

    def __len__(self) -> int:
        return len(self._records)
