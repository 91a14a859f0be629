"""Job room membership as reported by the server."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class RoomTracker:
    def __init__(self) -> None:
        self._members: dict[Any, set[Any]] = {}

    def joined(self, job_id: Any, members: Iterable[Any] | None) -> None:
        self._members[job_id] = set(members or ())

    def user_joined(self, job_id: Any, user_id: Any) -> None:
        self._members.setdefault(job_id, set()).add(user_id)

    def user_left(self, job_id: Any, user_id: Any, *, local_user_id: Any = None) -> None:
        if local_user_id is not None and user_id == local_user_id:
            self._members.pop(job_id, None)
            return
        members = self._members.get(job_id)
        if members is None:
            return
        members.discard(user_id)

    def rooms(self) -> frozenset[Any]:
        return frozenset(self._members)

    def members(self, job_id: Any) -> frozenset[Any]:
        return frozenset(self._members.get(job_id, ()))

    def clear(self) -> None:
        self._members.clear()
