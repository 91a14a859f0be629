"""Online presence derived from ``user_status_change`` frames."""

from __future__ import annotations

from typing import Any

ONLINE = "online"


class PresenceTracker:
    def __init__(self) -> None:
        self._online: set[Any] = set()

    def apply_status(self, user_id: Any, status: str | None) -> bool:
        """Returns True when the online set changed."""
        if status == ONLINE:
            if user_id in self._online:
                return False
            self._online.add(user_id)
            return True
        if user_id not in self._online:
            return False
        self._online.discard(user_id)
        return True

    def is_online(self, user_id: Any) -> bool:
        return user_id in self._online

    def online(self) -> frozenset[Any]:
        return frozenset(self._online)

    def clear(self) -> None:
        self._online.clear()
