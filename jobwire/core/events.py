from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from jobwire.core.state import ConnectionState


@dataclass(frozen=True)
class ConnectionEvent:
    state: ConnectionState
    previous: ConnectionState
    reason: Optional[Exception] = None
