"""
Connection state dataclasses for the updates stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ConnectionStatus(Enum):
    """Connection lifecycle states."""
    IDLE = "idle"              # No active or pending connection
    CONNECTING = "connecting"  # Request issued, no accepted response yet
    CONNECTED = "connected"    # 2xx received, bytes flowing
    FAILED = "failed"          # Attempt over; retry pending or giving up


@dataclass(frozen=True)
class ConnectionState:
    """Immutable snapshot of the connection state reported to observers."""
    status: ConnectionStatus
    reason: str | None = None

    @classmethod
    def idle(cls) -> ConnectionState:
        return cls(ConnectionStatus.IDLE)

    @classmethod
    def connecting(cls) -> ConnectionState:
        return cls(ConnectionStatus.CONNECTING)

    @classmethod
    def connected(cls) -> ConnectionState:
        return cls(ConnectionStatus.CONNECTED)

    @classmethod
    def failed(cls, reason: str) -> ConnectionState:
        return cls(ConnectionStatus.FAILED, reason)

    def __str__(self) -> str:
        if self.reason is not None:
            return f"{self.status.value}({self.reason})"
        return self.status.value
