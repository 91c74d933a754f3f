"""
Streaming primitives for the updates client.

- Connection state model
- SSE frame buffering and data-line extraction
- Reconnection backoff policy
"""

from __future__ import annotations

from .backoff import ReconnectPolicy, RetryState
from .models import ConnectionState, ConnectionStatus
from .parser import SSEFrameBuffer, extract_data

__all__ = [
    "ConnectionState",
    "ConnectionStatus",
    "ReconnectPolicy",
    "RetryState",
    "SSEFrameBuffer",
    "extract_data",
]
