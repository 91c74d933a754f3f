"""
Real-time updates client for the file search backend.

This package provides:
- A server-sent events stream client with automatic reconnection
- Incremental frame parsing over arbitrarily chunked bytes
- Typed backend update events
- YAML/.env configuration and structured logging
"""

from __future__ import annotations

from .config import Configuration
from .events import BackendUpdateEvent, EventData, EventOpcode, decode_update_event
from .exceptions import (
    FrameDecodeError,
    InvalidTargetError,
    NonSuccessResponseError,
    RequestOpenError,
    StreamInterruptedError,
    UpdatesStreamError,
)
from .stream_client import (
    CallbackObserver,
    StreamClient,
    UpdatesObserver,
    build_updates_url,
)
from .streaming import (
    ConnectionState,
    ConnectionStatus,
    ReconnectPolicy,
    RetryState,
    SSEFrameBuffer,
)

__all__ = [
    # Events
    "BackendUpdateEvent",
    # Client
    "CallbackObserver",
    # Configuration
    "Configuration",
    # State
    "ConnectionState",
    "ConnectionStatus",
    "EventData",
    "EventOpcode",
    # Exceptions
    "FrameDecodeError",
    "InvalidTargetError",
    "NonSuccessResponseError",
    "ReconnectPolicy",
    "RequestOpenError",
    "RetryState",
    "SSEFrameBuffer",
    "StreamClient",
    "StreamInterruptedError",
    "UpdatesObserver",
    "UpdatesStreamError",
    "build_updates_url",
    "decode_update_event",
]
