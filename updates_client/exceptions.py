"""
Error types for the updates stream client.

The stream never raises these to its caller. Connection failures are
reported through the state observer as ``failed(reason)`` and frame
decode failures only reach the diagnostic log:
- Invalid target URLs (no request is issued)
- Request open failures from the transport
- Non-2xx responses
- Mid-stream interruptions and remote closes
- Per-frame decode failures
"""

from __future__ import annotations


class UpdatesStreamError(Exception):
    """Base updates stream error with the target URL for context."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class InvalidTargetError(UpdatesStreamError):
    """The base URL cannot be turned into an updates request."""
    pass


class RequestOpenError(UpdatesStreamError):
    """The transport failed before a response arrived."""
    pass


class NonSuccessResponseError(UpdatesStreamError):
    """The backend answered with a status outside the 2xx range."""

    def __init__(self, message: str, status_code: int, url: str | None = None):
        super().__init__(message, url=url)
        self.status_code = status_code


class StreamInterruptedError(UpdatesStreamError):
    """The stream dropped or was closed by the remote end after connecting."""
    pass


class FrameDecodeError(UpdatesStreamError):
    """One frame's payload could not be decoded into an event."""

    def __init__(self, message: str, payload: str = ""):
        super().__init__(message)
        self.payload = payload
