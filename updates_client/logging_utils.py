"""
Centralized logging utilities for the updates client.

Features:
- Structured logging with contextual information
- Error classification for connection diagnostics
- Context-bound loggers shared across one client's lifetime
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from .exceptions import (
    FrameDecodeError,
    InvalidTargetError,
    NonSuccessResponseError,
    RequestOpenError,
    StreamInterruptedError,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

PAYLOAD_PREVIEW_CHARS = 200


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and therefore structlog) at the given level."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO))


def preview(payload: str, limit: int = PAYLOAD_PREVIEW_CHARS) -> str:
    """Truncate a payload for log output."""
    if len(payload) <= limit:
        return payload
    return payload[:limit] + "..."


class StreamErrorHandler:
    """Maps stream errors to stable categories for structured logs."""

    @staticmethod
    def classify_error(error: BaseException) -> str:
        """
        Classify an error raised while running a connection attempt.

        Args:
            error: The exception to classify

        Returns:
            Category name used as the ``error_category`` log field
        """
        if isinstance(error, InvalidTargetError):
            return "invalid_target"
        if isinstance(error, RequestOpenError):
            return "request_open_error"
        if isinstance(error, NonSuccessResponseError):
            return "http_status_error"
        if isinstance(error, StreamInterruptedError):
            return "stream_interrupted"
        if isinstance(error, FrameDecodeError | ValidationError):
            return "decode_error"
        if isinstance(error, TimeoutError | httpx.TimeoutException):
            return "timeout_error"
        if isinstance(error, httpx.TransportError | ConnectionError | OSError):
            return "connection_error"
        return "unknown_error"


class ContextualLogger:
    """Logger that maintains context across related operations."""

    def __init__(self, base_context: dict[str, Any] | None = None):
        self.base_context = base_context or {}
        self._logger = logger.bind(**self.base_context)

    def bind(self, **context: Any) -> ContextualLogger:
        """Create a new logger with additional context."""
        merged_context = {**self.base_context, **context}
        return ContextualLogger(merged_context)

    def info(self, message: str, **context: Any) -> None:
        """Log info message with context."""
        self._logger.info(message, **context)

    def warning(self, message: str, **context: Any) -> None:
        """Log warning message with context."""
        self._logger.warning(message, **context)

    def error(self, message: str, **context: Any) -> None:
        """Log error message with context."""
        self._logger.error(message, **context)

    def exception(self, message: str, **context: Any) -> None:
        """Log error message with the active exception's traceback."""
        self._logger.exception(message, **context)

    def debug(self, message: str, **context: Any) -> None:
        """Log debug message with context."""
        self._logger.debug(message, **context)
