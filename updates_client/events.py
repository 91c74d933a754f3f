"""
Backend update event models.

The backend pushes one JSON object per frame:
{"opcode": "file_parsing", "data": {"path": "...", "filename": "..."}}
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, ValidationError

from .exceptions import FrameDecodeError
from .logging_utils import preview


class EventOpcode(str, Enum):
    """Operation codes sent by the backend."""
    # Watch management
    WATCH_STARTED = "watch_started"
    WATCH_ADDED = "watch_added"
    WATCH_REMOVED = "watch_removed"

    # Directory processing
    DIRECTORY_PROCESSING_STARTED = "directory_processing_started"
    DIRECTORY_PROCESSING_COMPLETED = "directory_processing_completed"

    # File processing pipeline
    FILE_PARSING = "file_parsing"
    FILE_PARSED = "file_parsed"
    FILE_SUMMARIZING = "file_summarizing"
    FILE_SUMMARIZED = "file_summarized"
    FILE_EMBEDDING = "file_embedding"
    FILE_EMBEDDED = "file_embedded"
    FILE_COMPLETE = "file_complete"
    FILE_FAILED = "file_failed"
    FILE_SKIPPED = "file_skipped"

    # File system events
    FILE_CREATED = "file_created"
    FILE_MODIFIED = "file_modified"
    FILE_DELETED = "file_deleted"
    FILE_MOVED = "file_moved"

    # General events
    STATUS_UPDATE = "status_update"
    ERROR = "error"
    INFO = "info"
    SHUTTING_DOWN = "shutting_down"

    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> EventOpcode | None:
        # Newer backends may add opcodes
        if isinstance(value, str):
            return cls.UNKNOWN
        return None

    @property
    def is_directory_event(self) -> bool:
        return self in _DIRECTORY_OPCODES

    @property
    def is_file_event(self) -> bool:
        return self in _FILE_OPCODES


_DIRECTORY_OPCODES = frozenset({
    EventOpcode.WATCH_STARTED,
    EventOpcode.WATCH_ADDED,
    EventOpcode.WATCH_REMOVED,
    EventOpcode.DIRECTORY_PROCESSING_STARTED,
    EventOpcode.DIRECTORY_PROCESSING_COMPLETED,
})

_FILE_OPCODES = frozenset({
    EventOpcode.FILE_PARSING,
    EventOpcode.FILE_PARSED,
    EventOpcode.FILE_SUMMARIZING,
    EventOpcode.FILE_SUMMARIZED,
    EventOpcode.FILE_EMBEDDING,
    EventOpcode.FILE_EMBEDDED,
    EventOpcode.FILE_COMPLETE,
    EventOpcode.FILE_FAILED,
    EventOpcode.FILE_SKIPPED,
    EventOpcode.FILE_CREATED,
    EventOpcode.FILE_MODIFIED,
    EventOpcode.FILE_DELETED,
    EventOpcode.FILE_MOVED,
})


class EventData(BaseModel):
    """Nested payload of a backend event; every field is optional."""
    model_config = ConfigDict(frozen=True)

    path: str | None = None
    filename: str | None = None
    error: str | None = None
    reason: str | None = None
    src_path: str | None = None
    dest_path: str | None = None
    message: str | None = None


class BackendUpdateEvent(BaseModel):
    """One decoded update pushed by the backend."""
    model_config = ConfigDict(frozen=True)

    opcode: EventOpcode
    data: EventData

    @property
    def file_path(self) -> str | None:
        return self.data.path

    @property
    def directory_path(self) -> str | None:
        """The event path, for directory-level events only."""
        if self.opcode.is_directory_event:
            return self.data.path
        return None

    @property
    def error_message(self) -> str | None:
        return self.data.error

    @property
    def reason(self) -> str | None:
        return self.data.reason

    @property
    def filename(self) -> str | None:
        return self.data.filename

    @property
    def src_path(self) -> str | None:
        return self.data.src_path

    @property
    def dest_path(self) -> str | None:
        return self.data.dest_path

    @property
    def message(self) -> str | None:
        return self.data.message


def decode_update_event(payload: str) -> BackendUpdateEvent:
    """
    Decode the joined ``data:`` payload of one frame.

    Raises:
        FrameDecodeError: If the payload is not JSON or does not match
            the event schema.
    """
    try:
        return BackendUpdateEvent.model_validate_json(payload)
    except ValidationError as e:
        raise FrameDecodeError(
            f"Invalid update event: {e.error_count()} validation error(s)",
            payload=preview(payload),
        ) from e
