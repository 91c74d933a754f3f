"""
Incremental SSE framing over an arbitrarily chunked byte stream.
"""

from __future__ import annotations

import codecs

FRAME_DELIMITER = "\n\n"
DATA_FIELD = "data:"


def extract_data(frame: str) -> str | None:
    """
    Join the ``data:`` lines of one frame.

    One leading space after the colon is stripped. Comments and the
    ``event:``, ``id:`` and ``retry:`` fields are ignored. Returns None
    when the frame carries no data line.
    """
    data_lines: list[str] = []

    for line in frame.split("\n"):
        if line.startswith(DATA_FIELD):
            value = line[len(DATA_FIELD):]
            if value.startswith(" "):
                value = value[1:]
            data_lines.append(value)

    if not data_lines:
        return None
    return "\n".join(data_lines)


class SSEFrameBuffer:
    """
    Pending-event buffer for a single connection attempt.

    Bytes are decoded incrementally so a multi-byte character split across
    chunks survives. Complete frames are removed from the buffer as they
    are found; a trailing partial frame waits for the next chunk.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._encoding = encoding
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._carriage_return = False

    @property
    def pending(self) -> int:
        """Number of buffered characters not yet framed."""
        return len(self._buffer)

    def reset(self) -> None:
        """Drop buffered text and decoder state."""
        self._decoder = codecs.getincrementaldecoder(self._encoding)(errors="replace")
        self._buffer = ""
        self._carriage_return = False

    def feed(self, chunk: bytes) -> list[str]:
        """
        Append a chunk and return the data payload of each completed frame.

        Frames without any ``data:`` line are consumed but not returned.
        """
        text = self._normalize_newlines(self._decoder.decode(chunk))
        self._buffer += text

        payloads: list[str] = []
        while FRAME_DELIMITER in self._buffer:
            frame, self._buffer = self._buffer.split(FRAME_DELIMITER, 1)
            data = extract_data(frame)
            if data is not None:
                payloads.append(data)
        return payloads

    def _normalize_newlines(self, text: str) -> str:
        if not text:
            return text
        # A "\r\n" pair may be split across chunks
        if self._carriage_return and text.startswith("\n"):
            text = text[1:]
        self._carriage_return = text.endswith("\r")
        return text.replace("\r\n", "\n").replace("\r", "\n")
