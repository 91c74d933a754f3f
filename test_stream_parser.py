#!/usr/bin/env python3
"""
Tests for incremental SSE framing.
"""

from updates_client.streaming.parser import SSEFrameBuffer, extract_data


class TestExtractData:
    """Test data-line extraction from one frame."""

    def test_single_data_line(self):
        assert extract_data('data: {"a": 1}') == '{"a": 1}'

    def test_strips_only_one_leading_space(self):
        assert extract_data("data:  indented") == " indented"
        assert extract_data("data:tight") == "tight"

    def test_joins_data_lines_with_newline(self):
        frame = "data: first\ndata: second\ndata: third"
        assert extract_data(frame) == "first\nsecond\nthird"

    def test_ignores_other_fields_and_comments(self):
        frame = ": keep-alive\nevent: update\nid: 42\nretry: 1000\ndata: payload"
        assert extract_data(frame) == "payload"

    def test_frame_without_data_returns_none(self):
        assert extract_data(": ping") is None
        assert extract_data("event: heartbeat\nid: 3") is None

    def test_empty_data_line(self):
        assert extract_data("data:") == ""


class TestSSEFrameBuffer:
    """Test buffering across arbitrary chunk boundaries."""

    def test_complete_frames_in_one_chunk(self):
        buffer = SSEFrameBuffer()
        payloads = buffer.feed(b'data: {"a":1}\n\ndata: {"b":2}\n\n')
        assert payloads == ['{"a":1}', '{"b":2}']
        assert buffer.pending == 0

    def test_partial_frame_waits_for_next_chunk(self):
        buffer = SSEFrameBuffer()
        assert buffer.feed(b'data: {"a"') == []
        assert buffer.pending > 0
        assert buffer.feed(b':1}\n\n') == ['{"a":1}']

    def test_delimiter_split_across_chunks(self):
        buffer = SSEFrameBuffer()
        assert buffer.feed(b'data: {"a":1}\n') == []
        assert buffer.feed(b'\n') == ['{"a":1}']

    def test_byte_at_a_time(self):
        buffer = SSEFrameBuffer()
        stream = b'data: one\n\n: comment\n\ndata: two\n\n'
        payloads = []
        for i in range(len(stream)):
            payloads.extend(buffer.feed(stream[i:i + 1]))
        assert payloads == ["one", "two"]

    def test_multibyte_character_split_across_chunks(self):
        buffer = SSEFrameBuffer()
        encoded = 'data: {"name": "résumé ✓"}\n\n'.encode()
        split = encoded.index("✓".encode()) + 1
        assert buffer.feed(encoded[:split]) == []
        assert buffer.feed(encoded[split:]) == ['{"name": "résumé ✓"}']

    def test_crlf_line_endings(self):
        buffer = SSEFrameBuffer()
        assert buffer.feed(b"data: a\r\ndata: b\r\n\r\n") == ["a\nb"]

    def test_crlf_split_across_chunks(self):
        buffer = SSEFrameBuffer()
        assert buffer.feed(b"data: a\r") == []
        assert buffer.feed(b"\n\r") == ["a"]
        assert buffer.feed(b"\ndata: b\r\n\r\n") == ["b"]

    def test_frames_without_data_are_consumed(self):
        buffer = SSEFrameBuffer()
        assert buffer.feed(b": ping\n\nevent: x\n\n") == []
        assert buffer.pending == 0

    def test_reset_discards_partial_frame(self):
        buffer = SSEFrameBuffer()
        buffer.feed(b'data: {"stale":')
        buffer.reset()
        assert buffer.pending == 0
        assert buffer.feed(b' true}\n\ndata: fresh\n\n') == ["fresh"]

    def test_reset_discards_partial_multibyte_sequence(self):
        buffer = SSEFrameBuffer()
        buffer.feed("data: ✓".encode()[:-1])
        buffer.reset()
        assert buffer.feed(b"data: ok\n\n") == ["ok"]
