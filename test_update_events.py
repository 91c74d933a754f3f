#!/usr/bin/env python3
"""
Tests for backend update event decoding.
"""

import pytest

from updates_client.events import (
    BackendUpdateEvent,
    EventOpcode,
    decode_update_event,
)
from updates_client.exceptions import FrameDecodeError


class TestDecodeUpdateEvent:
    """Test decoding of frame payloads."""

    def test_file_event(self):
        event = decode_update_event(
            '{"opcode": "file_failed", "data": '
            '{"path": "/docs/a.pdf", "error": "parse error", "reason": "corrupt"}}'
        )
        assert event.opcode is EventOpcode.FILE_FAILED
        assert event.file_path == "/docs/a.pdf"
        assert event.error_message == "parse error"
        assert event.reason == "corrupt"
        assert event.directory_path is None

    def test_directory_event_exposes_directory_path(self):
        event = decode_update_event(
            '{"opcode": "watch_added", "data": {"path": "/docs"}}'
        )
        assert event.opcode.is_directory_event
        assert not event.opcode.is_file_event
        assert event.directory_path == "/docs"

    def test_move_event_paths(self):
        event = decode_update_event(
            '{"opcode": "file_moved", "data": '
            '{"src_path": "/a/x.txt", "dest_path": "/b/x.txt"}}'
        )
        assert event.src_path == "/a/x.txt"
        assert event.dest_path == "/b/x.txt"

    def test_unknown_opcode_falls_back(self):
        event = decode_update_event(
            '{"opcode": "index_rebuilt", "data": {"message": "done"}}'
        )
        assert event.opcode is EventOpcode.UNKNOWN
        assert event.message == "done"

    def test_extra_fields_are_ignored(self):
        event = decode_update_event(
            '{"opcode": "info", "version": 2, "data": {"message": "hi", "extra": 1}}'
        )
        assert event.opcode is EventOpcode.INFO
        assert event.message == "hi"

    def test_events_are_immutable(self):
        event = decode_update_event('{"opcode": "info", "data": {}}')
        with pytest.raises(ValueError):
            event.opcode = EventOpcode.ERROR

    @pytest.mark.parametrize(
        "payload",
        [
            "{not json",
            '{"data": {}}',
            '{"opcode": "info"}',
            '{"opcode": 7, "data": {}}',
            '["opcode", "info"]',
        ],
    )
    def test_invalid_payloads_raise_frame_decode_error(self, payload):
        with pytest.raises(FrameDecodeError) as exc_info:
            decode_update_event(payload)
        assert exc_info.value.payload == payload


class TestEventOpcode:
    """Test opcode classification."""

    def test_every_known_opcode_has_one_category_at_most(self):
        for opcode in EventOpcode:
            assert not (opcode.is_directory_event and opcode.is_file_event)

    def test_general_events_are_neither(self):
        for opcode in (EventOpcode.STATUS_UPDATE, EventOpcode.SHUTTING_DOWN,
                       EventOpcode.UNKNOWN):
            assert not opcode.is_directory_event
            assert not opcode.is_file_event

    def test_model_roundtrip_keeps_wire_names(self):
        event = BackendUpdateEvent.model_validate(
            {"opcode": "file_complete", "data": {"path": "/x"}}
        )
        assert event.model_dump(mode="json")["opcode"] == "file_complete"
