#!/usr/bin/env python3
"""
Tests for the command-line entry point.
"""

from updates_client.events import decode_update_event
from updates_client.main import LoggingObserver, parse_args
from updates_client.streaming.models import ConnectionState


def test_parse_args_defaults():
    args = parse_args([])
    assert args.base_url is None
    assert args.config is None


def test_parse_args_overrides():
    args = parse_args(["--base-url", "http://10.0.0.2:8000", "--config", "alt.yaml"])
    assert args.base_url == "http://10.0.0.2:8000"
    assert args.config == "alt.yaml"


def test_logging_observer_accepts_events_and_states():
    observer = LoggingObserver()
    observer.on_event(decode_update_event('{"opcode": "info", "data": {"message": "hi"}}'))
    observer.on_event({"raw": True})
    observer.on_state_change(ConnectionState.failed("HTTP 500"))
    observer.on_state_change(ConnectionState.idle())


def test_connection_state_str():
    assert str(ConnectionState.failed("HTTP 500")) == "failed(HTTP 500)"
    assert str(ConnectionState.connected()) == "connected"
