"""
Command-line entry point: follow the backend's updates stream and log it.
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import Any

from .config import Configuration
from .events import BackendUpdateEvent
from .logging_utils import ContextualLogger, configure_logging
from .stream_client import StreamClient
from .streaming.models import ConnectionState


class LoggingObserver:
    """Observer that writes every event and state change to the log."""

    def __init__(self) -> None:
        self._logger = ContextualLogger({"component": "observer"})

    def on_event(self, event: Any) -> None:
        if isinstance(event, BackendUpdateEvent):
            self._logger.info(
                "Backend update",
                opcode=event.opcode.value,
                path=event.file_path,
                event_message=event.message,
                error=event.error_message,
            )
        else:
            self._logger.info("Backend update", payload=event)

    def on_state_change(self, state: ConnectionState) -> None:
        self._logger.info("Connection state changed", state=str(state))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Stream real-time updates from the file search backend.",
    )
    parser.add_argument(
        "--base-url",
        help="Backend base URL (defaults to BACKEND_BASE_URL or config.yaml)",
    )
    parser.add_argument(
        "--config",
        help="Path to an alternative config.yaml",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> None:
    """Connect to the updates stream and run until a shutdown signal."""
    args = parse_args(argv)
    config = Configuration(args.config)
    configure_logging(config.get_logging_config()["level"])
    logger = ContextualLogger({"component": "main"})

    shutdown_event = asyncio.Event()

    def signal_handler() -> None:
        """Handle shutdown signals gracefully."""
        logger.info("Received shutdown signal, initiating graceful shutdown")
        shutdown_event.set()

    if sys.platform != "win32":
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, signal_handler)

    async with StreamClient.from_config(config, LoggingObserver()) as client:
        client.connect(args.base_url or config.backend_base_url)
        try:
            await shutdown_event.wait()
        finally:
            logger.info("Updates client shutting down", **client.get_statistics())


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
