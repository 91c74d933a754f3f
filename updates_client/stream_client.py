"""
Real-time updates stream client.

Opens a long-lived ``text/event-stream`` request to the backend, frames the
byte stream into events, and reconnects with capped exponential backoff.

All state lives on one asyncio event loop. ``connect`` and ``disconnect``
may be called from any thread; calls from outside the owning loop are
marshalled onto it in order. Every connect bumps a generation number and
anything produced by an older generation is dropped, so observers never
see events or failures from a connection that was torn down on purpose.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import httpx

from .config import DEFAULT_UPDATES_PATH, Configuration
from .events import decode_update_event
from .exceptions import (
    InvalidTargetError,
    NonSuccessResponseError,
    RequestOpenError,
    StreamInterruptedError,
    UpdatesStreamError,
)
from .logging_utils import ContextualLogger, StreamErrorHandler, preview
from .streaming.backoff import ReconnectPolicy, RetryState
from .streaming.models import ConnectionState
from .streaming.parser import SSEFrameBuffer

STREAM_HEADERS = {
    "Accept": "text/event-stream",
    "Cache-Control": "no-cache",
}

DEFAULT_TIMEOUT = httpx.Timeout(10.0, read=None)


class UpdatesObserver(Protocol):
    """Receives decoded events and connection state transitions."""

    def on_event(self, event: Any) -> None: ...

    def on_state_change(self, state: ConnectionState) -> None: ...


class CallbackObserver:
    """Adapts a pair of plain callables to :class:`UpdatesObserver`."""

    def __init__(
        self,
        on_event: Callable[[Any], None] | None = None,
        on_state_change: Callable[[ConnectionState], None] | None = None,
    ):
        self._on_event = on_event
        self._on_state_change = on_state_change

    def on_event(self, event: Any) -> None:
        if self._on_event is not None:
            self._on_event(event)

    def on_state_change(self, state: ConnectionState) -> None:
        if self._on_state_change is not None:
            self._on_state_change(state)


def build_updates_url(
    base_url: str | httpx.URL, path: str = DEFAULT_UPDATES_PATH
) -> httpx.URL:
    """
    Resolve a backend base URL to the updates stream endpoint.

    Raises:
        InvalidTargetError: If the URL is not absolute http(s) with a host.
    """
    try:
        url = httpx.URL(str(base_url))
    except httpx.InvalidURL as e:
        raise InvalidTargetError(
            f"Invalid updates URL: {base_url}", url=str(base_url)
        ) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidTargetError(
            f"Invalid updates URL: {base_url}", url=str(base_url)
        )

    if not path.startswith("/"):
        path = "/" + path
    return url.copy_with(path=path)


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__


class StreamClient:
    """
    Server-sent updates client with automatic reconnection.

    Connection lifecycle:
    - idle -> connecting on connect()
    - connecting -> connected on a 2xx response (retry counter resets)
    - connecting/connected -> failed on transport errors, non-2xx
      responses, or the server closing the stream
    - failed -> connecting after the backoff delay while retries remain
    - failed -> idle once retries are exhausted
    - any -> idle on disconnect()
    """

    def __init__(
        self,
        observer: UpdatesObserver,
        *,
        decoder: Callable[[str], Any] = decode_update_event,
        policy: ReconnectPolicy | None = None,
        updates_path: str = DEFAULT_UPDATES_PATH,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        name: str = "updates",
    ):
        self._observer = observer
        self._decoder = decoder
        self._policy = policy or ReconnectPolicy()
        self._updates_path = updates_path
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._timeout = timeout or DEFAULT_TIMEOUT
        self._loop = loop
        self._sleep = sleep or asyncio.sleep

        self._state = ConnectionState.idle()
        self._retry = RetryState()
        self._buffer = SSEFrameBuffer()
        self._generation = 0
        self._current_url: httpx.URL | None = None
        self._worker: asyncio.Task | None = None
        self._workers: set[asyncio.Task] = set()
        self._logger = ContextualLogger({"client": name})

        self.stats = {
            'connection_attempts': 0,
            'events_delivered': 0,
            'frames_dropped': 0,
            'reconnects_scheduled': 0,
        }

    @classmethod
    def from_config(
        cls,
        config: Configuration,
        observer: UpdatesObserver,
        **kwargs: Any,
    ) -> StreamClient:
        """Build a client from the ``updates`` section of the configuration."""
        http_config = config.get_http_client_config()
        timeout = httpx.Timeout(
            connect=http_config["connect_timeout"],
            read=None,
            write=http_config["write_timeout"],
            pool=http_config["pool_timeout"],
        )
        return cls(
            observer,
            policy=ReconnectPolicy.from_config(config.get_reconnect_config()),
            updates_path=config.get_updates_path(),
            timeout=timeout,
            **kwargs,
        )

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def current_url(self) -> str | None:
        return str(self._current_url) if self._current_url is not None else None

    @property
    def retry_attempts(self) -> int:
        return self._retry.attempts

    # Public lifecycle

    def connect(self, base_url: str | httpx.URL) -> None:
        """
        Start streaming updates from ``base_url``, superseding any prior target.

        Returns immediately. Progress is reported through the observer.
        """
        loop = self._resolve_loop()
        self._call_on_owner(loop, self._start, base_url)

    def disconnect(self) -> None:
        """Tear down the stream and any pending retry, then report idle."""
        if self._loop is None:
            # Never connected, nothing to cancel
            self._stop()
            return
        self._call_on_owner(self._loop, self._stop)

    async def aclose(self) -> None:
        """Disconnect, wait for the worker to unwind, and close owned resources."""
        self.disconnect()
        if self._workers:
            await asyncio.wait(list(self._workers))
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> StreamClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def get_statistics(self) -> dict[str, Any]:
        """Get connection and delivery statistics for monitoring."""
        return {
            **self.stats,
            'state': self._state.status.value,
            'retry_attempts': self._retry.attempts,
            'buffered_chars': self._buffer.pending,
            'url': self.current_url,
        }

    # Owner-loop plumbing

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise RuntimeError(
                    "StreamClient.connect() needs an event loop: call it from "
                    "a running loop or pass loop= to the constructor"
                ) from e
        return self._loop

    @staticmethod
    def _call_on_owner(
        loop: asyncio.AbstractEventLoop, func: Callable[..., None], *args: Any
    ) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            func(*args)
        else:
            loop.call_soon_threadsafe(func, *args)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _teardown(self) -> asyncio.Task | None:
        """Invalidate the active generation and cancel its worker."""
        self._generation += 1
        previous = self._worker
        self._worker = None
        if previous is not None and not previous.done():
            previous.cancel()
        self._buffer.reset()
        self._retry.reset()
        self._current_url = None
        return previous

    def _start(self, base_url: str | httpx.URL) -> None:
        previous = self._teardown()

        try:
            url = build_updates_url(base_url, self._updates_path)
        except InvalidTargetError as e:
            self._logger.warning(
                "Rejected updates target",
                url=str(base_url),
                error_category=StreamErrorHandler.classify_error(e),
            )
            self._set_state(ConnectionState.failed(str(e)))
            return

        self._current_url = url
        worker = self._resolve_loop().create_task(
            self._run(url, self._generation, previous)
        )
        self._worker = worker
        self._workers.add(worker)
        worker.add_done_callback(self._workers.discard)

    def _stop(self) -> None:
        self._teardown()
        self._set_state(ConnectionState.idle())

    # Observer delivery

    def _set_state(self, state: ConnectionState) -> None:
        self._state = state
        try:
            self._observer.on_state_change(state)
        except Exception:
            self._logger.exception(
                "Observer raised while handling state change", state=str(state)
            )

    def _deliver(self, event: Any, log: ContextualLogger) -> None:
        try:
            self._observer.on_event(event)
        except Exception:
            log.exception("Observer raised while handling an event")
            return
        self.stats['events_delivered'] += 1

    # Worker

    async def _run(
        self,
        url: httpx.URL,
        generation: int,
        previous: asyncio.Task | None,
    ) -> None:
        """Attempt/retry loop for one target URL."""
        if previous is not None:
            # The superseded request must be closed before a new one opens
            await asyncio.wait([previous])

        log = self._logger.bind(url=str(url), generation=generation)

        while self._is_current(generation):
            self._buffer.reset()
            self.stats['connection_attempts'] += 1
            self._set_state(ConnectionState.connecting())
            if not self._is_current(generation):
                return

            try:
                await self._stream_once(url, generation, log)
                return
            except UpdatesStreamError as e:
                failure = e

            if not self._is_current(generation):
                return

            # Partial frames from a failed attempt are never reused
            self._buffer.reset()
            log.warning(
                "Updates stream failed",
                error_category=StreamErrorHandler.classify_error(failure),
                error_message=str(failure),
                retry_attempts=self._retry.attempts,
            )
            self._set_state(ConnectionState.failed(str(failure)))
            if not self._is_current(generation):
                return

            if not self._policy.should_retry(self._retry.attempts):
                log.error(
                    "Giving up on updates stream",
                    max_attempts=self._policy.max_attempts,
                )
                self._retry.reset()
                self._current_url = None
                self._set_state(ConnectionState.idle())
                return

            attempt = self._retry.record_failure()
            delay = self._policy.delay(attempt)
            self.stats['reconnects_scheduled'] += 1
            log.info("Reconnect scheduled", attempt=attempt, delay_s=delay)
            await self._sleep(delay)

    async def _stream_once(
        self, url: httpx.URL, generation: int, log: ContextualLogger
    ) -> None:
        """
        Run one connection attempt until it fails.

        Returns normally only when the attempt was superseded; every other
        exit raises an UpdatesStreamError subclass.
        """
        client = self._get_http_client()
        try:
            async with client.stream(
                "GET", url, headers=STREAM_HEADERS, timeout=self._timeout
            ) as response:
                if not response.is_success:
                    raise NonSuccessResponseError(
                        f"Updates stream returned HTTP {response.status_code}",
                        status_code=response.status_code,
                        url=str(url),
                    )

                self._retry.reset()
                log.info("Updates stream connected", status=response.status_code)
                self._set_state(ConnectionState.connected())
                if not self._is_current(generation):
                    return

                try:
                    async for chunk in response.aiter_bytes():
                        self._handle_chunk(chunk, generation, log)
                        if not self._is_current(generation):
                            return
                except httpx.HTTPError as e:
                    raise StreamInterruptedError(
                        f"Updates stream interrupted: {_describe(e)}", url=str(url)
                    ) from e

                raise StreamInterruptedError(
                    "Updates stream closed by server", url=str(url)
                )
        except httpx.HTTPError as e:
            raise RequestOpenError(
                f"Could not open updates stream: {_describe(e)}", url=str(url)
            ) from e

    def _handle_chunk(
        self, chunk: bytes, generation: int, log: ContextualLogger
    ) -> None:
        for payload in self._buffer.feed(chunk):
            # An observer may have disconnected or redirected us mid-chunk
            if not self._is_current(generation):
                return
            # Any decoder failure is local to its frame
            try:
                event = self._decoder(payload)
            except Exception as e:
                self.stats['frames_dropped'] += 1
                log.warning(
                    "Dropped undecodable update frame",
                    error_category=StreamErrorHandler.classify_error(e),
                    error_message=str(e),
                    payload=preview(payload),
                )
                continue
            self._deliver(event, log)

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client
