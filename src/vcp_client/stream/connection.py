"""
Connection Manager
==================

Lifecycle of the single outbound VCP connection.

State machine:

    CLOSED --open(url)--> CONNECTING --(transport ready)--> OPEN
    CONNECTING|OPEN --(transport error|close)--> CLOSED
    CLOSED --(retry timer)--> retry(url) --> CONNECTING

On the transport's ready event the manager sends one handshake frame
declaring its role (``sink`` by default), then marks itself OPEN.
Error and close are treated the same: a reconnect is scheduled according
to the RetryPolicy.

Design Rules:
    - Exactly one live transport at a time; retry() closes the old one first
    - At most one retry timer is pending; overlapping error+close events
      for the same failure schedule a single retry
    - Inbound payloads are passed through uninterpreted
    - Nothing here blocks; timers go through an injectable call_later
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from vcp_client.errors import (
    ErrorKind,
    ErrorSink,
    NotConnectedError,
    RetryExhaustedError,
    TransportError,
    default_error_sink,
)
from vcp_client.models.api import ClientRole, Handshake
from vcp_client.stream.transport import Transport, TransportFactory, WebSocketTransport


logger = logging.getLogger(__name__)


Scheduler = Callable[[float, Callable[[], None]], Any]


class ConnectionState(str, Enum):
    """Connection lifecycle state."""

    CLOSED = "CLOSED"
    CONNECTING = "CONNECTING"
    OPEN = "OPEN"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Reconnect schedule.

    Attributes:
        delay: Delay before the first retry (seconds)
        backoff: "fixed" or "exponential"
        multiplier: Growth factor for exponential backoff
        max_delay: Cap for exponential backoff (seconds)
        max_attempts: Consecutive retries before giving up (0 = unlimited)
    """

    delay: float = 5.0
    backoff: str = "fixed"
    multiplier: float = 2.0
    max_delay: float = 60.0
    max_attempts: int = 0

    def __post_init__(self) -> None:
        if self.delay < 0:
            raise ValueError("delay must be >= 0")
        if self.backoff not in ("fixed", "exponential"):
            raise ValueError(f"Unknown backoff: {self.backoff}")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")

    def next_delay(self, attempt: int) -> Optional[float]:
        """
        Delay before retry number ``attempt`` (1-based).

        Returns:
            Seconds to wait, or None if attempts are exhausted.
        """
        if self.max_attempts and attempt > self.max_attempts:
            return None
        if self.backoff == "exponential":
            return min(self.delay * self.multiplier ** (attempt - 1), self.max_delay)
        return self.delay


class ConnectionMetrics:
    """Metrics for ConnectionManager observability."""

    __slots__ = (
        "open_attempts",
        "connects",
        "reconnect_count",
        "transport_errors",
    )

    def __init__(self) -> None:
        self.open_attempts: int = 0
        self.connects: int = 0
        self.reconnect_count: int = 0
        self.transport_errors: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "open_attempts": self.open_attempts,
            "connects": self.connects,
            "reconnect_count": self.reconnect_count,
            "transport_errors": self.transport_errors,
        }


class _Listener:
    """Routes events of one transport generation back to the manager."""

    __slots__ = ("_manager",)

    def __init__(self, manager: "ConnectionManager") -> None:
        self._manager = manager

    @property
    def current(self) -> bool:
        # Events from a transport that was already replaced are ignored
        return self._manager._listener is self

    def on_open(self) -> None:
        if self.current:
            self._manager._handle_open()

    def on_message(self, data: Union[str, bytes]) -> None:
        if self.current:
            self._manager._handle_message(data)

    def on_error(self, error: BaseException) -> None:
        if self.current:
            self._manager._handle_error(error)

    def on_close(self) -> None:
        if self.current:
            self._manager._handle_close()


class ConnectionManager:
    """
    Owner of the one outbound connection.

    Attributes:
        on_frame: Callback receiving each raw inbound message
        role: Role declared in the handshake
        retry_policy: Reconnect schedule
        state: Current ConnectionState
        metrics: Operational metrics

    Example:
        manager = ConnectionManager(on_frame=router.on_message)
        manager.open("ws://localhost:8080")   # returns immediately
        ...
        manager.close()
    """

    def __init__(
        self,
        on_frame: Callable[[Union[str, bytes]], None],
        role: ClientRole = ClientRole.SINK,
        retry_policy: Optional[RetryPolicy] = None,
        transport_factory: Optional[TransportFactory] = None,
        call_later: Optional[Scheduler] = None,
        error_sink: Optional[ErrorSink] = None,
    ) -> None:
        """
        Initialize connection manager.

        Args:
            on_frame: Receives every inbound wire message, uninterpreted
            role: Handshake role (default: sink)
            retry_policy: Reconnect schedule (default: fixed 5 s, unlimited)
            transport_factory: ``factory(url, listener)``; defaults to
                WebSocketTransport
            call_later: ``call_later(delay, callback) -> handle`` with a
                ``cancel()`` method; defaults to the running event loop's
            error_sink: Receives transport failures
        """
        self.on_frame = on_frame
        self.role = role
        self.retry_policy = retry_policy or RetryPolicy()
        self._transport_factory = transport_factory or WebSocketTransport
        self._call_later = call_later
        self._error_sink = error_sink or default_error_sink

        self._url: Optional[str] = None
        self._state = ConnectionState.CLOSED
        self._transport: Optional[Transport] = None
        self._listener: Optional[_Listener] = None
        self._retry_handle: Optional[Any] = None
        self._retry_attempts: int = 0
        self._closing: bool = False

        self.metrics = ConnectionMetrics()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def opened(self) -> bool:
        """Whether the handshake was sent and the connection is open."""
        return self._state is ConnectionState.OPEN

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def retry_pending(self) -> bool:
        return self._retry_handle is not None

    def open(self, url: str) -> None:
        """
        Start connecting to ``url``. Returns immediately.

        Starts a new session: the retry budget is restored.

        Args:
            url: Server URL
        """
        self._retry_attempts = 0
        self._open(url)

    def _open(self, url: str) -> None:
        self._cancel_retry()
        self._close_transport()

        self._url = url
        self._closing = False
        self._state = ConnectionState.CONNECTING
        self.metrics.open_attempts += 1

        listener = _Listener(self)
        self._listener = listener
        logger.info(f"Connecting to {url}")
        self._transport = self._transport_factory(url, listener)

    def retry(self, url: Optional[str] = None) -> None:
        """
        Reconnect now.

        Cancels any pending retry timer, closes the current transport,
        resets to CLOSED and opens a fresh connection.

        Args:
            url: Server URL (default: the last URL opened)
        """
        url = url or self._url
        if url is None:
            raise ValueError("No URL to reconnect to")

        self._cancel_retry()
        self._state = ConnectionState.CLOSED
        self._close_transport()
        self.metrics.reconnect_count += 1
        self._open(url)

    def send(self, text: str) -> None:
        """
        Send a text message on the open connection.

        Raises:
            NotConnectedError: Connection is not open
        """
        if self._state is not ConnectionState.OPEN or self._transport is None:
            raise NotConnectedError(f"Connection is {self._state.value}")
        self._transport.send(text)

    def close(self) -> None:
        """Close the connection for good. No reconnect is scheduled."""
        self._closing = True
        self._cancel_retry()
        self._close_transport()
        self._state = ConnectionState.CLOSED
        logger.info(f"Connection to {self._url} closed")

    # -------------------------------------------------------------------------
    # Transport events
    # -------------------------------------------------------------------------

    def _handle_open(self) -> None:
        handshake = Handshake(role=self.role)
        try:
            self._transport.send(handshake.to_wire())
        except Exception as e:
            self._handle_error(e)
            return

        self._state = ConnectionState.OPEN
        self._retry_attempts = 0
        self.metrics.connects += 1
        logger.info(f"Connected to {self._url} as {self.role.value}")

    def _handle_message(self, data: Union[str, bytes]) -> None:
        self.on_frame(data)

    def _handle_error(self, error: BaseException) -> None:
        self.metrics.transport_errors += 1
        self._state = ConnectionState.CLOSED
        if not isinstance(error, TransportError):
            wrapped = TransportError(f"{type(error).__name__}: {error}")
            wrapped.__cause__ = error
            error = wrapped
        self._error_sink(ErrorKind.TRANSPORT_FAILURE, error, None)
        self._schedule_retry()

    def _handle_close(self) -> None:
        if self._state is not ConnectionState.CLOSED:
            logger.info(f"Connection to {self._url} lost")
        self._state = ConnectionState.CLOSED
        self._schedule_retry()

    # -------------------------------------------------------------------------
    # Retry
    # -------------------------------------------------------------------------

    def _schedule_retry(self) -> None:
        if self._closing or self._retry_handle is not None:
            return

        attempt = self._retry_attempts + 1
        delay = self.retry_policy.next_delay(attempt)
        if delay is None:
            logger.error(
                f"Max retry attempts ({self.retry_policy.max_attempts}) exceeded"
            )
            self._close_transport()
            self._error_sink(
                ErrorKind.RETRY_EXHAUSTED,
                RetryExhaustedError(self._url, self._retry_attempts),
                None,
            )
            return

        self._retry_attempts = attempt
        logger.info(f"Reconnecting in {delay:.1f}s (attempt {attempt})")
        call_later = self._call_later or asyncio.get_running_loop().call_later
        self._retry_handle = call_later(delay, self._on_retry_timer)

    def _on_retry_timer(self) -> None:
        self._retry_handle = None
        if self._closing:
            return
        self.retry(self._url)

    def _cancel_retry(self) -> None:
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None

    def _close_transport(self) -> None:
        transport = self._transport
        self._transport = None
        self._listener = None
        if transport is None:
            return
        try:
            transport.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing transport: {e}")
