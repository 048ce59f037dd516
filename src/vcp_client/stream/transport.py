"""
Transport Layer
===============

The duplex connection underneath the ConnectionManager.

A transport is created by a factory ``factory(url, listener)`` that returns
immediately; connection progress is reported later through the listener
callbacks, always on the event loop thread:

    on_open()          transport is ready for sending
    on_message(data)   one inbound wire message (str or bytes)
    on_error(exc)      connect failure or abnormal close
    on_close()         the connection is gone

WebSocketTransport is the production implementation, built on the
``websockets`` asyncio client.

Design Rules:
    - Construction never blocks
    - send() is fire-and-forget
    - A transport closed locally reports nothing further
"""

import asyncio
import logging
from typing import Callable, Optional, Protocol, Set, Union

import websockets
from websockets.exceptions import ConnectionClosedError

from vcp_client.errors import NotConnectedError


logger = logging.getLogger(__name__)


class TransportListener(Protocol):
    """Receiver of transport events."""

    def on_open(self) -> None:
        ...

    def on_message(self, data: Union[str, bytes]) -> None:
        ...

    def on_error(self, error: BaseException) -> None:
        ...

    def on_close(self) -> None:
        ...


class Transport(Protocol):
    """One live duplex connection."""

    def send(self, text: str) -> None:
        ...

    def close(self) -> None:
        ...


TransportFactory = Callable[[str, TransportListener], Transport]


class WebSocketTransport:
    """
    WebSocket transport driven by a background asyncio task.

    Must be created while an event loop is running.

    Attributes:
        url: WebSocket URL
        connected: Whether the socket is currently open

    Example:
        transport = WebSocketTransport("ws://localhost:8080", listener)
        # listener.on_open() fires once connected
        transport.send('{"type": "handshake", "role": "sink"}')
        transport.close()
    """

    def __init__(
        self,
        url: str,
        listener: TransportListener,
        ping_interval: Optional[float] = 20,
        ping_timeout: Optional[float] = 10,
        close_timeout: Optional[float] = 5,
    ) -> None:
        self.url = url
        self._listener = listener
        self._connect_kwargs = {
            "ping_interval": ping_interval,
            "ping_timeout": ping_timeout,
            "close_timeout": close_timeout,
        }

        self._websocket = None
        self._closed: bool = False
        self._pending_sends: Set[asyncio.Task] = set()
        self._task: asyncio.Task = asyncio.get_running_loop().create_task(
            self._run(),
            name=f"vcp_transport[{url}]",
        )

    @property
    def connected(self) -> bool:
        return self._websocket is not None

    async def _run(self) -> None:
        """Connect and pump messages until the socket goes away."""
        try:
            async with websockets.connect(self.url, **self._connect_kwargs) as ws:
                self._websocket = ws
                if self._closed:
                    return
                self._listener.on_open()

                async for message in ws:
                    if self._closed:
                        break
                    self._listener.on_message(message)

        except asyncio.CancelledError:
            raise
        except ConnectionClosedError as e:
            logger.warning(f"Connection closed with error: {e}")
            if not self._closed:
                self._listener.on_error(e)
        except Exception as e:
            # Covers refused connections, DNS errors and handshake rejections
            logger.warning(f"Transport error ({self.url}): {e}")
            if not self._closed:
                self._listener.on_error(e)
        finally:
            self._websocket = None
            if not self._closed:
                self._listener.on_close()

    def send(self, text: str) -> None:
        """
        Queue a text message for sending.

        Raises:
            NotConnectedError: The socket is not open
        """
        ws = self._websocket
        if ws is None or self._closed:
            raise NotConnectedError(f"Transport to {self.url} is not open")

        task = asyncio.get_running_loop().create_task(ws.send(text))
        self._pending_sends.add(task)
        task.add_done_callback(self._on_send_done)

    def _on_send_done(self, task: asyncio.Task) -> None:
        self._pending_sends.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Send failed ({self.url}): {error}")

    def close(self) -> None:
        """Close the socket. No further events are reported."""
        if self._closed:
            return
        self._closed = True
        if not self._task.done():
            self._task.cancel()
        logger.debug(f"Transport closed: {self.url}")
