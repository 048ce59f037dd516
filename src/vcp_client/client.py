"""
Sink Client
===========

One-object facade over the connection and dispatch engine.

Wires a ProcessorRegistry, DispatchQueue, MessageRouter and
ConnectionManager together and declares itself as a ``sink`` in the
handshake.

Example:
    from vcp_client import SinkClient, APISink, HeadPose

    async def main():
        client = SinkClient("ws://localhost:8080")
        client.add_processor(APISink(HeadPose, handler=print))

        async with client:
            # render loop
            while True:
                client.process_queue()
                await asyncio.sleep(1 / 60)
"""

import logging
import warnings
from typing import Optional

from vcp_client.config import Settings
from vcp_client.dispatch.processor import APIProcessor
from vcp_client.dispatch.queue import DispatchQueue
from vcp_client.dispatch.registry import ProcessorRegistry
from vcp_client.errors import ErrorSink, default_error_sink
from vcp_client.models.api import ClientRole
from vcp_client.stream.connection import (
    ConnectionManager,
    ConnectionState,
    RetryPolicy,
    Scheduler,
)
from vcp_client.stream.router import MessageRouter
from vcp_client.stream.transport import TransportFactory


logger = logging.getLogger(__name__)


class SinkClient:
    """
    Data sink client.

    Attach processors with add_processor() to handle arriving messages.

    Attributes:
        url: Server URL
        registry: Registered processors by type
        router: Frame parser and dispatcher
        connection: Connection lifecycle owner
    """

    def __init__(
        self,
        url: Optional[str] = None,
        settings: Optional[Settings] = None,
        retry_policy: Optional[RetryPolicy] = None,
        transport_factory: Optional[TransportFactory] = None,
        call_later: Optional[Scheduler] = None,
        error_sink: Optional[ErrorSink] = None,
    ) -> None:
        """
        Initialize sink client. Does not connect; call start().

        Args:
            url: Server URL (default: settings.connection.url)
            settings: Loaded configuration (default: built-in defaults)
            retry_policy: Overrides the policy derived from settings
            transport_factory: Transport constructor (default: WebSocket)
            call_later: Timer scheduler (default: running event loop)
            error_sink: Receives swallowed failures (default: logging)
        """
        settings = settings or Settings()
        self.url = url or settings.connection.url
        error_sink = error_sink or default_error_sink

        self.registry = ProcessorRegistry(
            allow_duplicates=settings.dispatch.allow_duplicate_registration,
        )
        self.queue = DispatchQueue()
        self.router = MessageRouter(
            registry=self.registry,
            queue=self.queue,
            sync_process_mode=settings.dispatch.sync_process_mode,
            debug_mode=settings.logging.debug_frames,
            error_sink=error_sink,
        )
        self.connection = ConnectionManager(
            on_frame=self.router.on_message,
            role=ClientRole.SINK,
            retry_policy=retry_policy or settings.connection.retry_policy(),
            transport_factory=transport_factory,
            call_later=call_later,
            error_sink=error_sink,
        )

    @property
    def sync_process_mode(self) -> bool:
        """
        Queue processing and run it at once with process_queue().
        Otherwise processors are called on message arrival.
        """
        return self.router.sync_process_mode

    @sync_process_mode.setter
    def sync_process_mode(self, value: bool) -> None:
        self.router.sync_process_mode = value

    @property
    def debug_mode(self) -> bool:
        return self.router.debug_mode

    @debug_mode.setter
    def debug_mode(self, value: bool) -> None:
        self.router.debug_mode = value

    @property
    def state(self) -> ConnectionState:
        return self.connection.state

    @property
    def opened(self) -> bool:
        return self.connection.opened

    def start(self) -> None:
        """Connect to the server. Requires a running event loop."""
        self.connection.open(self.url)

    def close(self) -> None:
        """Disconnect and stop reconnecting."""
        self.connection.close()

    def add_processor(self, processor: APIProcessor) -> None:
        """Attach a processor for every type it supports."""
        self.registry.register(processor)

    def process_queue(self) -> int:
        """
        Run queued processing. Has effect only when sync_process_mode is on.

        Returns:
            Number of processor calls made.
        """
        return self.router.drain_deferred()

    def manual_request(self) -> None:
        """
        Ask the server to send data.

        Deprecated: current servers push data without being asked.
        """
        warnings.warn(
            "manual_request() is deprecated; VCP servers push data unprompted",
            DeprecationWarning,
            stacklevel=2,
        )
        if self.connection.opened:
            self.connection.send("request")

    def metrics(self) -> dict:
        """Combined connection, router and queue metrics."""
        return {
            "state": self.state.value,
            "connection": self.connection.metrics.to_dict(),
            "router": self.router.metrics.to_dict(),
            "queue": self.queue.metrics(),
        }

    async def __aenter__(self) -> "SinkClient":
        """Async context manager entry."""
        self.start()
        return self

    async def __aexit__(self, *args) -> None:
        """Async context manager exit."""
        self.close()
