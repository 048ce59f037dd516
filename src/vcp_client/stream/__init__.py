"""
Stream Module
=============

Connection lifecycle and frame routing.

    - Transport / WebSocketTransport: The duplex connection
    - ConnectionManager: Connect, handshake, detect failure, reconnect
    - RetryPolicy: Fixed or exponential reconnect schedule
    - MessageRouter: Parse frames and dispatch them (immediate or deferred)

Example:
    router = MessageRouter()
    manager = ConnectionManager(on_frame=router.on_message)
    manager.open("ws://localhost:8080")
"""

from vcp_client.stream.transport import (
    Transport,
    TransportFactory,
    TransportListener,
    WebSocketTransport,
)
from vcp_client.stream.connection import (
    ConnectionManager,
    ConnectionMetrics,
    ConnectionState,
    RetryPolicy,
)
from vcp_client.stream.router import MessageRouter, RouterMetrics


__all__ = [
    "Transport",
    "TransportFactory",
    "TransportListener",
    "WebSocketTransport",
    "ConnectionManager",
    "ConnectionMetrics",
    "ConnectionState",
    "RetryPolicy",
    "MessageRouter",
    "RouterMetrics",
]
