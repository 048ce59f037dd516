"""
VCP Sink Client
===============

Client-side endpoint for the Virtual Communication Protocol (VCP).

Connects to a VCP server over one WebSocket, declares itself a data sink,
and routes each inbound JSON frame to the processors registered for its
``type``, either on arrival or batched until process_queue().

Components:
    - models: Frame and message schemas
    - dispatch: Processor interface, registry and deferred queue
    - stream: Transport, connection lifecycle and router
    - client: SinkClient facade

Example:
    from vcp_client import SinkClient, APISink, HeadPose

    client = SinkClient("ws://localhost:8080")
    client.add_processor(APISink(HeadPose, handler=print))
    client.start()  # inside a running event loop
"""

__version__ = "0.1.0"

from vcp_client.client import SinkClient
from vcp_client.config import Settings, load_config, setup_logging
from vcp_client.dispatch import APIProcessor, APISink, DispatchQueue, ProcessorRegistry
from vcp_client.errors import ErrorKind, ErrorSink
from vcp_client.models import (
    ANY_TYPE,
    APIType,
    ClientRole,
    FullBody,
    Handshake,
    HeadPose,
    RawFrame,
)
from vcp_client.stream import (
    ConnectionManager,
    ConnectionState,
    MessageRouter,
    RetryPolicy,
)

__all__ = [
    "__version__",
    "SinkClient",
    "Settings",
    "load_config",
    "setup_logging",
    "APIProcessor",
    "APISink",
    "DispatchQueue",
    "ProcessorRegistry",
    "ErrorKind",
    "ErrorSink",
    "ANY_TYPE",
    "APIType",
    "ClientRole",
    "FullBody",
    "Handshake",
    "HeadPose",
    "RawFrame",
    "ConnectionManager",
    "ConnectionState",
    "MessageRouter",
    "RetryPolicy",
]
