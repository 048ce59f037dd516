"""
Dispatch Module
===============

Type-based fan-out of frames to processors.

    - APIProcessor: Structural interface for frame consumers
    - APISink: Typed processor base for one message model
    - ProcessorRegistry: type -> ordered processors
    - DispatchQueue: FIFO of deferred invocations
"""

from vcp_client.dispatch.processor import APIProcessor, APISink
from vcp_client.dispatch.registry import ProcessorRegistry
from vcp_client.dispatch.queue import DispatchQueue, Thunk


__all__ = [
    "APIProcessor",
    "APISink",
    "ProcessorRegistry",
    "DispatchQueue",
    "Thunk",
]
