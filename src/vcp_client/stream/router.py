"""
Message Router
==============

Parses inbound wire messages and fans each frame out to the processors
registered for its type.

Dispatch modes (``sync_process_mode``):
    - False (immediate): processors run right away, in registration order
    - True (deferred): one callback per processor is queued; the host runs
      them with drain_deferred(), e.g. once per render tick

Failure handling:
    - Malformed text (bad JSON, not an object, no string ``type``) is
      discarded and reported to the error sink as MALFORMED_FRAME
    - Frames of a type nobody registered for are dropped silently
    - Each processor call is isolated: a raising processor is reported as
      PROCESSOR_FAILURE and the remaining processors still run
"""

import logging
from functools import partial
from typing import List, Optional, Union

from pydantic import ValidationError

from vcp_client.dispatch.processor import APIProcessor
from vcp_client.dispatch.queue import DispatchQueue
from vcp_client.dispatch.registry import ProcessorRegistry
from vcp_client.errors import ErrorKind, ErrorSink, default_error_sink
from vcp_client.models.api import ANY_TYPE
from vcp_client.models.frame import RawFrame


logger = logging.getLogger(__name__)


class RouterMetrics:
    """Metrics for MessageRouter observability."""

    __slots__ = (
        "frames_received",
        "processor_calls",
        "parse_errors",
        "unhandled_frames",
        "processor_errors",
        "deferred_enqueued",
    )

    def __init__(self) -> None:
        self.frames_received: int = 0
        self.processor_calls: int = 0
        self.parse_errors: int = 0
        self.unhandled_frames: int = 0
        self.processor_errors: int = 0
        self.deferred_enqueued: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "frames_received": self.frames_received,
            "processor_calls": self.processor_calls,
            "parse_errors": self.parse_errors,
            "unhandled_frames": self.unhandled_frames,
            "processor_errors": self.processor_errors,
            "deferred_enqueued": self.deferred_enqueued,
        }


class MessageRouter:
    """
    Frame parser and dispatcher.

    Attributes:
        registry: Processor lookup by type
        queue: Deferred callbacks (used when sync_process_mode is True)
        sync_process_mode: Queue processing instead of running it on arrival
        debug_mode: Log every raw inbound message
        metrics: Operational metrics

    Example:
        router = MessageRouter()
        router.registry.register(pose_processor)

        router.sync_process_mode = True
        router.on_message('{"type": "headPoseAPI"}')
        router.drain_deferred()   # pose_processor.process(...) runs here
    """

    def __init__(
        self,
        registry: Optional[ProcessorRegistry] = None,
        queue: Optional[DispatchQueue] = None,
        sync_process_mode: bool = False,
        debug_mode: bool = False,
        error_sink: Optional[ErrorSink] = None,
    ) -> None:
        self.registry = registry if registry is not None else ProcessorRegistry()
        self.queue = queue if queue is not None else DispatchQueue()
        self.sync_process_mode = sync_process_mode
        self.debug_mode = debug_mode
        self.error_sink = error_sink or default_error_sink

        self.metrics = RouterMetrics()

    def on_message(self, raw: Union[str, bytes]) -> None:
        """
        Handle one inbound wire message. Never raises for bad input.

        Args:
            raw: Raw JSON text (bytes are decoded as UTF-8)
        """
        self.metrics.frames_received += 1
        if self.debug_mode:
            logger.debug(f"<< {raw!r}")

        text: Optional[str] = None
        try:
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            frame = RawFrame.parse_text(text)
        except (UnicodeDecodeError, ValidationError) as e:
            self.metrics.parse_errors += 1
            self.error_sink(ErrorKind.MALFORMED_FRAME, e, text if text is not None else repr(raw))
            return

        self.dispatch(frame)

    def dispatch(self, frame: RawFrame) -> None:
        """
        Fan a parsed frame out to its processors.

        Processors registered under ANY_TYPE receive every frame, after
        the type-specific ones.
        """
        processors = self.processors_for(frame.type)
        if not processors:
            self.metrics.unhandled_frames += 1
            return

        # Mode is read once so a frame's fan-out is never split across modes
        if self.sync_process_mode:
            for processor in processors:
                self.queue.enqueue(partial(self._invoke, processor, frame))
                self.metrics.deferred_enqueued += 1
        else:
            for processor in processors:
                self._invoke(processor, frame)

    def processors_for(self, api_type: str) -> List[APIProcessor]:
        processors = list(self.registry.lookup(api_type))
        if api_type != ANY_TYPE:
            processors.extend(self.registry.lookup(ANY_TYPE))
        return processors

    def drain_deferred(self) -> int:
        """
        Run every queued callback, including ones queued while draining.

        Safe to call in immediate mode or with an empty queue.

        Returns:
            Number of callbacks run.
        """
        return self.queue.drain_all()

    def _invoke(self, processor: APIProcessor, frame: RawFrame) -> None:
        try:
            processor.process(frame)
        except Exception as e:
            self.metrics.processor_errors += 1
            self.error_sink(ErrorKind.PROCESSOR_FAILURE, e, None)
        else:
            self.metrics.processor_calls += 1
