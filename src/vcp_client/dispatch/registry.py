"""
Processor Registry
==================

Maps a message type to the ordered processors interested in it.

Design Rules:
    - Processors fire in registration order, per type
    - One processor may be registered under several types
    - Append-only: there is no removal
    - Registering the same processor twice for a type invokes it twice,
      unless the registry was built with allow_duplicates=False
"""

import logging
from typing import Dict, List, Sequence

from vcp_client.dispatch.processor import APIProcessor


logger = logging.getLogger(__name__)


class ProcessorRegistry:
    """
    Flat ``type -> [processor, ...]`` mapping.

    Attributes:
        allow_duplicates: Whether a processor already registered for a
            type is appended again on repeated registration

    Example:
        registry = ProcessorRegistry()
        registry.register(pose_processor)
        for p in registry.lookup("headPoseAPI"):
            p.process(frame)
    """

    def __init__(self, allow_duplicates: bool = True) -> None:
        self.allow_duplicates = allow_duplicates
        self._processors: Dict[str, List[APIProcessor]] = {}

    def register(self, processor: APIProcessor) -> None:
        """
        Register a processor for every type it supports.

        Args:
            processor: Processor to append to each supported type's list
        """
        for api_type in processor.supported_types():
            key = str(getattr(api_type, "value", api_type))
            processors = self._processors.setdefault(key, [])
            if not self.allow_duplicates and any(p is processor for p in processors):
                logger.debug(f"Skipping duplicate registration of {processor!r} for {key}")
                continue
            processors.append(processor)
            logger.debug(f"Registered {processor!r} for {key}")

    def lookup(self, api_type: str) -> Sequence[APIProcessor]:
        """Processors registered for ``api_type``, in order (empty if none)."""
        return tuple(self._processors.get(api_type, ()))

    def types(self) -> List[str]:
        """Types with at least one registered processor."""
        return list(self._processors)

    def __contains__(self, api_type: str) -> bool:
        return api_type in self._processors

    def __len__(self) -> int:
        return sum(len(ps) for ps in self._processors.values())
