"""
Dispatch Queue
==============

FIFO of deferred work items for batched dispatch.

The router enqueues one zero-argument callback per (processor, frame)
pair while deferred mode is on; the host drains them all at a point of
its choosing, typically once per render tick.

Design Rules:
    - Strict FIFO
    - drain_all() runs until the queue is empty, including callbacks
      enqueued by callbacks during the same drain
    - The queue does NOT catch exceptions raised by callbacks
"""

import logging
from collections import deque
from typing import Callable, Deque


logger = logging.getLogger(__name__)


Thunk = Callable[[], None]


class DispatchQueue:
    """
    Unbounded FIFO of deferred callbacks.

    Example:
        queue = DispatchQueue()
        queue.enqueue(lambda: print("first"))
        queue.enqueue(lambda: print("second"))
        queue.drain_all()  # prints first, second
    """

    def __init__(self) -> None:
        self._queue: Deque[Thunk] = deque()
        self._total_enqueued: int = 0
        self._total_drained: int = 0

    @property
    def size(self) -> int:
        """Current number of pending callbacks."""
        return len(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def enqueue(self, thunk: Thunk) -> None:
        """Append a callback to the tail."""
        self._queue.append(thunk)
        self._total_enqueued += 1

    def drain_all(self) -> int:
        """
        Invoke pending callbacks in order until the queue is empty.

        Returns:
            Number of callbacks invoked.
        """
        drained = 0
        while self._queue:
            thunk = self._queue.popleft()
            thunk()
            drained += 1
            self._total_drained += 1
        return drained

    def clear(self) -> int:
        """
        Drop all pending callbacks without running them.

        Returns:
            Number of callbacks dropped.
        """
        cleared = len(self._queue)
        self._queue.clear()
        return cleared

    def metrics(self) -> dict:
        """Get queue metrics for observability."""
        return {
            "size": self.size,
            "total_enqueued": self._total_enqueued,
            "total_drained": self._total_drained,
        }
