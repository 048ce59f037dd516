"""
Error Taxonomy
==============

Exceptions and the error-reporting policy for the sink client.

None of the failures handled by the dispatch engine are raised to the caller.
Instead they are reported to an ErrorSink, a plain callable that receives the
kind of failure, the exception and (when available) the raw frame text.

Kinds:
    - MALFORMED_FRAME: inbound text that is not a JSON object with a type tag
    - PROCESSOR_FAILURE: a processor raised while handling a frame
    - TRANSPORT_FAILURE: connect error or unexpected close
    - RETRY_EXHAUSTED: the retry policy gave up reconnecting
"""

import logging
from enum import Enum
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class VCPError(Exception):
    """Base class for sink client errors."""
    pass


class TransportError(VCPError):
    """
    A transport failure as reported to the error sink.

    The underlying exception (OSError, ConnectionClosedError, ...) is
    kept as ``__cause__``.
    """
    pass


class NotConnectedError(VCPError):
    """Raised when sending on a connection that is not open."""
    pass


class RetryExhaustedError(VCPError):
    """Reported when the retry policy runs out of attempts."""

    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(f"Gave up connecting to {url} after {attempts} attempts")
        self.url = url
        self.attempts = attempts


class ErrorKind(str, Enum):
    """Category of a reported failure."""

    MALFORMED_FRAME = "MALFORMED_FRAME"
    PROCESSOR_FAILURE = "PROCESSOR_FAILURE"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"


ErrorSink = Callable[[ErrorKind, BaseException, Optional[str]], None]


def default_error_sink(
    kind: ErrorKind,
    error: BaseException,
    raw: Optional[str] = None,
) -> None:
    """
    Log a failure without interrupting the stream.

    Malformed frames are logged at DEBUG so they stay invisible at the
    default log level. Everything else is a WARNING.

    Args:
        kind: Failure category
        error: The exception that was caught
        raw: Raw frame text, if the failure is tied to a frame
    """
    if kind is ErrorKind.MALFORMED_FRAME:
        logger.debug(f"Discarded malformed frame: {error} (raw={raw!r})")
    elif kind is ErrorKind.PROCESSOR_FAILURE:
        logger.warning(f"Processor failed: {error!r}", exc_info=error)
    else:
        logger.warning(f"{kind.value}: {error}")
