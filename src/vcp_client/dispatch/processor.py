"""
Processor Interface
===================

Contract between the router and the consumers of routed frames.

A processor is anything with:
    - process(frame): handle one RawFrame (may raise)
    - supported_types(): the message types it wants

It is a structural Protocol, so plain classes qualify without inheriting
from anything here. APISink is an optional typed base on top of it.
"""

import logging
from typing import Callable, Generic, Iterable, Optional, Protocol, Type, TypeVar, runtime_checkable

from vcp_client.models.api import APIBase
from vcp_client.models.frame import RawFrame


logger = logging.getLogger(__name__)


@runtime_checkable
class APIProcessor(Protocol):
    """Consumer registered against one or more message types."""

    def process(self, frame: RawFrame) -> None:
        ...

    def supported_types(self) -> Iterable[str]:
        ...


T = TypeVar("T", bound=APIBase)


class APISink(Generic[T]):
    """
    Typed processor for a single message model.

    Validates each frame into ``model`` and hands the result to
    ``on_message``. Override ``on_message`` or pass a ``handler``.

    Example:
        class PoseLogger(APISink[HeadPose]):
            def on_message(self, message: HeadPose) -> None:
                print(message.rotation.yaw)

        client.add_processor(PoseLogger(HeadPose))

        # or without subclassing
        client.add_processor(APISink(HeadPose, handler=poses.append))
    """

    def __init__(
        self,
        model: Type[T],
        handler: Optional[Callable[[T], None]] = None,
    ) -> None:
        self.model = model
        self.handler = handler
        self.supported_api = model.get_api_type().value

    def on_message(self, message: T) -> None:
        """Handle a validated message. Default forwards to ``handler``."""
        if self.handler is not None:
            self.handler(message)

    def process(self, frame: RawFrame) -> None:
        """
        Convert the raw frame into ``model`` and handle it.

        Fields missing from the frame take the model defaults.

        Raises:
            pydantic.ValidationError: Frame fields don't fit the model
        """
        message = self.model.model_validate(frame.model_dump())
        self.on_message(message)

    def supported_types(self) -> Iterable[str]:
        return [self.supported_api]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.model.__name__})"
