"""
Test Configuration
==================

Pytest fixtures and test doubles for the VCP sink client.

FakeTransport and FakeScheduler replace the WebSocket and the event loop
timers so connection lifecycle tests run synchronously.
"""

from typing import Callable, List, Optional

import pytest


class FakeTransport:
    """Transport double; events are fired by the test."""

    def __init__(self, url, listener) -> None:
        self.url = url
        self.listener = listener
        self.sent: List[str] = []
        self.closed: bool = False

    def send(self, text: str) -> None:
        self.sent.append(text)

    def close(self) -> None:
        self.closed = True

    # Event helpers
    def ready(self) -> None:
        self.listener.on_open()

    def receive(self, data) -> None:
        self.listener.on_message(data)

    def fail(self, error: Optional[BaseException] = None) -> None:
        self.listener.on_error(error or ConnectionRefusedError("refused"))

    def drop(self) -> None:
        self.listener.on_close()


class FakeTransportFactory:
    """Records every transport it creates."""

    def __init__(self, on_create: Optional[Callable[[FakeTransport], None]] = None) -> None:
        self.created: List[FakeTransport] = []
        self.on_create = on_create

    def __call__(self, url, listener) -> FakeTransport:
        transport = FakeTransport(url, listener)
        self.created.append(transport)
        if self.on_create is not None:
            self.on_create(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """call_later double; timers fire only when the test says so."""

    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def fire_next(self) -> FakeTimer:
        timer = self.pending[0]
        self.timers.remove(timer)
        timer.callback()
        return timer


class RecordingProcessor:
    """Processor that records the frames it receives."""

    def __init__(self, name: str, types, log: Optional[list] = None) -> None:
        self.name = name
        self.types = list(types)
        self.log = log if log is not None else []

    def process(self, frame) -> None:
        self.log.append((self.name, frame))

    def supported_types(self):
        return self.types

    def __repr__(self) -> str:
        return f"RecordingProcessor({self.name})"


class FailingProcessor(RecordingProcessor):
    """Processor that always raises."""

    def process(self, frame) -> None:
        super().process(frame)
        raise RuntimeError(f"{self.name} failed")


@pytest.fixture
def transport_factory():
    return FakeTransportFactory()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def error_log():
    """Error sink that records (kind, error, raw) triples."""
    errors = []

    def sink(kind, error, raw=None):
        errors.append((kind, error, raw))

    sink.errors = errors
    return sink


@pytest.fixture
def make_processor():
    """Factory fixture for RecordingProcessor / FailingProcessor."""
    def _make(name, types, log=None, failing=False):
        cls = FailingProcessor if failing else RecordingProcessor
        return cls(name, types, log)
    return _make


@pytest.fixture
def head_pose_message():
    """Provide a sample headPoseAPI wire message."""
    return (
        '{"type": "headPoseAPI", "sender": "tracker-1", '
        '"rotation": {"pitch": 0.1, "roll": 0.0, "yaw": -0.25}, '
        '"position": {"x": 0.0, "y": 1.6, "z": 0.3}}'
    )


@pytest.fixture
def full_body_message():
    """Provide a sample fullBodyAPI wire message."""
    return (
        '{"type": "fullBodyAPI", '
        '"joints": {"Hips": {"rotation": {"x": 0, "y": 0, "z": 0, "w": 1}, '
        '"position": {"x": 0, "y": 0.9, "z": 0}}, '
        '"Head": {"rotation": {"x": 0.1, "y": 0, "z": 0, "w": 0.99}}}, '
        '"hipPosition": {"x": 0.0, "y": 0.9, "z": 0.0}}'
    )


@pytest.fixture
def failing_transport_factory():
    """Transports that error as soon as they are created."""
    return FakeTransportFactory(on_create=lambda transport: transport.fail())
