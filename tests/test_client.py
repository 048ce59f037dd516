"""
SinkClient Tests
================

End-to-end behavior of the facade over fake transports.
"""

import json

import pytest

from vcp_client import APISink, ClientRole, HeadPose, SinkClient
from vcp_client.config import Settings


URL = "ws://vcp.test:8080"


@pytest.fixture
def client(transport_factory, scheduler, error_log):
    return SinkClient(
        URL,
        transport_factory=transport_factory,
        call_later=scheduler,
        error_sink=error_log,
    )


class TestSinkClient:
    """Facade wiring."""

    def test_construction_does_not_connect(self, client, transport_factory):
        assert transport_factory.created == []
        assert not client.opened

    def test_start_connects_and_handshakes_as_sink(self, client, transport_factory):
        client.start()
        transport_factory.last.ready()

        assert client.opened
        assert client.connection.role is ClientRole.SINK
        assert json.loads(transport_factory.last.sent[0])["role"] == "sink"

    def test_typed_sink_receives_messages(self, client, transport_factory, head_pose_message):
        poses = []
        client.add_processor(APISink(HeadPose, handler=poses.append))
        client.start()
        transport_factory.last.ready()

        transport_factory.last.receive(head_pose_message)

        assert len(poses) == 1
        assert poses[0].rotation.yaw == -0.25
        assert poses[0].sender == "tracker-1"

    def test_sync_process_mode_batches_until_process_queue(
        self, client, transport_factory, make_processor
    ):
        log = []
        client.add_processor(make_processor("a", ["headPoseAPI"], log))
        client.sync_process_mode = True
        client.start()
        transport_factory.last.ready()

        for _ in range(3):
            transport_factory.last.receive('{"type": "headPoseAPI"}')

        assert log == []
        assert client.process_queue() == 3
        assert len(log) == 3

    def test_frames_survive_reconnect(self, client, transport_factory, scheduler, make_processor):
        log = []
        client.add_processor(make_processor("a", ["headPoseAPI"], log))
        client.start()
        transport_factory.last.ready()
        transport_factory.last.drop()
        scheduler.fire_next()
        transport_factory.last.ready()

        transport_factory.last.receive('{"type": "headPoseAPI"}')

        assert len(log) == 1
        assert len(transport_factory.created) == 2

    def test_manual_request_is_deprecated(self, client, transport_factory):
        client.start()
        transport_factory.last.ready()

        with pytest.warns(DeprecationWarning):
            client.manual_request()

        assert transport_factory.last.sent[-1] == "request"

    def test_manual_request_when_closed_sends_nothing(self, client):
        with pytest.warns(DeprecationWarning):
            client.manual_request()

    def test_settings_drive_wiring(self, transport_factory, scheduler):
        settings = Settings.model_validate({
            "connection": {"url": "ws://configured:9000", "retry_delay_seconds": 1.5},
            "dispatch": {"sync_process_mode": True, "allow_duplicate_registration": False},
            "logging": {"debug_frames": True},
        })
        client = SinkClient(settings=settings, transport_factory=transport_factory, call_later=scheduler)

        assert client.url == "ws://configured:9000"
        assert client.sync_process_mode
        assert client.debug_mode
        assert not client.registry.allow_duplicates
        assert client.connection.retry_policy.delay == 1.5

    def test_close_and_metrics(self, client, transport_factory, scheduler):
        client.start()
        transport_factory.last.ready()
        transport_factory.last.receive("garbage")

        client.close()

        metrics = client.metrics()
        assert metrics["state"] == "CLOSED"
        assert metrics["connection"]["connects"] == 1
        assert metrics["router"]["parse_errors"] == 1
        assert transport_factory.last.closed
        assert scheduler.pending == []

    @pytest.mark.asyncio
    async def test_async_context_manager(self, client, transport_factory):
        async with client:
            assert len(transport_factory.created) == 1
        assert transport_factory.last.closed
