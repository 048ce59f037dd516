"""
Dispatch Tests
==============

ProcessorRegistry ordering and DispatchQueue draining.
"""

import pytest

from vcp_client.dispatch import DispatchQueue, ProcessorRegistry


class TestProcessorRegistry:
    """Tests for type -> processors mapping."""

    def test_lookup_preserves_registration_order(self, make_processor):
        """Processors come back in the order they were registered."""
        registry = ProcessorRegistry()
        processors = [make_processor(f"p{i}", ["headPoseAPI"]) for i in range(5)]
        for p in processors:
            registry.register(p)

        assert list(registry.lookup("headPoseAPI")) == processors

    def test_processor_registered_for_every_supported_type(self, make_processor):
        registry = ProcessorRegistry()
        both = make_processor("both", ["headPoseAPI", "fullBodyAPI"])
        registry.register(both)

        assert list(registry.lookup("headPoseAPI")) == [both]
        assert list(registry.lookup("fullBodyAPI")) == [both]
        assert sorted(registry.types()) == ["fullBodyAPI", "headPoseAPI"]

    def test_lookup_unknown_type_is_empty(self):
        registry = ProcessorRegistry()
        assert list(registry.lookup("bustAPI")) == []
        assert "bustAPI" not in registry

    def test_duplicate_registration_allowed_by_default(self, make_processor):
        """Registering twice means being invoked twice."""
        registry = ProcessorRegistry()
        p = make_processor("p", ["controlAPI"])
        registry.register(p)
        registry.register(p)

        assert list(registry.lookup("controlAPI")) == [p, p]
        assert len(registry) == 2

    def test_duplicate_registration_can_be_disabled(self, make_processor):
        registry = ProcessorRegistry(allow_duplicates=False)
        p = make_processor("p", ["controlAPI"])
        q = make_processor("q", ["controlAPI"])
        registry.register(p)
        registry.register(q)
        registry.register(p)

        assert list(registry.lookup("controlAPI")) == [p, q]

    def test_enum_types_are_normalized(self, make_processor):
        from vcp_client.models import APIType

        registry = ProcessorRegistry()
        p = make_processor("p", [APIType.HEAD_POSE])
        registry.register(p)

        assert list(registry.lookup("headPoseAPI")) == [p]


class TestDispatchQueue:
    """Tests for deferred callback FIFO."""

    def test_drain_runs_in_fifo_order(self):
        queue = DispatchQueue()
        calls = []
        for name in ("t1", "t2", "t3"):
            queue.enqueue(lambda name=name: calls.append(name))

        assert queue.size == 3
        assert queue.drain_all() == 3
        assert calls == ["t1", "t2", "t3"]
        assert queue.size == 0

    def test_callbacks_enqueued_during_drain_run_in_same_drain(self):
        """T4 enqueued by T1 runs after T3, before drain returns."""
        queue = DispatchQueue()
        calls = []

        def t1():
            calls.append("t1")
            queue.enqueue(lambda: calls.append("t4"))

        queue.enqueue(t1)
        queue.enqueue(lambda: calls.append("t2"))
        queue.enqueue(lambda: calls.append("t3"))

        assert queue.drain_all() == 4
        assert calls == ["t1", "t2", "t3", "t4"]
        assert len(queue) == 0

    def test_drain_empty_queue(self):
        assert DispatchQueue().drain_all() == 0

    def test_drain_does_not_catch(self):
        """Exceptions propagate; the rest stays queued."""
        queue = DispatchQueue()
        calls = []

        def boom():
            raise ValueError("boom")

        queue.enqueue(boom)
        queue.enqueue(lambda: calls.append("after"))

        with pytest.raises(ValueError):
            queue.drain_all()
        assert queue.size == 1

        queue.drain_all()
        assert calls == ["after"]

    def test_clear_and_metrics(self):
        queue = DispatchQueue()
        queue.enqueue(lambda: None)
        queue.enqueue(lambda: None)
        queue.drain_all()
        queue.enqueue(lambda: None)

        assert queue.clear() == 1
        assert queue.metrics() == {"size": 0, "total_enqueued": 3, "total_drained": 2}
