"""Tests for docspine.core.events -- Event model, EventBus protocol, InMemoryEventBus."""

import pytest
from structlog.testing import capture_logs

from docspine.core.events import Event, EventBus, get_event_bus, set_event_bus
from docspine.core.events.memory import InMemoryEventBus


# ------------------------------------------------------------------ #
# Event model
# ------------------------------------------------------------------ #


class TestEvent:
    def test_defaults(self):
        event = Event(event_type="cache.clean.posts", source="posts")
        assert event.timestamp.tzinfo is not None
        assert event.correlation_id is None

    def test_exact_match(self):
        event = Event(event_type="cache.clean.v1.posts", source="v1.posts")
        assert event.matches("cache.clean.v1.posts") is True
        assert event.matches("cache.clean.v1.users") is False

    def test_prefix_wildcard(self):
        event = Event(event_type="cache.clean.v1.posts", source="v1.posts")
        assert event.matches("cache.clean.*") is True
        assert event.matches("cache.*") is True
        assert event.matches("entity.*") is False

    def test_prefix_requires_dot_boundary(self):
        event = Event(event_type="cache.cleanup", source="x")
        assert event.matches("cache.clean.*") is False


# ------------------------------------------------------------------ #
# InMemoryEventBus
# ------------------------------------------------------------------ #


class TestInMemoryEventBus:
    @pytest.fixture
    def bus(self):
        return InMemoryEventBus()

    @pytest.mark.asyncio
    async def test_publish_no_subscribers(self, bus):
        await bus.publish(Event(event_type="cache.clean.posts", source="posts"))

    @pytest.mark.asyncio
    async def test_subscribe_and_receive(self, bus):
        received = []

        async def handler(event: Event):
            received.append(event)

        await bus.subscribe("cache.clean.*", handler)
        await bus.publish(Event(event_type="cache.clean.posts", source="posts"))
        await bus.publish(Event(event_type="entity.created", source="posts"))

        assert [e.event_type for e in received] == ["cache.clean.posts"]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, bus):
        received = []

        async def broken(event: Event):
            raise RuntimeError("handler down")

        async def handler(event: Event):
            received.append(event)

        await bus.subscribe("cache.clean.*", broken)
        await bus.subscribe("cache.clean.*", handler)

        with capture_logs() as logs:
            await bus.publish(Event(event_type="cache.clean.posts", source="posts"))

        assert len(received) == 1
        assert logs[0]["event"] == "event_handler_error"
        assert logs[0]["error"] == "handler down"

    def test_satisfies_protocol(self, bus):
        assert isinstance(bus, EventBus)


class TestDefaultEventBus:
    def test_lazily_created(self):
        bus = get_event_bus()
        assert isinstance(bus, InMemoryEventBus)
        assert get_event_bus() is bus

    def test_set_and_reset(self):
        custom = InMemoryEventBus()
        set_event_bus(custom)
        assert get_event_bus() is custom

        set_event_bus(None)
        assert get_event_bus() is not custom
