"""Broadcast primitive for change notifications.

After every mutation a CRUD service tells the rest of the system that its
cached reads are stale.  The service does not know who listens: other
instances of the same service, API gateways holding response caches, or
nobody at all.  Hosts with a message broker pass their own ``EventBus``;
everything else shares the in-process default.

Usage::

    from docspine.core.events import Event, get_event_bus

    bus = get_event_bus()

    async def on_clean(event: Event):
        gateway_cache.drop(event.source)
    await bus.subscribe("cache.clean.*", on_clean)

    await bus.publish(Event(event_type="cache.clean.v1.posts", source="v1.posts"))
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "get_event_bus",
    "set_event_bus",
]


@dataclass(frozen=True)
class Event:
    """A broadcast notice.

    Attributes:
        event_type: Dot-separated type, ``cache.clean.<service full name>``
        source: Full name of the emitting service
        correlation_id: Id of the request that caused the event
        timestamp: When the event occurred (UTC)
    """

    event_type: str
    source: str
    correlation_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def matches(self, pattern: str) -> bool:
        """Exact type, or ``prefix.*`` for every type below ``prefix``."""
        if pattern.endswith(".*"):
            return self.event_type.startswith(pattern[:-1])
        return self.event_type == pattern


EventHandler = Callable[[Event], Awaitable[None]]


@runtime_checkable
class EventBus(Protocol):
    async def publish(self, event: Event) -> None: ...

    async def subscribe(self, pattern: str, handler: EventHandler) -> None: ...


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the process-wide event bus, creating an in-memory one if unset."""
    global _event_bus
    if _event_bus is None:
        from docspine.core.events.memory import InMemoryEventBus
        _event_bus = InMemoryEventBus()
    return _event_bus


def set_event_bus(bus: EventBus | None) -> None:
    """Replace the process-wide event bus (``None`` resets to the default)."""
    global _event_bus
    _event_bus = bus
