"""In-process event bus.

Events reach every matching handler of the current process and are not
persisted.  Enough for a single-instance service and for test suites.
"""

from __future__ import annotations

import asyncio

from docspine.core.events import Event, EventHandler
from docspine.core.logging import get_logger

__all__ = ["InMemoryEventBus"]

logger = get_logger(__name__)


class InMemoryEventBus:
    """Delivers each published event to the handlers whose pattern matches it."""

    def __init__(self) -> None:
        self._handlers: list[tuple[str, EventHandler]] = []

    async def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Register ``handler`` for ``pattern`` (exact type or ``prefix.*``)."""
        self._handlers.append((pattern, handler))

    async def publish(self, event: Event) -> None:
        """Run matching handlers concurrently.

        A failing handler is logged and does not stop delivery to the others.
        """
        matched = [handler for pattern, handler in self._handlers if event.matches(pattern)]

        async def deliver(handler: EventHandler) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.warning(
                    "event_handler_error",
                    event_type=event.event_type,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(e),
                )

        await asyncio.gather(*(deliver(handler) for handler in matched))
