"""Change notification after CRUD mutations.

After every create, update and delete the owning service

1. broadcasts ``cache.clean.<full_name>`` on the event bus and purges its
   own entries (``<full_name>.*``) from the result cache, then
2. invokes the optional lifecycle hook for the change
   (``entity_created``, ``entity_updated`` or ``entity_removed``).

Both steps are awaited before the mutation returns, and both are
best-effort: a failing handler, cache or hook is logged and the mutation
result is still returned to the caller.

Tags:
    docspine, framework, cache-invalidation, hooks, events

Doc-Types:
    api-reference
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from docspine.core.cache import CacheBackend
from docspine.core.events import Event, EventBus, get_event_bus
from docspine.core.logging import get_logger
from docspine.core.query import Entity
from docspine.framework.context import Context

logger = get_logger(__name__)

EntityHook = Callable[[Entity | None, Context], Awaitable[None] | None]


class ChangeType(str, Enum):
    """Kinds of mutation a service reports."""

    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"


@dataclass
class EntityHooks:
    """Optional callbacks run after each kind of mutation.

    Hooks may be plain functions or coroutines; both receive the entity
    returned by the adapter and the request context.
    """

    entity_created: EntityHook | None = None
    entity_updated: EntityHook | None = None
    entity_removed: EntityHook | None = None

    def for_change(self, change: ChangeType) -> EntityHook | None:
        return getattr(self, f"entity_{change.value}")


class ChangeNotifier:
    """
    Runs cache invalidation and lifecycle hooks for one service.

    Args:
        full_name: Service full name (``v1.posts`` or ``posts``)
        event_bus: Broadcast target; defaults to the process-wide bus
        cache: Result cache to purge, if the host keeps one
        hooks: Lifecycle hooks
    """

    def __init__(
        self,
        full_name: str,
        *,
        event_bus: EventBus | None = None,
        cache: CacheBackend | None = None,
        hooks: EntityHooks | None = None,
    ):
        self.full_name = full_name
        self.event_bus = event_bus or get_event_bus()
        self.cache = cache
        self.hooks = hooks or EntityHooks()

    @property
    def event_type(self) -> str:
        return f"cache.clean.{self.full_name}"

    @property
    def cache_pattern(self) -> str:
        return f"{self.full_name}.*"

    async def clear_cache(self, ctx: Context | None = None) -> None:
        """Broadcast the clean event and purge local cache entries."""
        event = Event(
            event_type=self.event_type,
            source=self.full_name,
            correlation_id=ctx.request_id if ctx else None,
        )
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            logger.error(
                "cache_clean_failed",
                service=self.full_name,
                step="broadcast",
                error=str(e),
            )

        if self.cache is None:
            return
        try:
            removed = self.cache.clean(self.cache_pattern)
        except Exception as e:
            logger.error(
                "cache_clean_failed",
                service=self.full_name,
                step="purge",
                pattern=self.cache_pattern,
                error=str(e),
            )
        else:
            logger.debug("cache_cleaned", service=self.full_name, removed=removed)

    async def entity_changed(self, change: ChangeType, entity: Entity | None, ctx: Context) -> None:
        """Notify the rest of the system about one mutation."""
        await self.clear_cache(ctx)

        hook = self.hooks.for_change(change)
        if hook is None:
            return
        try:
            result: Any = hook(entity, ctx)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(
                "entity_hook_failed",
                service=self.full_name,
                hook=f"entity_{change.value}",
                request_id=ctx.request_id,
                error=str(e),
                exc_info=True,
            )


__all__ = [
    "ChangeType",
    "EntityHook",
    "EntityHooks",
    "ChangeNotifier",
]
