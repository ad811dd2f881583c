"""Generic CRUD service.

Manifesto:
    Every microservice that owns a collection of documents needs the same
    six actions.  ``CrudService`` implements them once on top of a
    :class:`~docspine.core.adapters.DocumentAdapter`: it validates action
    parameters, normalizes entity identity, calls the adapter, and
    notifies the rest of the system after every mutation.  Hosts (an RPC
    broker, the FastAPI router in :mod:`docspine.api`) only register
    ``service.actions`` or call ``service.call()``.

Features:
    - Actions ``get`` / ``find`` / ``list`` / ``create`` / ``update`` / ``delete``
    - ``get`` with a list of ids routes to ``find_by_ids``
    - Configurable service-level identity field, mapped to ``_id``
    - Optional entity validator (pydantic model or callable) on ``create``
    - Optional result caching of ``get``, purged after every mutation
    - Connect retry at startup (see :mod:`docspine.framework.lifecycle`)

Example:
    service = CrudService(
        "posts",
        adapter=InMemoryDocumentAdapter(),
        collection="posts",
        version=1,
    )
    await service.start()
    post = await service.call("create", {"doc": {"title": "first!"}})
    same = await service.call("get", {"id": post["_id"]})

Tags:
    docspine, framework, crud, service, actions

Doc-Types:
    api-reference
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import json
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from docspine import __version__
from docspine.core.adapters.base import DocumentAdapter
from docspine.core.cache import CacheBackend
from docspine.core.entity import UidFactory, generate_uid, normalize_entity
from docspine.core.errors import ValidationError
from docspine.core.events import EventBus
from docspine.core.logging import LogContext, get_logger
from docspine.core.query import Entity, Query, ResultSet
from docspine.core.settings import DocSpineSettings
from docspine.framework.context import Context
from docspine.framework.lifecycle import ConnectionLifecycle, Sleep
from docspine.framework.notify import ChangeNotifier, ChangeType, EntityHooks
from docspine.framework.params import validate_params

logger = get_logger(__name__)

EntityValidator = type[BaseModel] | Callable[[Entity], Any]
Action = Callable[[Context], Awaitable[Any]]


class CrudService:
    """
    CRUD actions over one collection.

    Args:
        name: Service name
        adapter: Storage driver; required before ``start()``
        collection: Collection the adapter binds to
        version: Optional version; the full name becomes ``v<version>.<name>``
        settings: Service settings (identity field, retry delay)
        event_bus: Broadcast target for cache invalidation
        cache: Result cache used for ``get`` and purged after mutations
        hooks: Lifecycle hooks run after mutations
        entity_validator: Checks documents on ``create``
        uid_factory: Generates identities for documents without one
        description: Free text exposed in :attr:`metadata`
        sleep: Awaitable used between connect attempts

    Raises:
        ConfigurationError: the collection is missing, or the adapter
            rejects its credentials
    """

    category = "database"

    def __init__(
        self,
        name: str,
        adapter: DocumentAdapter | None = None,
        collection: str | None = None,
        *,
        version: int | str | None = None,
        settings: DocSpineSettings | None = None,
        event_bus: EventBus | None = None,
        cache: CacheBackend | None = None,
        hooks: EntityHooks | None = None,
        entity_validator: EntityValidator | None = None,
        uid_factory: UidFactory = generate_uid,
        description: str = "Generic CRUD service backed by a document adapter",
        sleep: Sleep = asyncio.sleep,
    ):
        self.name = name
        self.version = version
        self.collection = collection
        self.description = description
        self.settings = settings or DocSpineSettings()
        self.adapter = adapter
        self.cache = cache
        self._entity_validator = entity_validator
        self._uid_factory = uid_factory

        self.notifier = ChangeNotifier(
            self.full_name, event_bus=event_bus, cache=cache, hooks=hooks
        )
        self.lifecycle = ConnectionLifecycle(
            adapter,
            reconnect_delay=self.settings.reconnect_delay_seconds,
            sleep=sleep,
        )
        self.lifecycle.initialize(self)

    # ── Identity ──────────────────────────────────────────────────

    @property
    def full_name(self) -> str:
        """``v<version>.<name>`` when versioned, else ``name``."""
        if self.version is None:
            return self.name
        return f"v{self.version}.{self.name}"

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "description": self.description,
            "collection": self.collection,
            "id_field": self.settings.id_field,
            "package": {"name": "docspine", "version": __version__},
        }

    # ── Lifecycle ─────────────────────────────────────────────────

    async def start(self) -> None:
        """Connect the adapter, retrying forever."""
        await self.lifecycle.start()
        logger.info("service_started", service=self.full_name, collection=self.collection)

    async def stop(self) -> None:
        await self.lifecycle.stop()
        logger.info("service_stopped", service=self.full_name)

    async def __aenter__(self) -> CrudService:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    # ── Methods ───────────────────────────────────────────────────

    async def get(self, ctx: Context) -> Entity | None:
        """Fetch one entity by ``ctx.params["id"]``."""
        return await self.adapter.find_by_id(ctx.params["id"])

    async def find_by_ids(self, ctx: Context) -> ResultSet:
        """Fetch the existing subset of the ids in ``ctx.params["id"]``."""
        return await self.adapter.find_by_ids(ctx.params["id"])

    async def find(self, ctx: Context) -> ResultSet:
        """Run a query built from ``conditions``, ``limit`` and ``order_by``."""
        query = Query.build(
            conditions=ctx.params.get("conditions"),
            limit=ctx.params.get("limit"),
            order_by=ctx.params.get("order_by"),
        )
        return await self.adapter.find(query)

    async def list(self, ctx: Context) -> ResultSet:
        """Return the whole collection."""
        return await self.adapter.list()

    async def create(self, ctx: Context) -> Entity:
        """Validate, normalize and persist ``ctx.params["doc"]``."""
        doc = ctx.params["doc"]
        await self._validate_entity(doc)

        entity = normalize_entity(doc, self.settings.id_field, self._uid_factory)
        created = await self.adapter.create(entity)
        logger.info("entity_created", service=self.full_name, id=entity["_id"])

        await self.notifier.entity_changed(ChangeType.CREATED, created, ctx)
        return created

    async def update(self, ctx: Context) -> Entity:
        """Merge ``ctx.params["values"]`` into the entity at ``ctx.params["id"]``."""
        entity_id = ctx.params["id"]
        updated = await self.adapter.update(entity_id, ctx.params["values"])
        logger.info("entity_updated", service=self.full_name, id=entity_id)

        await self.notifier.entity_changed(ChangeType.UPDATED, updated, ctx)
        return updated

    async def delete(self, ctx: Context) -> Entity | None:
        """Delete the entity at ``ctx.params["id"]`` and return its snapshot."""
        entity_id = ctx.params["id"]
        removed = await self.adapter.delete(entity_id)
        logger.info(
            "entity_removed", service=self.full_name, id=entity_id, existed=removed is not None
        )

        await self.notifier.entity_changed(ChangeType.REMOVED, removed, ctx)
        return removed

    async def _validate_entity(self, doc: Entity) -> None:
        validator = self._entity_validator
        if validator is None:
            return

        if isinstance(validator, type) and issubclass(validator, BaseModel):
            try:
                validator.model_validate(doc)
            except PydanticValidationError as e:
                errors = [
                    {
                        "field": ".".join(str(p) for p in err["loc"]),
                        "message": err["msg"],
                        "code": err["type"],
                    }
                    for err in e.errors()
                ]
                raise ValidationError(
                    "Entity validation error",
                    field=errors[0]["field"] if errors else None,
                    errors=errors,
                    cause=e,
                ).with_context(service=self.full_name) from e
            return

        result = validator(doc)
        if inspect.isawaitable(result):
            result = await result
        if result is False:
            raise ValidationError("Entity validation error").with_context(service=self.full_name)

    # ── Actions ───────────────────────────────────────────────────

    @property
    def actions(self) -> dict[str, Action]:
        """Action name -> handler taking a validated ``Context``."""
        return {
            "get": self._get_action,
            "find": self.find,
            "list": self.list,
            "create": self.create,
            "update": self.update,
            "delete": self.delete,
        }

    async def _get_action(self, ctx: Context) -> Entity | ResultSet | None:
        if isinstance(ctx.params["id"], list):
            return await self.find_by_ids(ctx)
        return await self.get(ctx)

    def _cache_key(self, ctx: Context) -> str:
        return f"{self.full_name}.{ctx.action}:{json.dumps(ctx.params, sort_keys=True, default=str)}"

    def _read_cached(self, key: str, many: bool) -> Entity | ResultSet | None:
        try:
            cached = self.cache.get(key)
        except Exception as e:
            logger.warning("cache_get_failed", service=self.full_name, key=key, error=str(e))
            return None
        if cached is None:
            return None

        logger.debug("cache_hit", key=key)
        cached = copy.deepcopy(cached)
        if many:
            # Result sets are stored as (id, entity) pairs; JSON backends stringify mapping keys.
            return {entity_id: entity for entity_id, entity in cached}
        return cached

    def _write_cached(self, key: str, result: Entity | ResultSet, many: bool) -> None:
        value = [[entity_id, entity] for entity_id, entity in result.items()] if many else result
        try:
            self.cache.set(key, copy.deepcopy(value))
        except Exception as e:
            logger.warning(
                "cache_set_failed",
                service=self.full_name,
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def call(
        self,
        action: str,
        params: dict[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> Any:
        """Validate ``params`` and run ``action``.

        Raises:
            ValidationError: unknown action or malformed params; the
                adapter is not called
            StoreError: the adapter failed
        """
        handler = self.actions.get(action)
        if handler is None:
            raise ValidationError(f"Unknown action: {action}", field="action").with_context(
                service=self.full_name, action=action
            )

        ctx = Context(
            action=action,
            params=validate_params(action, params),
            meta=dict(meta or {}),
            service=self.full_name,
        )

        async with LogContext(request_id=ctx.request_id, action=f"{self.full_name}.{action}"):
            if action != "get" or self.cache is None:
                return await handler(ctx)

            key = self._cache_key(ctx)
            many = isinstance(ctx.params["id"], list)
            cached = self._read_cached(key, many)
            if cached is not None:
                return cached

            result = await handler(ctx)
            if result is not None:
                self._write_cached(key, result, many)
            return result


__all__ = [
    "CrudService",
    "EntityValidator",
]
