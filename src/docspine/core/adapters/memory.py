"""In-memory document adapter.

Keeps collections in a plain ``dict`` and evaluates queries with the
Firestore-compatible helpers of :mod:`docspine.core.query`.  Suitable for:

- Development and tests
- Single-process services whose data may be lost on restart

Documents are stored and returned as deep copies, so neither callers nor
the store can mutate each other's objects.  The backing ``store`` outlives
``disconnect()``; pass the same ``store`` to several adapters to make them
share a database.
"""

from __future__ import annotations

import copy
from typing import Any

from docspine.core.entity import ID_KEY
from docspine.core.errors import StoreConnectionError, StoreError
from docspine.core.query import Entity, Query, ResultSet, apply_query

from .base import BaseDocumentAdapter


class InMemoryDocumentAdapter(BaseDocumentAdapter):
    """
    Document adapter backed by process memory.

    Example:
        adapter = InMemoryDocumentAdapter()
        adapter.init(service)
        adapter.connect()
        await adapter.create({"_id": "1", "title": "first!"})
    """

    def __init__(self, store: dict[str, dict[Any, Entity]] | None = None):
        super().__init__()
        self._store = store if store is not None else {}
        self._documents: dict[Any, Entity] | None = None

    @property
    def store(self) -> dict[str, dict[Any, Entity]]:
        """All collections held by this adapter."""
        return self._store

    def connect(self) -> None:
        """Open (or create) the bound collection."""
        if self._collection_name is None:
            raise StoreConnectionError("Adapter is not initialized: call init() before connect()")
        self._documents = self._store.setdefault(self._collection_name, {})
        self._connected = True

    def disconnect(self) -> None:
        """Drop the collection handle; the data stays in ``store``."""
        self._documents = None
        self._connected = False

    def _collection(self) -> dict[Any, Entity]:
        if self._documents is None:
            raise StoreError("Adapter is not connected").with_context(
                collection=self._collection_name
            )
        return self._documents

    async def list(self) -> ResultSet:
        """Return every entity of the collection."""
        return {key: copy.deepcopy(doc) for key, doc in self._collection().items()}

    async def find(self, query: Query) -> ResultSet:
        """Return the entities matching ``query``."""
        documents = self._collection()
        if query.is_empty:
            return await self.list()
        return copy.deepcopy(apply_query(documents.values(), query, ID_KEY))

    async def find_by_id(self, id: Any) -> Entity | None:
        """Return one entity, or ``None``."""
        doc = self._collection().get(id)
        return copy.deepcopy(doc) if doc is not None else None

    async def create(self, entity: Entity) -> Entity:
        """Persist ``entity`` (replacing any document with the same id)."""
        if ID_KEY not in entity:
            raise StoreError(f"Entity has no {ID_KEY!r} value").with_context(
                collection=self._collection_name
            )
        documents = self._collection()
        documents[entity[ID_KEY]] = copy.deepcopy(entity)
        return await self.find_by_id(entity[ID_KEY])

    async def update(self, id: Any, values: dict[str, Any]) -> Entity:
        """Merge ``values`` into the entity at ``id``.

        Dotted keys (``"author.name"``) update nested fields.

        Raises:
            StoreError: no document exists at ``id``
        """
        documents = self._collection()
        if id not in documents:
            raise StoreError(f"No document to update: {id!r}").with_context(
                collection=self._collection_name, entity_id=id
            )

        doc = documents[id]
        for path, value in values.items():
            target = doc
            *parents, leaf = path.split(".")
            for part in parents:
                if not isinstance(target.get(part), dict):
                    target[part] = {}
                target = target[part]
            target[leaf] = copy.deepcopy(value)

        return await self.find_by_id(id)

    async def delete(self, id: Any) -> Entity | None:
        """Remove the entity at ``id`` and return its last snapshot."""
        return self._collection().pop(id, None)


__all__ = [
    "InMemoryDocumentAdapter",
]
