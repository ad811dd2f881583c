"""Document adapter contract.

Manifesto:
    A CRUD service must never depend on a specific document store.  Every
    driver satisfies the same small capability set (bind, connect,
    disconnect, list, find, find by id(s), create, update, delete), so a
    service switches stores by being handed a different adapter instance.

Features:
    - ``DocumentAdapter`` protocol: the capability set, checkable at runtime
    - ``BaseDocumentAdapter``: shared ``init`` (credential + collection checks),
      ``find_by_ids`` built on ``find``, store-error translation
    - Context-manager protocol for connection lifecycle

Contract notes:
    - ``init``/``connect``/``disconnect`` are synchronous; data operations
      are coroutines
    - ``create`` receives an entity that already carries ``ID_KEY``
    - ``create`` and ``update`` return the entity re-read after the write
    - ``delete`` returns the pre-delete snapshot, or ``None`` if absent
    - driver failures surface as ``StoreError``

Tags:
    docspine, adapters, abstract-base, adapter-pattern, protocol

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol, runtime_checkable

from docspine.core.entity import ID_KEY
from docspine.core.errors import ConfigurationError, DocSpineError, StoreError
from docspine.core.query import Condition, Entity, Query, ResultSet


@runtime_checkable
class AdapterHost(Protocol):
    """What an adapter learns about its owning service at ``init`` time."""

    @property
    def collection(self) -> str | None: ...

    @property
    def full_name(self) -> str: ...


@runtime_checkable
class DocumentAdapter(Protocol):
    """Capability set every storage driver implements."""

    def init(self, service: AdapterHost) -> None:
        """Bind to the owning service; validate credentials and collection."""
        ...

    def connect(self) -> None:
        """Open a live handle to the bound collection."""
        ...

    def disconnect(self) -> None:
        """Release the handle. Safe to call when never connected."""
        ...

    async def list(self) -> ResultSet:
        """Return every entity of the collection."""
        ...

    async def find(self, query: Query) -> ResultSet:
        """Return the entities matching ``query``."""
        ...

    async def find_by_id(self, id: Any) -> Entity | None:
        """Return one entity, or ``None`` if it does not exist."""
        ...

    async def find_by_ids(self, ids: Iterable[Any]) -> ResultSet:
        """Return the existing subset of ``ids``, keyed by id."""
        ...

    async def create(self, entity: Entity) -> Entity:
        """Persist ``entity`` and return it as stored."""
        ...

    async def update(self, id: Any, values: dict[str, Any]) -> Entity:
        """Merge ``values`` into the entity at ``id`` and return it as stored."""
        ...

    async def delete(self, id: Any) -> Entity | None:
        """Delete the entity at ``id`` and return its last snapshot."""
        ...


class BaseDocumentAdapter(ABC):
    """
    Shared behaviour for document adapters.

    Drivers implement ``connect``/``disconnect`` and the data operations;
    they may override ``_check_credentials`` and ``_bind`` to validate their
    construction arguments and build clients once the collection is known.
    """

    def __init__(self) -> None:
        self._service: AdapterHost | None = None
        self._collection_name: str | None = None
        self._connected = False

    @property
    def service(self) -> AdapterHost | None:
        """Owning service, set by :meth:`init`."""
        return self._service

    @property
    def collection_name(self) -> str | None:
        """Collection this adapter is bound to."""
        return self._collection_name

    @property
    def is_connected(self) -> bool:
        """Whether a live handle is open."""
        return self._connected

    def init(self, service: AdapterHost) -> None:
        """Bind the adapter to ``service``.

        Raises:
            MissingCredentialError: a construction-time credential is missing
            ConfigurationError: the service declares no collection
        """
        self._check_credentials()

        collection = getattr(service, "collection", None)
        if not collection:
            raise ConfigurationError(
                "Missing 'collection' definition in service configuration"
            ).with_context(service=getattr(service, "full_name", None))

        self._service = service
        self._collection_name = collection
        self._bind()

    def _check_credentials(self) -> None:
        """Raise ``MissingCredentialError`` for missing credentials."""

    def _bind(self) -> None:
        """Build driver clients once the collection is known."""

    @abstractmethod
    def connect(self) -> None:
        """Open a live handle to the bound collection."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Release the handle."""
        ...

    @abstractmethod
    async def list(self) -> ResultSet: ...

    @abstractmethod
    async def find(self, query: Query) -> ResultSet: ...

    @abstractmethod
    async def find_by_id(self, id: Any) -> Entity | None: ...

    async def find_by_ids(self, ids: Iterable[Any]) -> ResultSet:
        """Membership query on the identity key."""
        return await self.find(Query(conditions=(Condition(ID_KEY, "in", list(ids)),)))

    @abstractmethod
    async def create(self, entity: Entity) -> Entity: ...

    @abstractmethod
    async def update(self, id: Any, values: dict[str, Any]) -> Entity: ...

    @abstractmethod
    async def delete(self, id: Any) -> Entity | None: ...

    @contextmanager
    def _store_errors(self, operation: str, entity_id: Any = None) -> Iterator[None]:
        """Wrap native driver exceptions in ``StoreError``."""
        try:
            yield
        except DocSpineError:
            raise
        except Exception as e:
            raise StoreError(
                f"{operation} failed on collection {self._collection_name!r}: {e}",
                cause=e,
            ).with_context(collection=self._collection_name, entity_id=entity_id) from e

    def __enter__(self) -> BaseDocumentAdapter:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()


__all__ = [
    "AdapterHost",
    "DocumentAdapter",
    "BaseDocumentAdapter",
]
