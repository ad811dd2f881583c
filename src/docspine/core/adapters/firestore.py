"""Cloud Firestore document adapter.

Binds a CRUD service to one Firestore collection through the async client
of ``google-cloud-firestore``.  The driver is import-guarded: it is only
required when the adapter is initialized.  Install the extra::

    pip install docspine[firestore]

Credentials are positional, API key first and project id second.  A missing
one is reported at ``init`` time by ``MissingApiKeyError`` or
``MissingProjectIdError``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from docspine.core.entity import ID_KEY
from docspine.core.errors import (
    ConfigurationError,
    MissingApiKeyError,
    MissingProjectIdError,
    StoreError,
)
from docspine.core.logging import get_logger
from docspine.core.query import Entity, Query, ResultSet
from docspine.core.settings import FirestoreSettings

from .base import BaseDocumentAdapter

logger = get_logger(__name__)

ClientFactory = Callable[["FirestoreAdapter"], Any]


class FirestoreAdapter(BaseDocumentAdapter):
    """
    Cloud Firestore adapter.

    Args:
        api_key: Google API key used as client credentials
        project_id: Google Cloud project holding the database
        client_factory: Builds the async client; defaults to
            ``google.cloud.firestore.AsyncClient``. Tests inject fakes here.

    Example:
        adapter = FirestoreAdapter(api_key, project_id)
        service = CrudService("posts", adapter=adapter, collection="posts")
    """

    def __init__(
        self,
        api_key: str | None = None,
        project_id: str | None = None,
        *,
        client_factory: ClientFactory | None = None,
    ):
        super().__init__()
        self.api_key = api_key
        self.project_id = project_id
        self._client_factory = client_factory or _default_client
        self._client: Any = None
        self._collection_ref: Any = None

    @classmethod
    def from_settings(cls, settings: FirestoreSettings | None = None, **kwargs: Any) -> FirestoreAdapter:
        """Build an adapter from ``DOCSPINE_FIRESTORE_*`` settings."""
        settings = settings or FirestoreSettings()
        return cls(settings.api_key, settings.project_id, **kwargs)

    def _check_credentials(self) -> None:
        if not self.api_key:
            raise MissingApiKeyError()
        if not self.project_id:
            raise MissingProjectIdError()

    def _bind(self) -> None:
        self._client = self._client_factory(self)
        logger.debug(
            "firestore_client_created",
            project_id=self.project_id,
            collection=self._collection_name,
        )

    def connect(self) -> None:
        """Bind the collection reference."""
        if self._client is None:
            raise StoreError("Adapter is not initialized: call init() before connect()")
        with self._store_errors("connect"):
            self._collection_ref = self._client.collection(self._collection_name)
        self._connected = True

    def disconnect(self) -> None:
        """Drop the collection reference."""
        self._collection_ref = None
        self._connected = False

    def _collection(self) -> Any:
        if self._collection_ref is None:
            raise StoreError("Adapter is not connected").with_context(
                collection=self._collection_name
            )
        return self._collection_ref

    @staticmethod
    def _parse_snapshot(snapshot: Any) -> Entity | None:
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    @staticmethod
    async def _collect(stream: Any) -> ResultSet:
        docs: ResultSet = {}
        async for snapshot in stream:
            data = snapshot.to_dict()
            docs[data.get(ID_KEY, snapshot.id)] = data
        return docs

    async def list(self) -> ResultSet:
        """Return every document of the collection."""
        collection = self._collection()
        with self._store_errors("list"):
            return await self._collect(collection.stream())

    async def find(self, query: Query) -> ResultSet:
        """Run ``query`` as a Firestore query."""
        from google.cloud.firestore_v1.base_query import FieldFilter

        native = self._collection()
        with self._store_errors("find"):
            for field, op, value in query.conditions:
                native = native.where(filter=FieldFilter(field, op, value))
            for key in query.order_by:
                native = native.order_by(key)
            if query.limit is not None:
                native = native.limit(query.limit)
            return await self._collect(native.stream())

    async def find_by_id(self, id: Any) -> Entity | None:
        """Fetch one document."""
        doc_ref = self._collection().document(str(id))
        with self._store_errors("find_by_id", id):
            return self._parse_snapshot(await doc_ref.get())

    async def create(self, entity: Entity) -> Entity:
        """Write the document, then read it back."""
        doc_id = entity[ID_KEY]
        doc_ref = self._collection().document(str(doc_id))
        with self._store_errors("create", doc_id):
            await doc_ref.set(entity)
        return await self.find_by_id(doc_id)

    async def update(self, id: Any, values: dict[str, Any]) -> Entity:
        """Merge ``values`` into the document, then read it back."""
        doc_ref = self._collection().document(str(id))
        with self._store_errors("update", id):
            await doc_ref.update(values)
        return await self.find_by_id(id)

    async def delete(self, id: Any) -> Entity | None:
        """Read the document, delete it, return the snapshot."""
        doc_ref = self._collection().document(str(id))
        with self._store_errors("delete", id):
            doc = self._parse_snapshot(await doc_ref.get())
            await doc_ref.delete()
        return doc


def _default_client(adapter: FirestoreAdapter) -> Any:
    try:
        from google.auth import api_key
        from google.cloud import firestore
    except ImportError:
        raise ConfigurationError(
            "google-cloud-firestore is required for FirestoreAdapter. "
            "Install with: pip install docspine[firestore]"
        ) from None

    return firestore.AsyncClient(
        project=adapter.project_id,
        credentials=api_key.Credentials(adapter.api_key),
    )


__all__ = [
    "FirestoreAdapter",
]
