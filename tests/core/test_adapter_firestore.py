"""Tests for the Cloud Firestore adapter.

The async client is replaced through ``client_factory``; tests that need
the real ``google-cloud-firestore`` package are skipped without it.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from docspine.core.adapters import DocumentAdapter, FirestoreAdapter
from docspine.core.errors import (
    ConfigurationError,
    MissingApiKeyError,
    MissingCredentialError,
    MissingProjectIdError,
    StoreError,
)
from docspine.core.query import Query
from docspine.core.settings import FirestoreSettings


class AsyncStream:
    """Async iterator over snapshots, like ``Query.stream()``."""

    def __init__(self, snapshots):
        self._snapshots = list(snapshots)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._snapshots:
            raise StopAsyncIteration
        return self._snapshots.pop(0)


def snapshot(data: dict | None, doc_id: str = "1") -> MagicMock:
    snap = MagicMock()
    snap.exists = data is not None
    snap.id = doc_id
    snap.to_dict.return_value = data
    return snap


@pytest.fixture
def client():
    client = MagicMock()
    collection = MagicMock()
    collection.where.return_value = collection
    collection.order_by.return_value = collection
    collection.limit.return_value = collection
    client.collection.return_value = collection
    return client


@pytest.fixture
def doc_ref(client):
    ref = MagicMock()
    ref.get = AsyncMock(return_value=snapshot({"_id": "1", "title": "x"}))
    ref.set = AsyncMock()
    ref.update = AsyncMock()
    ref.delete = AsyncMock()
    client.collection.return_value.document.return_value = ref
    return ref


@pytest.fixture
def adapter(client, host):
    adapter = FirestoreAdapter("api-key", "demo-project", client_factory=lambda _: client)
    adapter.init(host)
    adapter.connect()
    return adapter


class TestCredentials:
    def test_missing_api_key(self, host):
        with pytest.raises(MissingApiKeyError):
            FirestoreAdapter(None, "demo-project", client_factory=MagicMock()).init(host)

    def test_missing_both_reports_api_key_first(self, host):
        with pytest.raises(MissingCredentialError) as exc_info:
            FirestoreAdapter(client_factory=MagicMock()).init(host)
        assert isinstance(exc_info.value, MissingApiKeyError)

    def test_missing_project_id(self, host):
        with pytest.raises(MissingProjectIdError):
            FirestoreAdapter("api-key", "", client_factory=MagicMock()).init(host)

    def test_credentials_checked_before_collection(self, host):
        host.collection = None
        with pytest.raises(MissingApiKeyError):
            FirestoreAdapter(client_factory=MagicMock()).init(host)

    def test_missing_collection(self, host):
        host.collection = None
        with pytest.raises(ConfigurationError, match="collection"):
            FirestoreAdapter("api-key", "demo-project", client_factory=MagicMock()).init(host)

    def test_from_settings(self):
        settings = FirestoreSettings(api_key="k", project_id="p")
        adapter = FirestoreAdapter.from_settings(settings)
        assert (adapter.api_key, adapter.project_id) == ("k", "p")


class TestLifecycle:
    def test_satisfies_protocol(self):
        assert isinstance(FirestoreAdapter("k", "p"), DocumentAdapter)

    def test_init_builds_client_once(self, host):
        factory = MagicMock()
        adapter = FirestoreAdapter("k", "p", client_factory=factory)
        adapter.init(host)
        factory.assert_called_once_with(adapter)

    def test_connect_binds_collection(self, adapter, client):
        client.collection.assert_called_once_with("posts")
        assert adapter.is_connected

    def test_connect_before_init(self):
        with pytest.raises(StoreError):
            FirestoreAdapter("k", "p", client_factory=MagicMock()).connect()

    def test_connect_failure_is_wrapped(self, client, host):
        client.collection.side_effect = RuntimeError("unreachable")
        adapter = FirestoreAdapter("k", "p", client_factory=lambda _: client)
        adapter.init(host)
        with pytest.raises(StoreError) as exc_info:
            adapter.connect()
        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_disconnect_drops_handle(self, adapter):
        adapter.disconnect()
        assert not adapter.is_connected
        with pytest.raises(StoreError, match="not connected"):
            await adapter.list()


class TestCrud:
    @pytest.mark.asyncio
    async def test_find_by_id(self, adapter, client, doc_ref):
        assert await adapter.find_by_id(1) == {"_id": "1", "title": "x"}
        client.collection.return_value.document.assert_called_with("1")

    @pytest.mark.asyncio
    async def test_find_by_id_missing(self, adapter, doc_ref):
        doc_ref.get.return_value = snapshot(None)
        assert await adapter.find_by_id("1") is None

    @pytest.mark.asyncio
    async def test_create_sets_then_reads(self, adapter, doc_ref):
        created = await adapter.create({"_id": "1", "title": "x"})
        doc_ref.set.assert_awaited_once_with({"_id": "1", "title": "x"})
        assert created == {"_id": "1", "title": "x"}

    @pytest.mark.asyncio
    async def test_update_then_reads(self, adapter, doc_ref):
        await adapter.update("1", {"title": "y"})
        doc_ref.update.assert_awaited_once_with({"title": "y"})
        doc_ref.get.assert_awaited()

    @pytest.mark.asyncio
    async def test_delete_returns_snapshot(self, adapter, doc_ref):
        assert await adapter.delete("1") == {"_id": "1", "title": "x"}
        doc_ref.delete.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_native_error_wrapped(self, adapter, doc_ref):
        doc_ref.set.side_effect = RuntimeError("permission denied")
        with pytest.raises(StoreError) as exc_info:
            await adapter.create({"_id": "1"})
        assert exc_info.value.context.entity_id == "1"
        assert exc_info.value.context.collection == "posts"

    @pytest.mark.asyncio
    async def test_list_keys_by_id(self, adapter, client):
        client.collection.return_value.stream.return_value = AsyncStream(
            [snapshot({"_id": "a", "n": 1}, "a"), snapshot({"n": 2}, "b")]
        )
        result = await adapter.list()
        assert result == {"a": {"_id": "a", "n": 1}, "b": {"n": 2}}


class TestFind:
    @pytest.fixture(autouse=True)
    def _firestore(self):
        pytest.importorskip("google.cloud.firestore_v1.base_query")

    @pytest.mark.asyncio
    async def test_translates_query(self, adapter, client):
        collection = client.collection.return_value
        collection.stream.return_value = AsyncStream([snapshot({"_id": "2"}, "2")])

        query = Query.build(conditions=[["category", "==", "JS"]], limit=5, order_by=["author"])
        result = await adapter.find(query)

        assert result == {"2": {"_id": "2"}}
        field_filter = collection.where.call_args.kwargs["filter"]
        assert (field_filter.field_path, field_filter.op_string, field_filter.value) == (
            "category",
            "==",
            "JS",
        )
        collection.order_by.assert_called_once_with("author")
        collection.limit.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_find_by_ids_uses_in_filter(self, adapter, client):
        collection = client.collection.return_value
        collection.stream.return_value = AsyncStream([])

        await adapter.find_by_ids(["1", "2"])

        field_filter = collection.where.call_args.kwargs["filter"]
        assert (field_filter.field_path, field_filter.op_string, field_filter.value) == (
            "_id",
            "in",
            ["1", "2"],
        )
        collection.limit.assert_not_called()


class TestDefaultClient:
    def test_builds_async_client(self, host, monkeypatch):
        firestore = pytest.importorskip("google.cloud.firestore")
        async_client = MagicMock()
        monkeypatch.setattr(firestore, "AsyncClient", async_client)

        adapter = FirestoreAdapter("api-key", "demo-project")
        adapter.init(host)

        assert async_client.call_args.kwargs["project"] == "demo-project"
        assert async_client.call_args.kwargs["credentials"].token == "api-key"
