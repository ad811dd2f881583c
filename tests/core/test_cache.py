"""
Tests for docspine.core.cache module.

Covers:
- CacheBackend protocol compliance
- InMemoryCache: get/set/delete/exists/clear, LRU eviction, TTL expiry
- clean(pattern): glob purge used by change notification
"""

import time

import pytest

from docspine.core.cache import CacheBackend, InMemoryCache


class TestInMemoryCache:
    """Test InMemoryCache backend."""

    def test_basic_get_set(self):
        cache = InMemoryCache(max_size=100, default_ttl_seconds=None)
        cache.set("key1", {"data": [1, 2, 3]})
        assert cache.get("key1") == {"data": [1, 2, 3]}

    def test_get_missing_key(self):
        assert InMemoryCache().get("missing") is None

    def test_delete(self):
        cache = InMemoryCache()
        cache.set("key1", "value1")
        assert cache.exists("key1")
        cache.delete("key1")
        assert not cache.exists("key1")
        assert cache.get("key1") is None

    def test_clear(self):
        cache = InMemoryCache()
        cache.set("k1", 1)
        cache.set("k2", 2)
        assert cache.size() == 2
        cache.clear()
        assert cache.size() == 0

    def test_ttl_expiry(self):
        cache = InMemoryCache(default_ttl_seconds=1)
        cache.set("temp", "value", ttl_seconds=1)
        assert cache.exists("temp")
        time.sleep(1.1)
        assert not cache.exists("temp")
        assert cache.get("temp") is None

    def test_lru_eviction(self):
        cache = InMemoryCache(max_size=2, default_ttl_seconds=None)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")  # b becomes least recently used
        cache.set("c", 3)
        assert cache.exists("a")
        assert not cache.exists("b")
        assert cache.exists("c")

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryCache(), CacheBackend)


class TestInMemoryCacheClean:
    @pytest.fixture
    def cache(self):
        cache = InMemoryCache(default_ttl_seconds=None)
        cache.set("v1.posts.get:1", {"_id": "1"})
        cache.set("v1.posts.get:2", {"_id": "2"})
        cache.set("v1.posts.find:{}", {})
        cache.set("v1.users.get:1", {"_id": "1"})
        cache.set("v2.posts.get:1", {"_id": "1"})
        return cache

    def test_clean_service_prefix(self, cache):
        removed = cache.clean("v1.posts.*")
        assert removed == 3
        assert cache.size() == 2
        assert cache.exists("v1.users.get:1")
        assert cache.exists("v2.posts.get:1")

    def test_clean_no_match(self, cache):
        assert cache.clean("v3.*") == 0
        assert cache.size() == 5

    def test_clean_is_case_sensitive(self, cache):
        assert cache.clean("V1.POSTS.*") == 0
