"""Test suite for the in-memory cache backend."""

from unittest.mock import patch

import pytest

from tiercache.cache import MemoryCache


class TestMemoryCache:
    """Test MemoryCache functionality."""

    def test_memory_cache_initialization(self):
        cache = MemoryCache(max_size=10)
        assert cache.max_size == 10
        assert cache.backend_name == "memory"

    def test_memory_cache_size_from_env(self, monkeypatch):
        monkeypatch.setenv("TIERCACHE_CACHE_SIZE", "42")
        assert MemoryCache().max_size == 42

    def test_memory_cache_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            MemoryCache(max_size=0)

    @pytest.mark.asyncio
    async def test_memory_cache_operations(self):
        cache = MemoryCache()

        assert await cache.set("key1", "value1") == "value1"
        assert await cache.get("key1") == "value1"
        assert await cache.exists("key1") is True

        await cache.delete("key1")
        assert await cache.get("key1") is None

        # Deleting again is a no-op
        await cache.delete("key1")

        await cache.set("key2", "value2")
        await cache.clear()
        assert await cache.get("key2") is None

    @pytest.mark.asyncio
    async def test_memory_cache_falsy_values(self):
        cache = MemoryCache()
        await cache.set("zero", 0)
        await cache.set("empty", "")

        assert await cache.get("zero") == 0
        assert await cache.get("empty") == ""

    @pytest.mark.asyncio
    async def test_memory_cache_lru_eviction(self):
        cache = MemoryCache(max_size=2)
        await cache.set("a", 1)
        await cache.set("b", 2)

        # Touch "a" so "b" becomes least recently used
        await cache.get("a")
        await cache.set("c", 3)

        assert await cache.get("a") == 1
        assert await cache.get("b") is None
        assert await cache.get("c") == 3

    @pytest.mark.asyncio
    async def test_memory_cache_ttl_expiration(self):
        cache = MemoryCache(ttl=10)

        with patch("tiercache.cache.memory.time") as mock_time:
            mock_time.monotonic.return_value = 100.0
            await cache.set("k", "v")

        with patch("tiercache.cache.memory.time") as mock_time:
            mock_time.monotonic.return_value = 105.0
            assert await cache.get("k") == "v"

        with patch("tiercache.cache.memory.time") as mock_time:
            mock_time.monotonic.return_value = 111.0
            assert await cache.get("k") is None
            assert await cache.exists("k") is False

    @pytest.mark.asyncio
    async def test_memory_cache_shared_datastore(self):
        store = {}
        first = MemoryCache(datastore=store)
        second = MemoryCache(datastore=store)

        await first.set("k", "v")
        assert await second.get("k") == "v"

        await second.delete("k")
        assert await first.get("k") is None

    @pytest.mark.asyncio
    async def test_memory_cache_stats(self):
        cache = MemoryCache()
        await cache.set("k", "v")
        await cache.get("k")
        await cache.get("missing")

        stats = cache.get_stats()

        assert stats["backend"] == "memory"
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["sets"] == 1
        assert stats["hit_rate"] == 0.5
        assert stats["size"] == 1
