"""Tests for the result cache."""

import logging

import pytest

from protobuddy_mcp.cache import CacheUnavailableError, MemoryCacheBackend, ResultCache, TTLCache

from factories import FailingBackend


class TestTTLCache:
    """Expiry and eviction."""

    def test_get_set(self):
        cache = TTLCache(ttl=60)
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert cache.get("missing") is None

    def test_per_entry_ttl_expiry(self):
        cache = TTLCache(ttl=60)
        cache.set("short", "x", ttl=0)
        cache.set("long", "y")
        assert cache.get("short") is None
        assert cache.get("long") == "y"
        # Expired entry removed on read
        assert len(cache) == 1

    def test_expiry_with_clock(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr("protobuddy_mcp.cache.time.time", lambda: now[0])
        cache = TTLCache(ttl=10)
        cache.set("a", 1)
        now[0] += 9
        assert cache.get("a") == 1
        now[0] += 1
        assert cache.get("a") is None

    def test_evicts_oldest_over_max_size(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr("protobuddy_mcp.cache.time.time", lambda: now[0])
        cache = TTLCache(ttl=60, max_size=2)
        for key in ("a", "b", "c"):
            cache.set(key, key)
            now[0] += 1
        assert len(cache) == 2
        assert cache.get("a") is None
        assert cache.get("c") == "c"

    def test_evicts_expired_before_live(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr("protobuddy_mcp.cache.time.time", lambda: now[0])
        cache = TTLCache(ttl=60, max_size=2)
        cache.set("old", 1)
        now[0] += 1
        cache.set("stale", 2, ttl=1)
        now[0] += 5
        cache.set("new", 3)
        assert cache.get("old") == 1
        assert cache.get("new") == 3
        assert cache.get("stale") is None

    def test_delete(self):
        cache = TTLCache(ttl=60)
        cache.set("a", 1)
        assert cache.delete("a")
        assert not cache.delete("a")

    def test_keys_by_prefix(self):
        cache = TTLCache(ttl=60)
        cache.set("compat:a:b", 1)
        cache.set("other:x", 2)
        cache.set("compat:gone:b", 3, ttl=0)
        assert cache.keys("compat:") == ["compat:a:b"]


class TestMemoryCacheBackend:
    @pytest.mark.asyncio
    async def test_round_trip(self):
        backend = MemoryCacheBackend(max_size=10)
        await backend.set("compat:a:b", "{}", 60)
        assert await backend.get("compat:a:b") == "{}"
        await backend.delete("compat:a:b")
        assert await backend.get("compat:a:b") is None

    @pytest.mark.asyncio
    async def test_ttl_honored(self):
        backend = MemoryCacheBackend()
        await backend.set("k", "v", 0)
        assert await backend.get("k") is None

    @pytest.mark.asyncio
    async def test_closed_backend_raises(self):
        backend = MemoryCacheBackend()
        await backend.close()
        with pytest.raises(CacheUnavailableError):
            await backend.get("k")
        with pytest.raises(CacheUnavailableError):
            await backend.set("k", "v", 60)

    @pytest.mark.asyncio
    async def test_stats(self):
        backend = MemoryCacheBackend()
        await backend.set("compat:a:b", "1", 60)
        await backend.set("compat:a:c", "2", 60)
        await backend.set("misc", "3", 60)
        stats = backend.stats()
        assert stats["total_keys"] == 3
        assert stats["keys_by_type"] == {"compat": 2, "misc": 1}
        assert len(backend) == 3


class TestResultCache:
    """Cache failures never reach the caller."""

    @pytest.mark.asyncio
    async def test_disabled(self):
        cache = ResultCache(None)
        assert not cache.enabled
        await cache.set("k", "v", 60)
        assert await cache.get("k") is None
        assert await cache.delete("k") is False

    @pytest.mark.asyncio
    async def test_passes_through(self):
        cache = ResultCache(MemoryCacheBackend())
        await cache.set("k", "v", 60)
        assert await cache.get("k") == "v"
        assert await cache.delete("k") is True

    @pytest.mark.asyncio
    async def test_failures_swallowed_and_logged(self, caplog):
        cache = ResultCache(FailingBackend())
        with caplog.at_level(logging.WARNING, logger="protobuddy_mcp.cache"):
            assert await cache.get("k") is None
            await cache.set("k", "v", 60)
            assert await cache.delete("k") is False
        messages = [r.getMessage() for r in caplog.records]
        assert any("Cache get failed" in m for m in messages)
        assert any("Cache set failed" in m for m in messages)
        assert any("Cache delete failed" in m for m in messages)
