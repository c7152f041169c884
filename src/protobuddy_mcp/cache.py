"""Result cache: TTL store with LRU eviction plus a best-effort async adapter."""

import logging
import time
from typing import Any, Protocol

from .config import CACHE_MAX_SIZE

logger = logging.getLogger(__name__)


class CacheUnavailableError(Exception):
    """The cache backend could not serve a request."""


class TTLCache:
    """Simple TTL cache with max size enforcement via LRU eviction.

    Each entry carries its own expiry. Thread-safe for single-threaded
    asyncio (no await between check and set).
    """

    def __init__(self, ttl: float, max_size: int = 5000):
        self._ttl = ttl
        self._max_size = max_size
        self._data: dict[str, tuple[float, float, Any]] = {}  # key -> (stored_at, expires_at, value)

    def get(self, key: str) -> Any | None:
        """Get a cached value, or None if missing/expired."""
        if key in self._data:
            _, expires_at, result = self._data[key]
            if time.time() < expires_at:
                return result
            del self._data[key]
        return None

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Cache a value. Evicts expired entries first, then oldest if still over max_size."""
        now = time.time()
        self._data[key] = (now, now + (self._ttl if ttl is None else ttl), value)
        if len(self._data) > self._max_size:
            self._evict()

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self, prefix: str = "") -> list[str]:
        """Live keys, optionally restricted to a prefix."""
        now = time.time()
        return [k for k, (_, exp, _) in self._data.items() if k.startswith(prefix) and now < exp]

    def _evict(self) -> None:
        """Remove expired entries, then oldest entries if still over max_size."""
        now = time.time()
        # First pass: remove expired
        expired = [k for k, (_, exp, _) in self._data.items() if now >= exp]
        for k in expired:
            del self._data[k]
        # Second pass: LRU eviction if still over limit
        if len(self._data) > self._max_size:
            sorted_keys = sorted(self._data.keys(), key=lambda k: self._data[k][0])
            for k in sorted_keys[:len(self._data) - self._max_size]:
                del self._data[k]

    def __len__(self) -> int:
        return len(self._data)


class CacheBackend(Protocol):
    """Async key/value store holding serialized results."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> None: ...


class MemoryCacheBackend:
    """In-process CacheBackend on top of TTLCache."""

    def __init__(self, max_size: int = CACHE_MAX_SIZE):
        self._cache = TTLCache(ttl=0, max_size=max_size)
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise CacheUnavailableError("memory cache is closed")

    async def get(self, key: str) -> str | None:
        self._check_open()
        return self._cache.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._check_open()
        self._cache.set(key, value, ttl=ttl_seconds)

    async def delete(self, key: str) -> None:
        self._check_open()
        self._cache.delete(key)

    async def close(self) -> None:
        self._closed = True

    def __len__(self) -> int:
        return len(self._cache)

    def stats(self) -> dict[str, Any]:
        """Entry counts grouped by key prefix."""
        by_type: dict[str, int] = {}
        keys = self._cache.keys()
        for key in keys:
            prefix = key.split(":", 1)[0]
            by_type[prefix] = by_type.get(prefix, 0) + 1
        return {"total_keys": len(keys), "keys_by_type": by_type}


class ResultCache:
    """Wraps a CacheBackend so that cache trouble never reaches the caller.

    Failures are logged and treated as a miss (reads) or a no-op (writes).
    """

    def __init__(self, backend: CacheBackend | None):
        self._backend = backend

    @property
    def enabled(self) -> bool:
        return self._backend is not None

    async def get(self, key: str) -> str | None:
        if self._backend is None:
            return None
        try:
            value = await self._backend.get(key)
        except Exception as e:
            logger.warning(f"Cache get failed for {key}: {type(e).__name__}: {e}")
            return None
        if value is None:
            logger.debug(f"Cache miss: {key}")
        else:
            logger.debug(f"Cache hit: {key}")
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if self._backend is None:
            return
        try:
            await self._backend.set(key, value, ttl_seconds)
        except Exception as e:
            logger.warning(f"Cache set failed for {key}: {type(e).__name__}: {e}")

    async def delete(self, key: str) -> bool:
        if self._backend is None:
            return False
        try:
            await self._backend.delete(key)
        except Exception as e:
            logger.warning(f"Cache delete failed for {key}: {type(e).__name__}: {e}")
            return False
        return True
