"""
Typed Cache - Memory Byte Cache Backend

In-process byte cache with LRU eviction, absolute and sliding expiration.
Safe for concurrent coroutines and suitable for single-process deployments
and tests.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from ...errors import InvalidArgumentError
from ..interface import ByteCache
from ..options import CacheEntryOptions, CacheItemPriority

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: bytes
    absolute: float | None
    sliding: float | None
    expires_at: float | None
    priority: CacheItemPriority


def _next_expiry(absolute: float | None, sliding: float | None, now: float) -> float | None:
    """Earliest of the absolute deadline and the renewed sliding window."""
    candidates = [t for t in (absolute, now + sliding if sliding is not None else None) if t is not None]
    return min(candidates) if candidates else None


class MemoryByteCache(ByteCache):
    """
    In-memory byte cache backend with LRU eviction.

    Features:
    - LRU eviction when max_size is reached (NEVER_REMOVE entries are spared
      while any other entry can be evicted)
    - Absolute, relative and sliding expiration from CacheEntryOptions
    - default_ttl applied to entries written without any expiration
    - O(1) get/set/remove operations
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: int = 0,
        namespace: str = "typed_cache",
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize memory cache backend.

        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
            default_ttl: TTL in seconds for entries without expiration (0 = no expiry)
            namespace: Cache key namespace/prefix
            clock: Source of epoch seconds, overridable for tests
        """
        if max_size < 1:
            raise InvalidArgumentError("max_size", f"must be at least 1, got {max_size}")

        self.max_size = max_size
        self.default_ttl = default_ttl
        self.namespace = namespace
        self._clock = clock

        self._cache: OrderedDict[str, _Entry] = OrderedDict()

        # Stats
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._removes = 0
        self._evictions = 0

        self._lock = asyncio.Lock()

    def _make_key(self, key: str) -> str:
        """Create namespaced cache key."""
        return f"{self.namespace}:{key}"

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return entry.expires_at is not None and now >= entry.expires_at

    def _evict_one(self) -> None:
        """Evict the least recently used entry, sparing NEVER_REMOVE entries if possible."""
        victim = next(
            (k for k, e in self._cache.items() if e.priority != CacheItemPriority.NEVER_REMOVE),
            next(iter(self._cache)),
        )
        del self._cache[victim]
        self._evictions += 1
        logger.debug(f"Evicted key from memory cache: {victim}")

    async def get(self, key: str) -> bytes | None:
        """Retrieve bytes from cache, renewing any sliding window."""
        async with self._lock:
            cache_key = self._make_key(key)
            entry = self._cache.get(cache_key)

            if entry is None:
                self._misses += 1
                return None

            now = self._clock()
            if self._is_expired(entry, now):
                del self._cache[cache_key]
                self._misses += 1
                return None

            if entry.sliding is not None:
                entry.expires_at = _next_expiry(entry.absolute, entry.sliding, now)

            # Mark as recently used
            self._cache.move_to_end(cache_key)
            self._hits += 1

            return entry.value

    async def set(self, key: str, value: bytes, options: CacheEntryOptions) -> None:
        """Store bytes in cache."""
        now = self._clock()

        deadline = options.resolve_absolute_expiration(datetime.fromtimestamp(now, UTC))
        absolute = deadline.timestamp() if deadline is not None else None
        if absolute is not None and absolute <= now:
            raise InvalidArgumentError("options", "absolute expiration must be in the future")

        sliding = options.sliding_expiration.total_seconds() if options.sliding_expiration else None
        if absolute is None and sliding is None and self.default_ttl > 0:
            absolute = now + self.default_ttl

        entry = _Entry(
            value=bytes(value),
            absolute=absolute,
            sliding=sliding,
            expires_at=_next_expiry(absolute, sliding, now),
            priority=options.priority,
        )

        async with self._lock:
            cache_key = self._make_key(key)

            if cache_key not in self._cache and len(self._cache) >= self.max_size:
                self._evict_one()

            self._cache[cache_key] = entry
            self._cache.move_to_end(cache_key)
            self._sets += 1

    async def refresh(self, key: str) -> None:
        """Renew the sliding window of an entry without counting a hit."""
        async with self._lock:
            cache_key = self._make_key(key)
            entry = self._cache.get(cache_key)
            if entry is None:
                return

            now = self._clock()
            if self._is_expired(entry, now):
                del self._cache[cache_key]
                return

            if entry.sliding is not None:
                entry.expires_at = _next_expiry(entry.absolute, entry.sliding, now)

    async def remove(self, key: str) -> None:
        """Remove key from cache."""
        async with self._lock:
            if self._cache.pop(self._make_key(key), None) is not None:
                self._removes += 1

    async def clear(self) -> None:
        """Clear all entries from cache."""
        async with self._lock:
            size = len(self._cache)
            self._cache.clear()
            logger.info(f"Cleared {size} entries from memory cache namespace '{self.namespace}'")

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        async with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

            return {
                "backend": "memory",
                "size": len(self._cache),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
                "sets": self._sets,
                "removes": self._removes,
                "evictions": self._evictions,
                "namespace": self.namespace,
            }

    async def close(self) -> None:
        """Close cache and release resources."""
        # Nothing to release; data lives in-process
        logger.debug(f"Memory cache backend closed for namespace '{self.namespace}'")
