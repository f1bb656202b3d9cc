"""
Typed Cache - Redis Byte Cache Backend

Asynchronous Redis byte cache with:
- One Redis hash per entry: {data, absexp, sldexp}
- Absolute and sliding expiration mapped onto PEXPIRE
- Namespace prefixing for safe multi-tenant usage

Requires: redis>=5.0 with asyncio support

Example:
    cache = RedisByteCache(redis_url="redis://localhost:6379", namespace="app")
    await cache.set("greeting", b'{"msg":"hello"}', CacheEntryOptions(sliding_expiration=timedelta(minutes=5)))
    raw = await cache.get("greeting")
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ...errors import CacheConnectionError, CacheOperationError, InvalidArgumentError
from ..interface import ByteCache
from ..options import CacheEntryOptions

logger = logging.getLogger(__name__)

_DATA = "data"
_ABSOLUTE = "absexp"
_SLIDING = "sldexp"
_NOT_PRESENT = -1


def _expiry_ms(absexp: int, sldexp: int, now_ms: int) -> int | None:
    """Milliseconds until the entry should expire, None for no expiry."""
    if sldexp != _NOT_PRESENT:
        ttl = sldexp
        if absexp != _NOT_PRESENT:
            ttl = min(ttl, absexp - now_ms)
    elif absexp != _NOT_PRESENT:
        ttl = absexp - now_ms
    else:
        return None
    return max(ttl, 1)


class RedisByteCache(ByteCache):
    """
    Redis byte cache backend.

    Notes:
    - Keys are prefixed with the configured namespace to avoid collisions.
    - The absolute deadline is stored in epoch milliseconds and the sliding
      window in milliseconds, -1 when unset.
    - Reads of sliding entries re-apply PEXPIRE, capped at the absolute deadline.
    - Redis failures are raised as CacheConnectionError/CacheOperationError.
    """

    def __init__(
        self,
        redis_url: str,
        namespace: str = "typed_cache",
        default_ttl: int = 0,
        max_connections: int = 10,
        socket_timeout: int = 5,
    ) -> None:
        """
        Initialize Redis cache backend.

        Args:
            redis_url: Connection URL, e.g., redis://localhost:6379/0 or rediss:// for TLS
            namespace: Prefix for all keys
            default_ttl: TTL in seconds for entries without expiration (0 => no expiry)
            max_connections: Connection pool size
            socket_timeout: Socket timeout in seconds
        """
        if not redis_url:
            raise ValueError("redis_url is required")

        self.namespace = namespace.strip() or "typed_cache"
        self.default_ttl = max(0, int(default_ttl))
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._removes = 0

        # Lazy connection; connects on first command
        self._client = Redis.from_url(
            url=redis_url,
            decode_responses=False,
            max_connections=max_connections,
            socket_timeout=socket_timeout,
        )

    # ------------ Helpers ------------

    def _make_key(self, key: str) -> str:
        """Create namespaced key."""
        return f"{self.namespace}:{key}"

    def _store_error(self, operation: str, key: str | None, error: RedisError) -> Exception:
        """Translate a redis-py error into the cache error hierarchy."""
        details = {"operation": operation, "key": key, "namespace": self.namespace, "error": str(error)}
        logger.error(
            f"Redis {operation} failed for key '{key}': {error}",
            extra=details,
            exc_info=True,
        )
        if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
            return CacheConnectionError("redis", details=details)
        return CacheOperationError(f"Redis {operation} failed: {error}", details=details)

    async def _renew(self, ns_key: str, absexp: int, sldexp: int) -> None:
        if sldexp == _NOT_PRESENT:
            return
        ttl = _expiry_ms(absexp, sldexp, int(time.time() * 1000))
        if ttl is not None:
            await self._client.pexpire(ns_key, ttl)

    # ------------ Core Interface ------------

    async def get(self, key: str) -> bytes | None:
        """Retrieve bytes by key, renewing any sliding window."""
        ns_key = self._make_key(key)
        try:
            data, absexp, sldexp = await self._client.hmget(ns_key, [_DATA, _ABSOLUTE, _SLIDING])
            if data is None:
                self._misses += 1
                return None

            await self._renew(ns_key, int(absexp or _NOT_PRESENT), int(sldexp or _NOT_PRESENT))
        except RedisError as e:
            raise self._store_error("get", key, e) from e

        self._hits += 1
        return bytes(data)

    async def set(self, key: str, value: bytes, options: CacheEntryOptions) -> None:
        """Create or overwrite an entry with its expiration policy."""
        now = time.time()
        now_ms = int(now * 1000)

        deadline = options.resolve_absolute_expiration(datetime.fromtimestamp(now, UTC))
        absexp = int(deadline.timestamp() * 1000) if deadline is not None else _NOT_PRESENT
        if absexp != _NOT_PRESENT and absexp <= now_ms:
            raise InvalidArgumentError("options", "absolute expiration must be in the future")

        sldexp = (
            int(options.sliding_expiration.total_seconds() * 1000)
            if options.sliding_expiration is not None
            else _NOT_PRESENT
        )
        if absexp == _NOT_PRESENT and sldexp == _NOT_PRESENT and self.default_ttl > 0:
            absexp = now_ms + self.default_ttl * 1000

        ns_key = self._make_key(key)
        ttl = _expiry_ms(absexp, sldexp, now_ms)
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.delete(ns_key)
                pipe.hset(ns_key, mapping={_DATA: value, _ABSOLUTE: absexp, _SLIDING: sldexp})
                if ttl is not None:
                    pipe.pexpire(ns_key, ttl)
                await pipe.execute()
        except RedisError as e:
            raise self._store_error("set", key, e) from e

        self._sets += 1

    async def refresh(self, key: str) -> None:
        """Renew the sliding window of an entry without reading its data."""
        ns_key = self._make_key(key)
        try:
            absexp, sldexp = await self._client.hmget(ns_key, [_ABSOLUTE, _SLIDING])
            if sldexp is None:
                return
            await self._renew(ns_key, int(absexp or _NOT_PRESENT), int(sldexp))
        except RedisError as e:
            raise self._store_error("refresh", key, e) from e

    async def remove(self, key: str) -> None:
        """Delete a single key."""
        try:
            if await self._client.delete(self._make_key(key)):
                self._removes += 1
        except RedisError as e:
            raise self._store_error("remove", key, e) from e

    async def clear(self) -> None:
        """
        Clear all entries under the namespace.

        Implementation: SCAN match "<namespace>:*" and DEL in batches.
        """
        pattern = f"{self.namespace}:*"
        cursor = 0
        total_deleted = 0
        batch_size = 1000

        try:
            while True:
                cursor, keys = await self._client.scan(cursor=cursor, match=pattern, count=batch_size)
                if keys:
                    total_deleted += await self._client.delete(*keys)
                if cursor == 0:
                    break
        except RedisError as e:
            raise self._store_error("clear", None, e) from e

        self._removes += total_deleted
        logger.info(f"Cleared {total_deleted} keys from namespace '{self.namespace}'")

    async def get_stats(self) -> dict[str, Any]:
        """Return cache statistics and basic Redis info."""
        stats: dict[str, Any] = {
            "backend": "redis",
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": 0.0,
            "sets": self._sets,
            "removes": self._removes,
            "connected": False,
        }

        total_requests = self._hits + self._misses
        stats["hit_rate"] = round((self._hits / total_requests) * 100, 2) if total_requests else 0.0

        try:
            stats["connected"] = bool(await self._client.ping())
            info = await self._client.info(section="server")
            stats["redis_version"] = info.get("redis_version")
            stats["redis_mode"] = info.get("redis_mode")
        except RedisError as e:
            # INFO may be restricted; keep minimal stats
            logger.warning(f"Failed to get Redis INFO (restricted or unavailable): {e}", extra={"error": str(e)})

        return stats

    async def close(self) -> None:
        """Close the Redis client and release resources."""
        try:
            await self._client.aclose()
            logger.info(f"Closed Redis cache backend for namespace '{self.namespace}'")
        finally:
            await self._client.connection_pool.disconnect()
