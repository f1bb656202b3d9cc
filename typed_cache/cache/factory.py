"""
Typed Cache - Cache Factory

Builds byte cache backends from CacheConfig and keeps them in a registry of
named instances, so one process shares a single connection pool per name.

create_typed_cache() is the usual entry point: it returns a TypedCache whose
bound SerializationOptions come from the same configuration
(SERIALIZATION_BY_ALIAS, SERIALIZATION_EXCLUDE_NONE, SERIALIZATION_STRICT).

Examples:
    from typed_cache.cache.factory import create_typed_cache

    users = create_typed_cache()
    await users.set("user:42", User(id=42, name="Ada"))

    # Backend only, e.g. for a custom TypedCache binding
    from typed_cache.config import CacheConfig
    raw = create_cache(CacheConfig(max_size=100), name="scratch")
"""

from __future__ import annotations

import logging

from ..config import CacheBackend, CacheConfig, TypedCacheConfig, get_config
from ..errors import ConfigurationError
from .backends.memory import MemoryByteCache
from .interface import ByteCache
from .typed import TypedCache

logger = logging.getLogger(__name__)

_SUPPORTED_BACKENDS = [backend.value for backend in CacheBackend]

# Backends by instance name
_cache_instances: dict[str, ByteCache] = {}


def _build_backend(config: CacheConfig) -> ByteCache:
    """Construct the backend selected by ``config.backend``."""
    if config.backend == CacheBackend.MEMORY:
        return MemoryByteCache(
            max_size=config.max_size,
            default_ttl=config.ttl_seconds,
            namespace=config.namespace,
        )

    if config.backend == CacheBackend.REDIS:
        if not config.redis_url:
            raise ConfigurationError(
                "REDIS_URL must be set when CACHE_BACKEND=redis",
                details={"env": "REDIS_URL", "backend": CacheBackend.REDIS.value},
            )
        # Imported here so memory-only processes never open redis sockets
        from .backends.redis import RedisByteCache

        return RedisByteCache(
            redis_url=config.redis_url,
            namespace=config.namespace,
            default_ttl=config.ttl_seconds,
            max_connections=config.redis_max_connections,
            socket_timeout=config.redis_socket_timeout,
        )

    raise ConfigurationError(
        f"Unknown cache backend: {config.backend}",
        details={"backend": str(config.backend), "supported": _SUPPORTED_BACKENDS},
    )


def create_cache(config: CacheConfig | None = None, name: str = "default") -> ByteCache:
    """
    Return the byte cache registered under ``name``, building it on first use.

    Args:
        config: Backend configuration; the loaded configuration's ``cache``
            section when omitted. Ignored if ``name`` is already registered.
        name: Registry name of the instance

    Raises:
        ConfigurationError: If the backend is unknown or misconfigured
    """
    existing = _cache_instances.get(name)
    if existing is not None:
        return existing

    if config is None:
        config = get_config().cache

    cache = _build_backend(config)
    _cache_instances[name] = cache
    logger.info(
        "Registered %s cache '%s' (namespace '%s')",
        type(cache).__name__,
        name,
        config.namespace,
        extra={"cache_name": name, "namespace": config.namespace},
    )
    return cache


def create_typed_cache(config: TypedCacheConfig | None = None, name: str = "default") -> TypedCache:
    """
    Return a TypedCache over the named backend, bound to the configured
    serialization options.

    Args:
        config: Full configuration; the loaded configuration when omitted
        name: Registry name of the underlying backend
    """
    if config is None:
        config = get_config()

    return TypedCache(create_cache(config.cache, name), config.serialization)


def get_cache(name: str = "default") -> ByteCache:
    """Return the named backend, building it from the loaded configuration if needed."""
    return create_cache(name=name)


async def close_all_caches() -> None:
    """
    Close every registered backend and empty the registry.

    A backend that fails to close is logged and skipped.
    """
    instances = list(_cache_instances.items())
    _cache_instances.clear()

    for name, cache in instances:
        try:
            await cache.close()
        except Exception as e:
            logger.error(
                "Error closing cache instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e)},
                exc_info=True,
            )

    logger.debug("Closed %d cache instance(s)", len(instances))


def reset_cache_factory() -> None:
    """Forget registered backends without closing them. For tests."""
    _cache_instances.clear()


def list_cache_instances() -> list[str]:
    """Names of the registered backends."""
    return list(_cache_instances)
