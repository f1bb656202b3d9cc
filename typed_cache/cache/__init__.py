"""
Typed Cache - Cache Module

Typed accessors over pluggable byte cache backends.

- typed.py: get_value / try_get_value / set_value / get_or_create and TypedCache
- interface.py: ByteCache interface all backends implement
- options.py: per-entry expiration options
- factory.py: configuration-driven backend and TypedCache creation
- backends/: memory and Redis backends

Usage:
    from typed_cache.cache import create_typed_cache

    cache = create_typed_cache()
    await cache.set("user:42", User(id=42, name="Ada"))
    user = await cache.get("user:42", User)
"""

from .factory import (
    close_all_caches,
    create_cache,
    create_typed_cache,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from .interface import ByteCache
from .options import CacheEntryOptions, CacheItemPriority
from .typed import (
    CacheLookup,
    TypedCache,
    get_or_create,
    get_value,
    set_value,
    try_get_value,
)

__all__ = [
    # Typed accessors
    "get_value",
    "try_get_value",
    "set_value",
    "get_or_create",
    "TypedCache",
    "CacheLookup",
    # Entry options
    "CacheEntryOptions",
    "CacheItemPriority",
    # Factory functions
    "create_cache",
    "create_typed_cache",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Interface
    "ByteCache",
]
