"""
Typed Cache - Typed helpers for distributed byte caches

Typed get, set and get-or-create operations that store values as UTF-8 JSON
in any async byte cache (in-memory or Redis backends included).
"""

__version__ = "1.0.0"

from .cache import (
    ByteCache,
    CacheEntryOptions,
    CacheItemPriority,
    CacheLookup,
    TypedCache,
    create_cache,
    create_typed_cache,
    get_or_create,
    get_value,
    set_value,
    try_get_value,
)
from .cancellation import CancellationToken
from .errors import (
    CacheConnectionError,
    CacheError,
    CacheOperationError,
    ConfigurationError,
    InvalidArgumentError,
    SerializationError,
    TypedCacheError,
)
from .serialization import DEFAULT_SERIALIZATION_OPTIONS, SerializationOptions

__all__ = [
    "get_value",
    "try_get_value",
    "set_value",
    "get_or_create",
    "TypedCache",
    "CacheLookup",
    "ByteCache",
    "CacheEntryOptions",
    "CacheItemPriority",
    "create_cache",
    "create_typed_cache",
    "CancellationToken",
    "SerializationOptions",
    "DEFAULT_SERIALIZATION_OPTIONS",
    "TypedCacheError",
    "ConfigurationError",
    "InvalidArgumentError",
    "SerializationError",
    "CacheError",
    "CacheConnectionError",
    "CacheOperationError",
]
