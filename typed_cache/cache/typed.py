"""
Typed Cache - Typed Accessors

Typed get, set and get-or-create helpers over any ByteCache. Values are
stored as UTF-8 JSON produced by pydantic.

Every helper validates its arguments when called, before anything is
awaited, and returns a coroutine. Invalid arguments therefore raise
InvalidArgumentError at the call site:

    get_value(None, "k", User)        # raises immediately
    await get_value(cache, "k", User) # User | None

get_or_create is a plain read-then-write: concurrent callers that miss the
same key each run their factory and each write. Callers needing stampede
protection must serialize access themselves.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, Generic, NamedTuple, TypeVar, Union

from ..cancellation import CancellationToken
from ..config import get_config
from ..errors import InvalidArgumentError
from ..serialization import DEFAULT_SERIALIZATION_OPTIONS, SerializationOptions, deserialize, serialize
from .interface import ByteCache
from .options import CacheEntryOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

ValueFactory = Callable[[CacheEntryOptions], Union[Awaitable[T], T]]


class CacheLookup(NamedTuple, Generic[T]):
    """Result of try_get_value: whether the key was present, and its value."""

    found: bool
    value: T | None


def _require_cache(cache: Any) -> None:
    if cache is None:
        raise InvalidArgumentError("cache", "must not be None")
    if not isinstance(cache, ByteCache):
        raise InvalidArgumentError("cache", f"expected ByteCache, got {type(cache).__name__}")


def _require_key(key: Any) -> None:
    if key is None:
        raise InvalidArgumentError("key", "must not be None")
    if not isinstance(key, str):
        raise InvalidArgumentError("key", f"expected str, got {type(key).__name__}")


def _token(cancellation: CancellationToken | None) -> CancellationToken:
    return cancellation if cancellation is not None else CancellationToken.none()


async def _try_get(
    cache: ByteCache,
    key: str,
    type_: type[T],
    serialization_options: SerializationOptions,
    cancellation: CancellationToken,
) -> CacheLookup[T]:
    data = await cancellation.run(cache.get(key))
    if data is None:
        logger.debug("Cache MISS: %s", key)
        return CacheLookup(False, None)

    logger.debug("Cache HIT: %s", key, extra={"key": key, "size": len(data)})
    return CacheLookup(True, deserialize(data, type_, serialization_options))


async def _get(
    cache: ByteCache,
    key: str,
    type_: type[T],
    serialization_options: SerializationOptions,
    cancellation: CancellationToken,
    default: T | None,
) -> T | None:
    lookup = await _try_get(cache, key, type_, serialization_options, cancellation)
    return lookup.value if lookup.found else default


async def _set(
    cache: ByteCache,
    key: str,
    payload: bytes,
    options: CacheEntryOptions,
    cancellation: CancellationToken,
) -> None:
    await cancellation.run(cache.set(key, payload, options))
    logger.debug("Cache SET: %s", key, extra={"key": key, "size": len(payload)})


async def _get_or_create(
    cache: ByteCache,
    key: str,
    type_: type[T],
    factory: ValueFactory[T],
    serialization_options: SerializationOptions,
    cancellation: CancellationToken,
) -> T:
    value = await _get(cache, key, type_, serialization_options, cancellation, None)
    if value is not None:
        return value

    options = CacheEntryOptions()
    result = factory(options)
    if inspect.isawaitable(result):
        value = await cancellation.run(result)
    else:
        value = result
    logger.debug("Cache CREATE: %s", key, extra={"key": key})

    await set_value(cache, key, value, options, serialization_options, cancellation)
    return value


def try_get_value(
    cache: ByteCache,
    key: str,
    type_: type[T],
    serialization_options: SerializationOptions | None = None,
    cancellation: CancellationToken | None = None,
) -> Coroutine[Any, Any, CacheLookup[T]]:
    """
    Look up a key and report whether it was present.

    Unlike get_value, a present value that happens to be falsy or None
    stays distinguishable from a miss.
    """
    _require_cache(cache)
    _require_key(key)
    return _try_get(
        cache,
        key,
        type_,
        serialization_options or DEFAULT_SERIALIZATION_OPTIONS,
        _token(cancellation),
    )


def get_value(
    cache: ByteCache,
    key: str,
    type_: type[T],
    serialization_options: SerializationOptions | None = None,
    cancellation: CancellationToken | None = None,
    default: T | None = None,
) -> Coroutine[Any, Any, T | None]:
    """
    Get the value stored under a key, decoded as ``type_``.

    Args:
        cache: Byte cache to read from
        key: Cache key
        type_: Type to validate the stored JSON against
        serialization_options: Must match the options used when writing
        cancellation: Optional cancellation signal
        default: Returned when the key is missing or expired

    Returns:
        Coroutine resolving to the decoded value, or ``default`` on a miss

    Raises:
        InvalidArgumentError: If cache or key is missing (raised immediately)
        SerializationError: If the stored bytes do not decode into ``type_``
        CacheError: If the backend read fails
    """
    _require_cache(cache)
    _require_key(key)
    return _get(
        cache,
        key,
        type_,
        serialization_options or DEFAULT_SERIALIZATION_OPTIONS,
        _token(cancellation),
        default,
    )


def set_value(
    cache: ByteCache,
    key: str,
    value: Any,
    options: CacheEntryOptions | None = None,
    serialization_options: SerializationOptions | None = None,
    cancellation: CancellationToken | None = None,
) -> Coroutine[Any, Any, None]:
    """
    Create or overwrite the entry at ``key`` with ``value`` encoded as JSON.

    None is rejected: it is reserved to signal a cache miss.

    Args:
        cache: Byte cache to write to
        key: Cache key
        value: Value to store (must not be None)
        options: Expiration policy; a default CacheEntryOptions() when omitted
        serialization_options: Options used to encode the value
        cancellation: Optional cancellation signal

    Raises:
        InvalidArgumentError: If cache, key or value is missing (raised immediately)
        SerializationError: If the value has no JSON representation (raised immediately)
        CacheError: If the backend write fails
    """
    _require_cache(cache)
    _require_key(key)
    if value is None:
        raise InvalidArgumentError("value", "None cannot be stored; it is reserved for cache misses")
    if options is not None and not isinstance(options, CacheEntryOptions):
        raise InvalidArgumentError("options", f"expected CacheEntryOptions, got {type(options).__name__}")

    payload = serialize(value, serialization_options or DEFAULT_SERIALIZATION_OPTIONS)
    entry_options = options if options is not None else CacheEntryOptions()
    return _set(cache, key, payload, entry_options, _token(cancellation))


def get_or_create(
    cache: ByteCache,
    key: str,
    type_: type[T],
    factory: ValueFactory[T],
    serialization_options: SerializationOptions | None = None,
    cancellation: CancellationToken | None = None,
) -> Coroutine[Any, Any, T]:
    """
    Return the cached value for ``key``, creating it with ``factory`` on a miss.

    On a miss the factory receives a fresh CacheEntryOptions it may adjust;
    its result is written under ``key`` with those options and returned.
    On a hit the factory is never called.

    Raises:
        InvalidArgumentError: If cache, key or factory is missing (raised
            immediately), or the factory produced None
        SerializationError: If a stored value does not decode into ``type_``
        CacheError: If a backend read or write fails
    """
    _require_cache(cache)
    _require_key(key)
    if factory is None:
        raise InvalidArgumentError("factory", "must not be None")
    if not callable(factory):
        raise InvalidArgumentError("factory", "must be callable")

    return _get_or_create(
        cache,
        key,
        type_,
        factory,
        serialization_options or DEFAULT_SERIALIZATION_OPTIONS,
        _token(cancellation),
    )


class TypedCache:
    """
    A ByteCache bound to default serialization options.

    Without explicit options the binding uses the configured ones
    (SERIALIZATION_BY_ALIAS, SERIALIZATION_EXCLUDE_NONE, SERIALIZATION_STRICT).
    Methods mirror the module-level helpers and take their arguments in the
    same order; per-call serialization options override the bound defaults.
    """

    def __init__(
        self,
        cache: ByteCache,
        serialization_options: SerializationOptions | None = None,
    ):
        _require_cache(cache)
        self.cache = cache
        self.serialization_options = (
            serialization_options if serialization_options is not None else get_config().serialization
        )

    def get(
        self,
        key: str,
        type_: type[T],
        serialization_options: SerializationOptions | None = None,
        cancellation: CancellationToken | None = None,
        default: T | None = None,
    ) -> Coroutine[Any, Any, T | None]:
        return get_value(
            self.cache,
            key,
            type_,
            serialization_options or self.serialization_options,
            cancellation,
            default,
        )

    def try_get(
        self,
        key: str,
        type_: type[T],
        serialization_options: SerializationOptions | None = None,
        cancellation: CancellationToken | None = None,
    ) -> Coroutine[Any, Any, CacheLookup[T]]:
        return try_get_value(
            self.cache,
            key,
            type_,
            serialization_options or self.serialization_options,
            cancellation,
        )

    def set(
        self,
        key: str,
        value: Any,
        options: CacheEntryOptions | None = None,
        serialization_options: SerializationOptions | None = None,
        cancellation: CancellationToken | None = None,
    ) -> Coroutine[Any, Any, None]:
        return set_value(
            self.cache,
            key,
            value,
            options,
            serialization_options or self.serialization_options,
            cancellation,
        )

    def get_or_create(
        self,
        key: str,
        type_: type[T],
        factory: ValueFactory[T],
        serialization_options: SerializationOptions | None = None,
        cancellation: CancellationToken | None = None,
    ) -> Coroutine[Any, Any, T]:
        return get_or_create(
            self.cache,
            key,
            type_,
            factory,
            serialization_options or self.serialization_options,
            cancellation,
        )

    def remove(self, key: str, cancellation: CancellationToken | None = None) -> Coroutine[Any, Any, None]:
        _require_key(key)
        return _token(cancellation).run(self.cache.remove(key))

    def refresh(self, key: str, cancellation: CancellationToken | None = None) -> Coroutine[Any, Any, None]:
        _require_key(key)
        return _token(cancellation).run(self.cache.refresh(key))
