"""
Typed Cache - Byte Cache Interface

Defines the abstract byte-oriented store that the typed helpers wrap.
Backends own storage, expiration and eviction; callers only see bytes.
"""

from abc import ABC, abstractmethod
from typing import Any

from .options import CacheEntryOptions


class ByteCache(ABC):
    """
    Abstract base class for byte cache backends.

    All cache implementations must implement this interface so the typed
    layer behaves the same over any backend (memory, Redis, etc.).

    Failures (connectivity, timeouts, server errors) must be raised as
    CacheError subclasses, not swallowed: the typed layer propagates them
    to its callers unchanged.
    """

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """
        Retrieve the bytes stored under a key.

        Reading an entry with a sliding expiration renews its window.

        Args:
            key: Cache key

        Returns:
            Stored bytes if present and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: bytes, options: CacheEntryOptions) -> None:
        """
        Create or overwrite an entry.

        Args:
            key: Cache key
            value: Bytes to store
            options: Expiration policy for the entry
        """
        pass

    @abstractmethod
    async def refresh(self, key: str) -> None:
        """
        Renew the sliding expiration of an entry without reading it.

        Does nothing if the key is missing or has no sliding window.
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Remove an entry. Removing a missing key is not an error.
        """
        pass

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics (hits, misses, size, etc.)
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Close the cache backend and release resources.

        Should be called during graceful shutdown.
        """
        pass
