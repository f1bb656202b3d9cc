"""
Typed Cache - Cache Backends

Exports available byte cache backend implementations.

Redis backend is lazy-loaded via factory.py to avoid import overhead.
"""

from .memory import MemoryByteCache

__all__ = [
    "MemoryByteCache",
]
