"""Caching primitives: the LRU/TTL cache and the request coalescer."""

from .coalescer import RequestCoalescer
from .ttl_cache import DEFAULT_MAX_SIZE, DEFAULT_TTL_SECONDS, CacheEntry, KeyedTtlCache

__all__ = [
    "CacheEntry",
    "DEFAULT_MAX_SIZE",
    "DEFAULT_TTL_SECONDS",
    "KeyedTtlCache",
    "RequestCoalescer",
]
