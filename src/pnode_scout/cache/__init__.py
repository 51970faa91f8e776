"""Short-lived memoization of aggregate results."""

from .ttl import CacheEntry, CacheKey, TtlCache

__all__ = [
    "CacheEntry",
    "CacheKey",
    "TtlCache",
]
