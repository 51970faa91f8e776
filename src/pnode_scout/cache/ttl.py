"""
Time-to-live cache for aggregate results.

Memoization policy only: the cache never knows how to produce a value.
A miss tells the caller to recompute and `set` the fresh result.

Concurrency model:

- Each entry is an immutable (value, expires_at) tuple.
- `set` swaps a whole entry in under a lock; `get` reads without one.
- A reader therefore sees either the old entry or the new one, never a mix.

Expiry is lazy. Expired entries are dropped when read, or in bulk by
`cleanup_expired`.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import Any, NamedTuple


class CacheKey(str, Enum):
    """Logical resource names cached by the scout."""

    PNODES = "peer-list"
    """Sorted reliability records plus network stats."""

    NETWORK_STATS = "network-stats"
    """Network stats on their own."""


class CacheEntry(NamedTuple):
    """A cached value with its absolute expiry time."""

    value: Any
    expires_at: float


@dataclass(slots=True)
class TtlCache:
    """In-process TTL store keyed by resource name."""

    clock: Callable[[], float] = time.monotonic
    """Time source in seconds. Tests inject a controllable clock."""

    _entries: dict[str, CacheEntry] = field(default_factory=dict)
    """Key -> current entry."""

    _lock: Lock = field(default_factory=Lock)
    """Serializes writers. Readers never take it."""

    def get(self, key: str) -> Any | None:
        """Return the live value for a key, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._drop_if_same(key, entry)
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """
        Store a value for `ttl_seconds`.

        Raises:
            ValueError: If the TTL is not positive.
        """
        if ttl_seconds <= 0:
            raise ValueError(f"TTL must be positive, got {ttl_seconds}")
        entry = CacheEntry(value=value, expires_at=self.clock() + ttl_seconds)
        with self._lock:
            self._entries[key] = entry

    def invalidate(self, key: str) -> bool:
        """Drop a key. Returns whether anything was dropped."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def _drop_if_same(self, key: str, entry: CacheEntry) -> None:
        # A writer may have replaced the entry since it was read.
        with self._lock:
            if self._entries.get(key) is entry:
                del self._entries[key]
