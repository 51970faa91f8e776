"""Tests for the TTL cache."""

from __future__ import annotations

import pytest

from pnode_scout.cache import CacheKey, TtlCache
from tests.conftest import FakeClock


class TestTtlCache:
    """Tests for expiry and invalidation."""

    def test_fresh_entry_is_returned(self, cache: TtlCache) -> None:
        """A value is readable until its TTL elapses."""
        cache.set(CacheKey.PNODES, ["a"], 30.0)

        assert cache.get(CacheKey.PNODES) == ["a"]
        assert CacheKey.PNODES in cache

    def test_entry_expires_at_ttl(self, cache: TtlCache, clock: FakeClock) -> None:
        """An entry is gone exactly when its TTL has elapsed."""
        cache.set(CacheKey.PNODES, "value", 30.0)

        clock.advance(29.0)
        assert cache.get(CacheKey.PNODES) == "value"

        clock.advance(1.0)
        assert cache.get(CacheKey.PNODES) is None
        assert len(cache) == 0

    def test_missing_key_is_none(self, cache: TtlCache) -> None:
        """Unknown keys miss."""
        assert cache.get("nothing") is None
        assert "nothing" not in cache

    def test_set_replaces_and_restarts_ttl(self, cache: TtlCache, clock: FakeClock) -> None:
        """Writing again swaps the value and the expiry together."""
        cache.set(CacheKey.PNODES, "old", 30.0)
        clock.advance(20.0)
        cache.set(CacheKey.PNODES, "new", 30.0)
        clock.advance(20.0)

        assert cache.get(CacheKey.PNODES) == "new"

    @pytest.mark.parametrize("ttl", [0.0, -5.0])
    def test_non_positive_ttl_is_rejected(self, cache: TtlCache, ttl: float) -> None:
        """A TTL must be positive."""
        with pytest.raises(ValueError, match="positive"):
            cache.set(CacheKey.PNODES, "value", ttl)

    def test_invalidate(self, cache: TtlCache) -> None:
        """Invalidation drops the key and reports whether it existed."""
        cache.set(CacheKey.NETWORK_STATS, 1, 30.0)

        assert cache.invalidate(CacheKey.NETWORK_STATS)
        assert not cache.invalidate(CacheKey.NETWORK_STATS)
        assert cache.get(CacheKey.NETWORK_STATS) is None

    def test_cleanup_removes_only_expired(self, cache: TtlCache, clock: FakeClock) -> None:
        """Bulk cleanup evicts expired entries and keeps live ones."""
        cache.set(CacheKey.PNODES, "short", 5.0)
        cache.set(CacheKey.NETWORK_STATS, "long", 60.0)
        clock.advance(10.0)

        assert cache.cleanup_expired() == 1
        assert len(cache) == 1
        assert cache.get(CacheKey.NETWORK_STATS) == "long"

    def test_defaults_to_monotonic_clock(self) -> None:
        """Without an injected clock, real time drives expiry."""
        cache = TtlCache()
        cache.set("k", "v", 60.0)

        assert cache.get("k") == "v"

    def test_one_second_ttl(self, cache: TtlCache, clock: FakeClock) -> None:
        """A one-second entry is readable at once and absent after a second."""
        cache.set("k", "v", 1)

        assert cache.get("k") == "v"
        clock.advance(1.0)
        assert cache.get("k") is None
