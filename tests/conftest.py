"""Pytest configuration and shared fixtures."""

import pytest
from hypothesis import settings

from pnode_scout.cache import TtlCache

# Create a profile named "no_deadline" with deadline disabled.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """A clock that only moves when told to."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TtlCache:
    """A TTL cache driven by the fake clock."""
    return TtlCache(clock=clock)
