"""
Aggregate layer.

Runs full discovery and scoring passes, memoizes them, and falls back to
sample data when the live network is unavailable.
"""

from .fallback import SAMPLE_NODE_COUNT, FallbackSource, SampleDataSource
from .service import AggregateService, DataSource, NetworkSnapshot
from .stats import NetworkStats, compute_network_stats

__all__ = [
    "SAMPLE_NODE_COUNT",
    "AggregateService",
    "DataSource",
    "FallbackSource",
    "NetworkSnapshot",
    "NetworkStats",
    "SampleDataSource",
    "compute_network_stats",
]
