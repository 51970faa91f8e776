"""
Metrics module for observability.

Provides counters, gauges, and histograms for tracking discovery and probing.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    cache_lookups,
    discovered_peers,
    discovery_duration,
    fallbacks_total,
    generate_metrics,
    probe_latency,
    probes_total,
    queried_addresses,
    reachable_peers,
)

__all__ = [
    "REGISTRY",
    "cache_lookups",
    "discovered_peers",
    "discovery_duration",
    "fallbacks_total",
    "generate_metrics",
    "probe_latency",
    "probes_total",
    "queried_addresses",
    "reachable_peers",
]
