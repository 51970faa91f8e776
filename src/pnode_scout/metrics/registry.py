"""
Metric registry using prometheus_client.

Provides pre-defined metrics for discovery passes, probes and the cache.
Exposes metrics in Prometheus text format via the /metrics endpoint.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Create a dedicated registry for scout metrics.
#
# Using a dedicated registry avoids pollution from default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Discovery
# -----------------------------------------------------------------------------

discovered_peers = Gauge(
    "pnode_discovered_peers",
    "Distinct peers found by the last discovery pass",
    registry=REGISTRY,
)

queried_addresses = Gauge(
    "pnode_queried_addresses",
    "Addresses asked for their known peers during the last discovery pass",
    registry=REGISTRY,
)

discovery_duration = Histogram(
    "pnode_discovery_seconds",
    "Discovery pass duration",
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Probing
# -----------------------------------------------------------------------------

reachable_peers = Gauge(
    "pnode_reachable_peers",
    "Peers that answered get_stats during the last pass",
    registry=REGISTRY,
)

probes_total = Counter(
    "pnode_probes_total",
    "Peer probes by outcome",
    ["outcome"],
    registry=REGISTRY,
)

probe_latency = Histogram(
    "pnode_probe_latency_seconds",
    "Latency of successful get_stats calls",
    buckets=(0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Aggregate
# -----------------------------------------------------------------------------

cache_lookups = Counter(
    "pnode_cache_lookups_total",
    "Aggregate cache lookups by result",
    ["result"],
    registry=REGISTRY,
)

fallbacks_total = Counter(
    "pnode_fallbacks_total",
    "Aggregate passes that served fallback data",
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)
