"""Network-wide summary computed by reduction over a record set."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from pnode_scout.scoring import ReliabilityRecord
from pnode_scout.types import StrictBaseModel


class NetworkStats(StrictBaseModel):
    """Counts, totals and averages over one set of records."""

    total_nodes: int
    active_nodes: int
    total_storage_capacity: int
    total_storage_used: int
    average_sri: int
    average_uptime: float
    average_latency: int
    latest_version: str
    nodes_on_latest_version: int
    last_updated: datetime


def _mean(values: Sequence[float]) -> float:
    """Arithmetic mean, zero for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def compute_network_stats(
    records: Sequence[ReliabilityRecord],
    latest_version: str,
    now: datetime | None = None,
) -> NetworkStats:
    """
    Reduce records to network stats.

    Empty inputs reduce to zeros. Latency is averaged over online peers only,
    since offline peers have none.
    """
    online = [r for r in records if r.status == "online"]
    latencies = [r.rpc_latency for r in online if r.rpc_latency is not None]

    return NetworkStats(
        total_nodes=len(records),
        active_nodes=len(online),
        total_storage_capacity=sum(r.storage_capacity for r in records),
        total_storage_used=sum(r.storage_used for r in records),
        average_sri=round(_mean([r.sri for r in records])),
        average_uptime=round(_mean([r.uptime_percent for r in records]), 1),
        average_latency=round(_mean(latencies)),
        latest_version=latest_version,
        nodes_on_latest_version=sum(1 for r in records if r.is_latest_version),
        last_updated=now or datetime.now(UTC),
    )
