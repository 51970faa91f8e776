"""
Peer prober.

Measures one peer with three independent pRPC reads, issued concurrently:

- get_pods: how many peers this node knows (gossip health)
- get_stats: capacity, usage, uptime; also the liveness and latency signal
- get_version: software version for the compliance check

Liveness is defined by get_stats alone. A node that answers get_version but
fails get_stats cannot report capacity, so it is not usable storage.

Transport failures stop here. Callers always receive a ProbeResult, never a
TransportError.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from pnode_scout.metrics import probe_latency, probes_total

from ..geolocation import GeoLocation, GeolocationResolver, NullResolver
from ..prpc import NodeStats, PrpcClient, TransportError
from ..types import PeerAddress

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
"""Uptime is reported as a percentage of one day."""


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """
    One measurement of one peer.

    Never mutated. A later probe produces a new result that supersedes this one.
    """

    address: PeerAddress
    """Address that was probed."""

    reachable: bool
    """Whether get_stats succeeded."""

    latency_ms: float | None = None
    """Wall-clock duration of the successful get_stats call. None when unreachable."""

    capacity_bytes: int = 0
    """Advertised storage capacity."""

    used_bytes: int = 0
    """Storage in use."""

    peer_count: int = 0
    """Peer count reported by get_stats."""

    uptime_seconds: int = 0
    """Process uptime reported by get_stats."""

    version: str | None = None
    """Version reported by get_version, if that call succeeded."""

    known_peer_count: int | None = None
    """Number of pods reported by get_pods, if that call succeeded."""

    location: GeoLocation | None = None
    """Best-effort location of the peer's IP."""

    def __post_init__(self) -> None:
        if not self.reachable and self.latency_ms is not None:
            raise ValueError("Unreachable probe results carry no latency")

    @property
    def uptime_percent(self) -> float:
        """Uptime as a share of the last 24 hours, capped at 100."""
        if not self.reachable:
            return 0.0
        return min(100.0, self.uptime_seconds / SECONDS_PER_DAY * 100)

    @property
    def storage_percent(self) -> float:
        """Used share of capacity. Zero when capacity is unknown."""
        if self.capacity_bytes <= 0:
            return 0.0
        return self.used_bytes / self.capacity_bytes * 100


@dataclass(slots=True)
class PeerProber:
    """Probes peers through a pRPC client."""

    client: PrpcClient
    """Transport used for all three reads."""

    resolver: GeolocationResolver = field(default_factory=NullResolver)
    """Geolocation capability. Scope it to one pass to dedupe lookups per IP."""

    retries: int = 0
    """Extra get_stats attempts after a timeout or connection failure."""

    clock: Callable[[], float] = time.perf_counter
    """Monotonic clock used for latency measurement, in seconds."""

    async def probe(self, address: PeerAddress) -> ProbeResult:
        """
        Probe one peer.

        Args:
            address: Peer to measure.

        Returns:
            A ProbeResult. Unreachable peers yield reachable=False, never an error.
        """
        (stats, latency_ms), version, known_peers, location = await asyncio.gather(
            self._stats(address),
            self._version(address),
            self._known_peers(address),
            self.resolver.resolve(address.host),
        )

        if stats is None:
            probes_total.labels(outcome="unreachable").inc()
            return ProbeResult(
                address=address,
                reachable=False,
                version=version,
                known_peer_count=known_peers,
                location=location,
            )

        probes_total.labels(outcome="reachable").inc()
        return ProbeResult(
            address=address,
            reachable=True,
            latency_ms=latency_ms,
            capacity_bytes=stats.capacity_bytes,
            used_bytes=stats.storage_utilized,
            peer_count=stats.peer_count,
            uptime_seconds=stats.uptime,
            version=version,
            known_peer_count=known_peers,
            location=location,
        )

    async def _stats(self, address: PeerAddress) -> tuple[NodeStats | None, float | None]:
        """Fetch stats with the configured retry budget, timing the successful attempt."""
        for attempt in range(self.retries + 1):
            start = self.clock()
            try:
                stats = await self.client.get_stats(address)
            except TransportError as e:
                if e.is_retryable and attempt < self.retries:
                    logger.debug("Retrying get_stats on %s after %s", address, e.kind.value)
                    continue
                logger.debug("Failed to get stats from %s: %s", address, e)
                return None, None

            elapsed = self.clock() - start
            probe_latency.observe(elapsed)
            return stats, elapsed * 1000

        return None, None

    async def _version(self, address: PeerAddress) -> str | None:
        try:
            return await self.client.get_version(address)
        except TransportError as e:
            logger.debug("Failed to get version from %s: %s", address, e)
            return None

    async def _known_peers(self, address: PeerAddress) -> int | None:
        try:
            result = await self.client.get_pods(address)
        except TransportError as e:
            logger.debug("Failed to get pods from %s: %s", address, e)
            return None
        return max(result.total_count, len(result.pods))
