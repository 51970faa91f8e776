"""
Aggregate pass: discovery, probing and scoring behind a TTL cache.

Pass Flow:
1. Walk the network from the configured seeds
2. Probe every discovered peer, batch_size probes at a time
3. Score each peer and sort the records
4. Reduce the records to network stats
5. Cache the snapshot for the configured TTL

A pass never raises. When live data is unavailable it returns the fallback
data set with source FALLBACK and a soft error message, so the consuming
layer can degrade gracefully instead of failing the request.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

import httpx

from pnode_scout.cache import CacheKey, TtlCache
from pnode_scout.config import ScoutConfig
from pnode_scout.metrics import cache_lookups, fallbacks_total, reachable_peers
from pnode_scout.network.discovery import DiscoveryResult, DiscoveryStatus, NetworkDiscoverer
from pnode_scout.network.geolocation import (
    GeolocationResolver,
    IpApiResolver,
    NullResolver,
    PassResolver,
)
from pnode_scout.network.probe import PeerProber
from pnode_scout.network.prpc import PrpcClient
from pnode_scout.scoring import ReliabilityRecord, build_record, sort_records
from pnode_scout.types import StrictBaseModel

from .fallback import FallbackSource, SampleDataSource
from .stats import NetworkStats, compute_network_stats

logger = logging.getLogger(__name__)


class DataSource(Enum):
    """Where a snapshot's records came from."""

    LIVE = "live"
    FALLBACK = "fallback"


class NetworkSnapshot(StrictBaseModel):
    """Sorted records and their stats, as produced by one pass."""

    nodes: tuple[ReliabilityRecord, ...]
    stats: NetworkStats
    source: DataSource
    discovery_status: DiscoveryStatus | None = None
    truncated: bool = False
    error: str | None = None

    @property
    def is_live(self) -> bool:
        """Whether the records describe the live network."""
        return self.source is DataSource.LIVE


@dataclass(slots=True)
class AggregateService:
    """Produces network snapshots, memoized behind a TTL cache."""

    config: ScoutConfig
    """Runtime configuration."""

    cache: TtlCache
    """Cache shared with whoever else reads snapshots."""

    client: PrpcClient
    """pRPC transport."""

    resolver: GeolocationResolver = field(default_factory=NullResolver)
    """Geolocation capability, wrapped per pass to dedupe lookups."""

    fallback: FallbackSource | None = None
    """Data served when live data is unavailable. Defaults to sample data."""

    _refresh_lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)
    """Serializes passes so concurrent cache misses trigger a single walk."""

    def __post_init__(self) -> None:
        if self.fallback is None:
            self.fallback = SampleDataSource(latest_version=self.config.latest_version)

    @classmethod
    def from_config(
        cls,
        config: ScoutConfig,
        cache: TtlCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> AggregateService:
        """Wire a service with the default transport and resolver."""
        resolver: GeolocationResolver = (
            IpApiResolver(transport=transport) if config.geolocation else NullResolver()
        )
        return cls(
            config=config,
            cache=cache if cache is not None else TtlCache(),
            client=PrpcClient(timeout_ms=config.timeout_ms, transport=transport),
            resolver=resolver,
        )

    async def get_snapshot(self) -> NetworkSnapshot:
        """Return the cached snapshot, running a fresh pass on a miss."""
        cached = self.cache.get(CacheKey.PNODES)
        if cached is not None:
            cache_lookups.labels(result="hit").inc()
            return cached

        async with self._refresh_lock:
            # Another waiter may have refreshed while we queued for the lock.
            cached = self.cache.get(CacheKey.PNODES)
            if cached is not None:
                cache_lookups.labels(result="hit").inc()
                return cached

            cache_lookups.labels(result="miss").inc()
            snapshot = await self.compute_snapshot()
            self.cache.set(CacheKey.PNODES, snapshot, self.config.cache_ttl_secs)
            self.cache.set(CacheKey.NETWORK_STATS, snapshot.stats, self.config.cache_ttl_secs)
            return snapshot

    async def get_stats(self) -> NetworkStats:
        """Return cached network stats, running a fresh pass on a miss."""
        cached = self.cache.get(CacheKey.NETWORK_STATS)
        if cached is not None:
            cache_lookups.labels(result="hit").inc()
            return cached
        return (await self.get_snapshot()).stats

    async def refresh(self) -> NetworkSnapshot:
        """Drop cached results and run a fresh pass."""
        self.cache.invalidate(CacheKey.PNODES)
        self.cache.invalidate(CacheKey.NETWORK_STATS)
        return await self.get_snapshot()

    async def compute_snapshot(self) -> NetworkSnapshot:
        """Run one uncached pass. Never raises."""
        if self.config.use_mock_data:
            return self._fallback_snapshot(None, None)

        try:
            discoverer = NetworkDiscoverer(self.client, self.config.discovery_config())
            discovery = await discoverer.discover(self.config.seed_addresses)

            if discovery.is_empty:
                logger.warning(
                    "No pNodes discovered from network (%s), falling back to sample data",
                    discovery.status.value,
                )
                return self._fallback_snapshot(
                    f"No live peers discovered: {discovery.status.value}", discovery.status
                )

            records = await self.hydrate(discovery)

        except Exception as e:
            logger.exception("Aggregate pass failed")
            return self._fallback_snapshot(f"Using fallback data due to network error: {e}", None)

        return NetworkSnapshot(
            nodes=tuple(records),
            stats=compute_network_stats(records, self.config.latest_version),
            source=DataSource.LIVE,
            discovery_status=discovery.status,
            truncated=discovery.truncated,
        )

    async def hydrate(self, discovery: DiscoveryResult) -> list[ReliabilityRecord]:
        """
        Probe and score every discovered peer.

        At most batch_size probes run at once. Each probe issues its own
        concurrent reads, so in-flight calls stay bounded by a small multiple
        of the batch size.
        """
        resolver = PassResolver(self.resolver) if self.config.geolocation else NullResolver()
        prober = PeerProber(
            client=self.client,
            resolver=resolver,
            retries=self.config.probe_retries,
        )
        semaphore = asyncio.Semaphore(self.config.batch_size)

        async def score_peer(identity: str) -> ReliabilityRecord:
            announcement = discovery.peers[identity]
            async with semaphore:
                probe = await prober.probe(announcement.address)
            return build_record(
                announcement,
                probe,
                mentions=discovery.mentions.get(announcement.identity, 0),
                responders=discovery.responders,
                latest_version=self.config.latest_version,
                default_visibility=self.config.default_visibility,
            )

        records = await asyncio.gather(*(score_peer(identity) for identity in discovery.peers))

        reachable_peers.set(sum(1 for r in records if r.status == "online"))
        return sort_records(records)

    def _fallback_snapshot(
        self, error: str | None, status: DiscoveryStatus | None
    ) -> NetworkSnapshot:
        assert self.fallback is not None
        fallbacks_total.inc()
        records = self.fallback.records()
        return NetworkSnapshot(
            nodes=tuple(records),
            stats=compute_network_stats(records, self.config.latest_version),
            source=DataSource.FALLBACK,
            discovery_status=status,
            error=error,
        )
