"""
Gossip network crawler.

Enumerates every peer reachable from a set of seed addresses.

Traversal Algorithm:
1. Query every seed for its known pods (depth 0)
2. Record each identity not seen in an earlier round
3. Enqueue the addresses of newly seen identities for the next depth
4. Repeat until the frontier is empty or the depth limit is reached

Two sets keep the walk finite:

- visited, keyed by address: never ask the same socket twice
- discovered, keyed by identity: never record the same peer twice

Each depth level is one round. Answers of a round are merged in frontier
order once the round completes, so the outcome depends on what peers answer,
never on how fast they answer or on the batch size.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from pnode_scout.metrics import discovered_peers, discovery_duration, queried_addresses

from ..prpc import PodInfo, PrpcClient, TransportError
from ..types import PeerAddress, PeerAnnouncement, PeerIdentity
from .config import DiscoveryConfig

logger = logging.getLogger(__name__)


class DiscoveryStatus(Enum):
    """Liveness of the network as observed by one traversal."""

    LIVE = "live"
    """At least one address answered and at least one peer was found."""

    NO_REACHABLE_SEEDS = "no_reachable_seeds"
    """No address answered at all. Live data is unavailable."""

    NO_PEERS_REPORTED = "no_peers_reported"
    """Addresses answered, but none reported any peer."""


@dataclass(slots=True)
class DiscoveryResult:
    """Outcome of one traversal."""

    peers: dict[PeerIdentity, PeerAnnouncement] = field(default_factory=dict)
    """Discovered peers, one announcement per identity."""

    mentions: dict[PeerIdentity, int] = field(default_factory=dict)
    """Identity -> number of answering addresses that listed it."""

    depths: dict[PeerIdentity, int] = field(default_factory=dict)
    """Identity -> depth of the address that introduced it."""

    queried: int = 0
    """Addresses asked for their known pods."""

    responders: int = 0
    """Addresses that answered."""

    truncated: bool = False
    """Whether the traversal deadline cut the walk short."""

    def __len__(self) -> int:
        return len(self.peers)

    def __contains__(self, identity: object) -> bool:
        return identity in self.peers

    @property
    def status(self) -> DiscoveryStatus:
        """Distinguish "network unavailable" from "network empty"."""
        if self.responders == 0:
            return DiscoveryStatus.NO_REACHABLE_SEEDS
        if not self.peers:
            return DiscoveryStatus.NO_PEERS_REPORTED
        return DiscoveryStatus.LIVE

    @property
    def is_empty(self) -> bool:
        """Nothing usable was discovered. Callers should fall back to another source."""
        return not self.peers

    def merge_round(
        self,
        answers: list[list[PeerAnnouncement] | None],
        depth: int,
    ) -> list[PeerIdentity]:
        """
        Fold the answers of one round into the result.

        Identities seen in an earlier round keep their record. An identity
        first seen in this round takes the announcement with the highest
        last_seen; ties keep the one from the earlier frontier address.

        Args:
            answers: Per frontier address, in frontier order. None means no answer.
            depth: Depth at which the frontier was queried.

        Returns:
            Identities first seen in this round, in first-seen order.
        """
        fresh: dict[PeerIdentity, PeerAnnouncement] = {}

        for answer in answers:
            if answer is None:
                continue
            self.responders += 1

            listed: set[PeerIdentity] = set()
            for announcement in answer:
                identity = announcement.identity
                if identity not in listed:
                    listed.add(identity)
                    self.mentions[identity] = self.mentions.get(identity, 0) + 1

                if identity in self.peers:
                    continue
                current = fresh.get(identity)
                if current is None or announcement.last_seen > current.last_seen:
                    fresh[identity] = announcement

        for identity, announcement in fresh.items():
            self.peers[identity] = announcement
            self.depths[identity] = depth

        return list(fresh)


@dataclass(slots=True)
class NetworkDiscoverer:
    """Breadth-first crawler over the pNode gossip graph."""

    client: PrpcClient
    """Transport used for get_pods calls."""

    config: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    """Traversal limits."""

    async def discover(
        self,
        seeds: Iterable[PeerAddress],
        max_depth: int | None = None,
    ) -> DiscoveryResult:
        """
        Walk the network from the given seeds.

        Unresponsive addresses are skipped, never raised. An empty result
        with status NO_REACHABLE_SEEDS means no live data was available.

        Args:
            seeds: Entry addresses, queried at depth 0.
            max_depth: Deepest level to query. Defaults to the configured depth.
                With 0, only the seeds are queried.

        Returns:
            The discovered peers together with traversal bookkeeping.
        """
        depth_limit = self.config.max_depth if max_depth is None else max_depth
        if depth_limit < 0:
            raise ValueError(f"max_depth must be non-negative, got {depth_limit}")

        result = DiscoveryResult()
        started = time.monotonic()

        try:
            async with asyncio.timeout(self.config.deadline_secs):
                await self._traverse(result, list(dict.fromkeys(seeds)), depth_limit)
        except TimeoutError:
            result.truncated = True
            logger.warning(
                "Discovery deadline of %.1fs reached; returning %d peers found so far",
                self.config.deadline_secs,
                len(result.peers),
            )

        elapsed = time.monotonic() - started
        discovery_duration.observe(elapsed)
        discovered_peers.set(len(result.peers))
        queried_addresses.set(result.queried)

        logger.info(
            "Discovered %d peers from %d/%d answering addresses in %.2fs (%s)",
            len(result.peers),
            result.responders,
            result.queried,
            elapsed,
            result.status.value,
        )
        return result

    async def _traverse(
        self,
        result: DiscoveryResult,
        frontier: list[PeerAddress],
        depth_limit: int,
    ) -> None:
        visited: set[PeerAddress] = set()
        depth = 0

        while frontier:
            visited.update(frontier)
            result.queried += len(frontier)

            # Answers land in frontier slots as they arrive.
            #
            # If the deadline cancels the round midway, the answers that did
            # arrive are still merged before the cancellation propagates.
            answers: list[list[PeerAnnouncement] | None] = [None] * len(frontier)
            try:
                await self._query_round(frontier, answers)
            finally:
                fresh = result.merge_round(answers, depth)

            logger.debug(
                "Depth %d: queried %d addresses, %d new peers", depth, len(frontier), len(fresh)
            )

            if depth >= depth_limit:
                break

            next_frontier: dict[PeerAddress, None] = {}
            for identity in fresh:
                address = result.peers[identity].address
                if address not in visited:
                    next_frontier[address] = None

            frontier = list(next_frontier)
            depth += 1

    async def _query_round(
        self,
        frontier: list[PeerAddress],
        answers: list[list[PeerAnnouncement] | None],
    ) -> None:
        """Ask every frontier address for its pods, batch_size calls at a time."""
        semaphore = asyncio.Semaphore(self.config.batch_size)

        async def ask(index: int, address: PeerAddress) -> None:
            async with semaphore:
                answers[index] = await self._known_pods(address)

        await asyncio.gather(*(ask(i, address) for i, address in enumerate(frontier)))

    async def _known_pods(self, address: PeerAddress) -> list[PeerAnnouncement] | None:
        """Fetch and convert one get_pods answer. None if the address did not answer."""
        try:
            result = await self.client.get_pods(address, timeout_ms=self.config.timeout_ms)
        except TransportError as e:
            logger.debug("Failed to get pods from %s: %s", address, e)
            return None

        announcements = []
        for pod in result.pods:
            announcement = self._to_announcement(pod)
            if announcement is not None:
                announcements.append(announcement)
        return announcements

    def _to_announcement(self, pod: PodInfo) -> PeerAnnouncement | None:
        try:
            address = PeerAddress(host=pod.ip_address, port=pod.port or self.config.default_port)
        except ValueError as e:
            logger.debug("Ignoring pod %s with unusable address: %s", pod.pubkey, e)
            return None
        return PeerAnnouncement(
            identity=PeerIdentity(pod.pubkey),
            address=address,
            last_seen=pod.last_seen,
            version=pod.version,
        )
