"""Tests for the peer prober."""

from __future__ import annotations

import asyncio
import itertools

import pytest

from pnode_scout.network import PeerAddress
from pnode_scout.network.geolocation import GeoLocation
from pnode_scout.network.probe import PeerProber, ProbeResult, check_health
from pnode_scout.network.prpc import PrpcClient
from tests.pnode_scout.helpers import MockNetwork, RecordingResolver, make_pod

ADDRESS = PeerAddress(host="10.0.0.1", port=6000)


def _prober(network: MockNetwork, **kwargs) -> PeerProber:  # type: ignore[no-untyped-def]
    client = PrpcClient(timeout_ms=100, transport=network.transport())
    return PeerProber(client=client, **kwargs)


class TestProbeResult:
    """Tests for the ProbeResult record."""

    def test_unreachable_result_rejects_latency(self) -> None:
        """Latency only exists for peers that answered."""
        with pytest.raises(ValueError, match="no latency"):
            ProbeResult(address=ADDRESS, reachable=False, latency_ms=10.0)

    def test_uptime_percent_is_share_of_a_day(self) -> None:
        """Half a day of uptime is 50 percent."""
        probe = ProbeResult(address=ADDRESS, reachable=True, latency_ms=1.0, uptime_seconds=43200)
        assert probe.uptime_percent == 50.0

    def test_uptime_percent_is_capped(self) -> None:
        """A week of uptime still reads as 100 percent."""
        probe = ProbeResult(
            address=ADDRESS, reachable=True, latency_ms=1.0, uptime_seconds=7 * 86400
        )
        assert probe.uptime_percent == 100.0

    def test_storage_percent_without_capacity_is_zero(self) -> None:
        """Unknown capacity does not divide by zero."""
        probe = ProbeResult(address=ADDRESS, reachable=True, latency_ms=1.0, used_bytes=10)
        assert probe.storage_percent == 0.0


class TestPeerProber:
    """Tests for probing peers."""

    @pytest.mark.asyncio
    async def test_healthy_peer_is_fully_measured(self) -> None:
        """All three reads land in the result."""
        network = MockNetwork()
        network.add(
            "10.0.0.1",
            pods=[make_pod("pk-b", "10.0.0.2"), make_pod("pk-c", "10.0.0.3")],
            stats={"uptime": 86400, "storage_utilized": 25, "storage_capacity": 100, "peer_count": 4},
            version="0.5.0-munich",
        )
        ticks = itertools.count(start=1.0, step=0.25)

        probe = await _prober(network, clock=lambda: next(ticks)).probe(ADDRESS)

        assert probe.reachable
        assert probe.latency_ms == 250.0
        assert probe.capacity_bytes == 100
        assert probe.used_bytes == 25
        assert probe.storage_percent == 25.0
        assert probe.peer_count == 4
        assert probe.uptime_percent == 100.0
        assert probe.version == "0.5.0-munich"
        assert probe.known_peer_count == 2

    @pytest.mark.asyncio
    async def test_unreachable_peer_is_a_result_not_an_error(self) -> None:
        """A dead peer yields reachable=False with no latency."""
        network = MockNetwork()
        network.add("10.0.0.1", down=True)

        probe = await _prober(network).probe(ADDRESS)

        assert not probe.reachable
        assert probe.latency_ms is None
        assert probe.version is None
        assert probe.known_peer_count is None

    @pytest.mark.asyncio
    async def test_liveness_follows_get_stats_only(self) -> None:
        """A peer answering get_version but not get_stats is unreachable."""
        network = MockNetwork()
        network.add("10.0.0.1", stats=None, version="0.5.0")

        probe = await _prober(network).probe(ADDRESS)

        assert not probe.reachable
        assert probe.version == "0.5.0"

    @pytest.mark.asyncio
    async def test_reads_run_concurrently(self) -> None:
        """Three slow reads take about as long as one."""
        network = MockNetwork()
        network.add("10.0.0.1", delay=0.2)
        prober = PeerProber(client=PrpcClient(timeout_ms=2000, transport=network.transport()))

        loop = asyncio.get_running_loop()
        started = loop.time()
        probe = await prober.probe(ADDRESS)

        assert probe.reachable
        assert probe.version == "0.5.0"
        assert loop.time() - started < 0.5

    @pytest.mark.asyncio
    async def test_protocol_errors_are_not_retried(self) -> None:
        """Retries only cover failures a second attempt could fix."""
        network = MockNetwork()
        network.add("10.0.0.1", stats=None)

        await _prober(network, retries=2).probe(ADDRESS)

        assert len(network.calls_to("get_stats")) == 1

    @pytest.mark.asyncio
    async def test_unreachable_peers_are_retried(self) -> None:
        """Connection failures get the configured extra attempts."""
        network = MockNetwork()
        network.add("10.0.0.1", down=True)

        await _prober(network, retries=2).probe(ADDRESS)

        assert len(network.calls_to("get_stats")) == 3

    @pytest.mark.asyncio
    async def test_location_comes_from_resolver(self) -> None:
        """The resolver decorates the result with the host's location."""
        network = MockNetwork()
        network.add("10.0.0.1")
        location = GeoLocation(
            country="Germany", country_code="DE", city="Munich", latitude=48.1, longitude=11.6
        )
        resolver = RecordingResolver(location=location)

        probe = await _prober(network, resolver=resolver).probe(ADDRESS)

        assert probe.location == location
        assert resolver.lookups == ["10.0.0.1"]


class TestCheckHealth:
    """Tests for the single-call health check."""

    @pytest.mark.asyncio
    async def test_answering_peer_is_healthy(self) -> None:
        """A get_version answer is healthy, with latency and version."""
        network = MockNetwork()
        network.add("10.0.0.1", version="0.5.0")

        health = await check_health(PrpcClient(transport=network.transport()), ADDRESS)

        assert health.healthy
        assert health.version == "0.5.0"
        assert health.latency_ms is not None and health.latency_ms >= 0

    @pytest.mark.asyncio
    async def test_silent_peer_is_unhealthy(self) -> None:
        """A refused connection is unhealthy with an error message."""
        network = MockNetwork()

        health = await check_health(PrpcClient(transport=network.transport()), ADDRESS)

        assert not health.healthy
        assert health.latency_ms is None
        assert health.error
