"""Tests for best-effort IP geolocation."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from pnode_scout.network.geolocation import (
    GeoLocation,
    IpApiResolver,
    NullResolver,
    PassResolver,
    is_public_ip,
)
from tests.pnode_scout.helpers import RecordingResolver

MUNICH = GeoLocation(
    country="Germany", country_code="DE", city="Munich", latitude=48.1, longitude=11.6
)


def _ip_api(handler) -> IpApiResolver:  # type: ignore[no-untyped-def]
    return IpApiResolver(transport=httpx.MockTransport(handler))


class TestIsPublicIp:
    """Tests for the lookup filter."""

    @pytest.mark.parametrize("ip", ["173.212.220.65", "8.8.8.8"])
    def test_global_addresses_are_public(self, ip: str) -> None:
        """Routable addresses are worth looking up."""
        assert is_public_ip(ip)

    @pytest.mark.parametrize("ip", ["10.0.0.1", "192.168.1.1", "127.0.0.1", "not-an-ip"])
    def test_private_and_invalid_addresses_are_not(self, ip: str) -> None:
        """Private, loopback and garbage addresses are skipped."""
        assert not is_public_ip(ip)


class TestIpApiResolver:
    """Tests for the ip-api.com adapter."""

    @pytest.mark.asyncio
    async def test_successful_lookup(self) -> None:
        """A success answer maps onto GeoLocation."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "status": "success",
                    "country": "Germany",
                    "countryCode": "DE",
                    "city": "Munich",
                    "lat": 48.1,
                    "lon": 11.6,
                    "isp": "Contabo",
                },
            )

        location = await _ip_api(handler).resolve("173.212.220.65")

        assert location == MUNICH.model_copy(update={"isp": "Contabo"})
        assert requests[0].url.host == "ip-api.com"
        assert requests[0].url.path == "/json/173.212.220.65"

    @pytest.mark.asyncio
    async def test_private_address_is_not_looked_up(self) -> None:
        """No request leaves for a private address."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("unexpected lookup")

        assert await _ip_api(handler).resolve("10.0.0.1") is None

    @pytest.mark.asyncio
    async def test_failed_status_is_none(self) -> None:
        """ip-api reports reserved ranges and bad queries with status fail."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "fail", "message": "reserved range"})

        assert await _ip_api(handler).resolve("8.8.8.8") is None

    @pytest.mark.asyncio
    async def test_rate_limit_is_none(self) -> None:
        """HTTP errors are swallowed into an absent location."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429)

        assert await _ip_api(handler).resolve("8.8.8.8") is None

    @pytest.mark.asyncio
    async def test_connection_failure_is_none(self) -> None:
        """Network errors are swallowed into an absent location."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        assert await _ip_api(handler).resolve("8.8.8.8") is None


class TestPassResolver:
    """Tests for per-pass lookup deduplication."""

    @pytest.mark.asyncio
    async def test_concurrent_lookups_for_one_ip_share_a_request(self) -> None:
        """Peers behind one IP trigger a single upstream lookup."""
        inner = RecordingResolver(location=MUNICH, delay=0.02)
        resolver = PassResolver(inner)

        results = await asyncio.gather(*(resolver.resolve("8.8.8.8") for _ in range(5)))

        assert results == [MUNICH] * 5
        assert inner.lookups == ["8.8.8.8"]
        assert resolver.lookups == 1

    @pytest.mark.asyncio
    async def test_distinct_ips_are_looked_up_separately(self) -> None:
        """Each distinct IP gets its own lookup."""
        inner = RecordingResolver(location=MUNICH)
        resolver = PassResolver(inner)

        await resolver.resolve("8.8.8.8")
        await resolver.resolve("1.1.1.1")
        await resolver.resolve("8.8.8.8")

        assert inner.lookups == ["8.8.8.8", "1.1.1.1"]

    @pytest.mark.asyncio
    async def test_raising_resolver_yields_none(self) -> None:
        """A misbehaving inner resolver cannot fail the probe."""
        resolver = PassResolver(RecordingResolver(fail=True))

        assert await resolver.resolve("8.8.8.8") is None

    @pytest.mark.asyncio
    async def test_null_resolver_never_resolves(self) -> None:
        """The disabled resolver always answers None."""
        assert await NullResolver().resolve("8.8.8.8") is None
