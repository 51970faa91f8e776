"""
Best-effort IP geolocation.

Geolocation decorates a probe result, it never decides it. Every resolver
returns `GeoLocation | None` and never raises: a lookup that fails for any
reason (rate limit, network error, private address, malformed answer) is
simply absent from the result.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
from dataclasses import dataclass, field
from typing import Final, Protocol

import httpx
from pydantic import ValidationError

from pnode_scout.types import StrictBaseModel, WireModel

logger = logging.getLogger(__name__)

IP_API_URL: Final = "http://ip-api.com/json/{ip}"
"""Free ip-api.com endpoint. Limited to 45 requests per minute per caller."""

IP_API_FIELDS: Final = "status,country,countryCode,city,lat,lon,isp"
"""Fields requested from ip-api.com."""

DEFAULT_LOOKUP_TIMEOUT: Final = 3.0
"""Timeout for one lookup in seconds."""


class GeoLocation(StrictBaseModel):
    """Resolved location of an IP address."""

    country: str
    country_code: str
    city: str
    latitude: float
    longitude: float
    isp: str | None = None


class GeolocationResolver(Protocol):
    """Anything that can map an IP address to a location, or give up."""

    async def resolve(self, ip: str) -> GeoLocation | None:
        """Resolve an IP address. Must not raise."""
        ...


class _IpApiAnswer(WireModel):
    """Raw ip-api.com response."""

    status: str
    country: str = ""
    countryCode: str = ""
    city: str = ""
    lat: float = 0.0
    lon: float = 0.0
    isp: str | None = None


def is_public_ip(ip: str) -> bool:
    """Check whether an address is globally routable (and thus worth looking up)."""
    try:
        return ipaddress.ip_address(ip).is_global
    except ValueError:
        return False


class NullResolver:
    """Resolver that never resolves. Used when geolocation is disabled."""

    async def resolve(self, ip: str) -> GeoLocation | None:
        return None


@dataclass(slots=True)
class IpApiResolver:
    """Resolver backed by the ip-api.com JSON API."""

    timeout: float = DEFAULT_LOOKUP_TIMEOUT
    """Timeout for one lookup in seconds."""

    transport: httpx.AsyncBaseTransport | None = None
    """Optional httpx transport. Tests inject an in-memory one."""

    async def resolve(self, ip: str) -> GeoLocation | None:
        if not is_public_ip(ip):
            return None

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    IP_API_URL.format(ip=ip), params={"fields": IP_API_FIELDS}
                )
                response.raise_for_status()
            answer = _IpApiAnswer.model_validate_json(response.content)
        except (httpx.HTTPError, ValidationError) as e:
            logger.debug("Geolocation lookup failed for %s: %s", ip, e)
            return None

        if answer.status != "success":
            return None

        return GeoLocation(
            country=answer.country,
            country_code=answer.countryCode,
            city=answer.city,
            latitude=answer.lat,
            longitude=answer.lon,
            isp=answer.isp,
        )


@dataclass(slots=True)
class PassResolver:
    """
    Memoizing wrapper scoped to a single discovery pass.

    Guarantees at most one upstream lookup per distinct IP, including when
    several probes for peers sharing an IP run concurrently: later callers
    await the lookup already in flight instead of starting their own.
    """

    inner: GeolocationResolver
    """Resolver doing the actual lookups."""

    _lookups: dict[str, asyncio.Task[GeoLocation | None]] = field(default_factory=dict)
    """IP -> lookup task (pending or finished)."""

    async def resolve(self, ip: str) -> GeoLocation | None:
        task = self._lookups.get(ip)
        if task is None:
            task = asyncio.ensure_future(self._guarded(ip))
            self._lookups[ip] = task
        return await asyncio.shield(task)

    @property
    def lookups(self) -> int:
        """Number of distinct IPs looked up so far."""
        return len(self._lookups)

    async def _guarded(self, ip: str) -> GeoLocation | None:
        # Third-party resolvers may not honor the never-raise contract.
        try:
            return await self.inner.resolve(ip)
        except Exception as e:
            logger.debug("Geolocation resolver raised for %s: %s", ip, e)
            return None
