"""Single-call reachability check, used by the port checker."""

from __future__ import annotations

import time
from dataclasses import dataclass

from ..prpc import PrpcClient, TransportError
from ..types import PeerAddress


@dataclass(frozen=True, slots=True)
class HealthCheck:
    """Outcome of one get_version round trip."""

    healthy: bool
    """Whether the peer answered."""

    latency_ms: float | None = None
    """Round-trip time. None when the peer did not answer."""

    version: str | None = None
    """Reported version, when the peer answered."""

    error: str | None = None
    """Failure description, when it did not."""


async def check_health(client: PrpcClient, address: PeerAddress) -> HealthCheck:
    """Time one get_version call against a peer."""
    start = time.perf_counter()
    try:
        version = await client.get_version(address)
    except TransportError as e:
        return HealthCheck(healthy=False, error=e.message)
    return HealthCheck(
        healthy=True,
        latency_ms=(time.perf_counter() - start) * 1000,
        version=version,
    )
