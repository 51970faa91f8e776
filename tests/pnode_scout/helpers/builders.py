"""Factories for test data."""

from __future__ import annotations

from typing import Any

from pnode_scout.network import PeerAddress, PeerAnnouncement, PeerIdentity
from pnode_scout.network.probe import ProbeResult
from pnode_scout.scoring import ReliabilityRecord, build_record

LATEST = "0.5.0"
"""Latest version used across the tests."""


def make_pod(
    pubkey: str,
    host: str,
    port: int | None = 6000,
    last_seen: float = 1_700_000_000.0,
    version: str = LATEST,
) -> dict[str, Any]:
    """Build one get_pods entry as it appears on the wire."""
    pod: dict[str, Any] = {
        "pubkey": pubkey,
        "ip_address": host,
        "last_seen": last_seen,
        "version": version,
    }
    if port is not None:
        pod["port"] = port
    return pod


def make_announcement(
    pubkey: str = "pk-a",
    host: str = "10.0.0.1",
    port: int = 6000,
    last_seen: float = 1_700_000_000.0,
    version: str = LATEST,
) -> PeerAnnouncement:
    """Build a gossip announcement."""
    return PeerAnnouncement(
        identity=PeerIdentity(pubkey),
        address=PeerAddress(host=host, port=port),
        last_seen=last_seen,
        version=version,
    )


def make_probe(
    host: str = "10.0.0.1",
    reachable: bool = True,
    version: str | None = LATEST,
    **kwargs: Any,
) -> ProbeResult:
    """Build a probe result. Reachable probes get a 42ms latency unless given one."""
    if reachable:
        kwargs.setdefault("latency_ms", 42.0)
    return ProbeResult(
        address=PeerAddress(host=host, port=6000),
        reachable=reachable,
        version=version,
        **kwargs,
    )


def make_record(
    pubkey: str = "pk-a",
    reachable: bool = True,
    version: str = LATEST,
    mentions: int = 1,
    responders: int = 1,
    **probe_kwargs: Any,
) -> ReliabilityRecord:
    """Build a scored record through the real scoring path."""
    return build_record(
        make_announcement(pubkey=pubkey, version=version),
        make_probe(reachable=reachable, version=version, **probe_kwargs),
        mentions=mentions,
        responders=responders,
        latest_version=LATEST,
    )
