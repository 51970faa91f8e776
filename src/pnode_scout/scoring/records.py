"""
Reliability records.

A record is the display-ready union of what gossip said about a peer, what
the probe measured, and the resulting scores. Records are built once per
pass and never updated in place.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Literal

from pnode_scout.network import PeerAnnouncement
from pnode_scout.network.probe import ProbeResult, is_compliant
from pnode_scout.types import StrictBaseModel

from .sri import (
    DEFAULT_VISIBILITY,
    availability_score,
    compliance_score,
    score,
    visibility_score,
)

PeerStatus = Literal["online", "offline"]


class ReliabilityRecord(StrictBaseModel):
    """Scored snapshot of one peer."""

    pubkey: str
    ip_address: str
    port: int

    status: PeerStatus
    last_seen: datetime
    version: str
    is_latest_version: bool

    uptime: int
    uptime_percent: float
    rpc_latency: float | None
    peer_count: int

    storage_used: int
    storage_capacity: int
    storage_percent: float

    geo_country: str | None = None
    geo_city: str | None = None
    geo_latitude: float | None = None
    geo_longitude: float | None = None

    availability: int
    visibility: int
    compliance: int
    sri: int


def build_record(
    announcement: PeerAnnouncement,
    probe: ProbeResult,
    *,
    mentions: int,
    responders: int,
    latest_version: str,
    default_visibility: int = DEFAULT_VISIBILITY,
) -> ReliabilityRecord:
    """
    Score one peer.

    The version the peer reports itself wins over the one gossip carried.

    Args:
        announcement: Gossip record of the peer.
        probe: Fresh probe of the peer.
        mentions: Answering addresses that listed the peer.
        responders: Addresses that answered during discovery.
        latest_version: Current release used for compliance.
        default_visibility: Visibility when it cannot be computed.
    """
    version = probe.version or announcement.version

    availability = availability_score(probe)
    visibility = visibility_score(mentions, responders, default_visibility)
    compliance = compliance_score(probe, version, latest_version)
    location = probe.location

    return ReliabilityRecord(
        pubkey=announcement.identity,
        ip_address=announcement.address.host,
        port=announcement.address.port,
        status="online" if probe.reachable else "offline",
        last_seen=datetime.fromtimestamp(announcement.last_seen, tz=UTC),
        version=version,
        is_latest_version=is_compliant(version, latest_version),
        uptime=probe.uptime_seconds,
        uptime_percent=probe.uptime_percent,
        rpc_latency=probe.latency_ms,
        peer_count=probe.peer_count,
        storage_used=probe.used_bytes,
        storage_capacity=probe.capacity_bytes,
        storage_percent=probe.storage_percent,
        geo_country=location.country if location else None,
        geo_city=location.city if location else None,
        geo_latitude=location.latitude if location else None,
        geo_longitude=location.longitude if location else None,
        availability=availability,
        visibility=visibility,
        compliance=compliance,
        sri=score(availability, visibility, compliance),
    )


def sort_records(records: Iterable[ReliabilityRecord]) -> list[ReliabilityRecord]:
    """Order by SRI descending; ties by public key for stable pagination."""
    return sorted(records, key=lambda record: (-record.sri, record.pubkey))
