"""Peer probing: liveness, latency, capacity and version of a single peer."""

from .health import HealthCheck, check_health
from .prober import PeerProber, ProbeResult
from .version import VersionTriple, is_compliant, parse_version

__all__ = [
    "HealthCheck",
    "PeerProber",
    "ProbeResult",
    "VersionTriple",
    "check_health",
    "is_compliant",
    "parse_version",
]
