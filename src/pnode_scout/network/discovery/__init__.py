"""
Network discovery.

Breadth-first traversal of the pNode gossip network from a set of seeds,
deduplicating peers by identity and bounding depth, concurrency and time.
"""

from .config import BATCH_SIZE, DEADLINE_SECS, DEFAULT_PORT, MAX_DEPTH, DiscoveryConfig
from .crawler import DiscoveryResult, DiscoveryStatus, NetworkDiscoverer

__all__ = [
    "BATCH_SIZE",
    "DEADLINE_SECS",
    "DEFAULT_PORT",
    "MAX_DEPTH",
    "DiscoveryConfig",
    "DiscoveryResult",
    "DiscoveryStatus",
    "NetworkDiscoverer",
]
