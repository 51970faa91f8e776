"""Networking: pRPC transport, peer probing, discovery and geolocation."""

from .types import PeerAddress, PeerAnnouncement, PeerIdentity

__all__ = [
    "PeerAddress",
    "PeerAnnouncement",
    "PeerIdentity",
]
