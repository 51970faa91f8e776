"""
Peer identity and addressing types.

Identity and address are deliberately separate concepts:

- A PeerIdentity (the peer's public key) is the only dedup key.
- A PeerAddress is merely how to reach a peer right now. Addresses go stale,
  and one peer may be announced under several of them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NewType

PeerIdentity = NewType("PeerIdentity", str)
"""Opaque, globally unique peer identifier (the peer's public key)."""


@dataclass(frozen=True, slots=True)
class PeerAddress:
    """A (host, port) pair used to reach a peer."""

    host: str
    """IP address or hostname."""

    port: int
    """pRPC port."""

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("Peer host must not be empty")
        if not 0 < self.port < 65536:
            raise ValueError(f"Peer port out of range: {self.port}")

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"

    @classmethod
    def parse(cls, text: str, default_port: int) -> PeerAddress:
        """
        Parse "host", "host:port", "[ipv6]" or "[ipv6]:port".

        A bare host with more than one colon is an IPv6 address without a port.

        Args:
            text: Address string. Surrounding whitespace is ignored.
            default_port: Port used when the string carries none.

        Raises:
            ValueError: If the host is empty or the port is not a valid number.
        """
        text = text.strip()
        if text.startswith("["):
            host, bracket, rest = text[1:].partition("]")
            if not bracket:
                raise ValueError(f"Unclosed bracket in peer address: {text!r}")
            if not rest:
                return cls(host=host, port=default_port)
            if not rest.startswith(":"):
                raise ValueError(f"Invalid port in peer address: {text!r}")
            port = rest[1:]
        elif text.count(":") > 1:
            return cls(host=text, port=default_port)
        else:
            host, sep, port = text.rpartition(":")
            if not sep:
                return cls(host=text, port=default_port)
        if not port.isdigit():
            raise ValueError(f"Invalid port in peer address: {text!r}")
        return cls(host=host, port=int(port))


@dataclass(frozen=True, slots=True)
class PeerAnnouncement:
    """What one peer reports knowing about another during traversal."""

    identity: PeerIdentity
    """Public key of the announced peer."""

    address: PeerAddress
    """Address the announcing peer last saw it at."""

    last_seen: float
    """Unix timestamp (seconds) of the last observation."""

    version: str
    """Software version string as reported through gossip."""
