"""
Fallback data source.

Served when live data is unavailable: discovery found nothing, a pass
failed, or sample data was requested explicitly. The sample network is
generated from a fixed seed and pushed through the real scoring path, so it
always obeys the same invariants as live records.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Final, Protocol

from pnode_scout.network import PeerAddress, PeerAnnouncement, PeerIdentity
from pnode_scout.network.geolocation import GeoLocation
from pnode_scout.network.probe import ProbeResult
from pnode_scout.scoring import ReliabilityRecord, build_record, sort_records

SAMPLE_NODE_COUNT: Final = 75
"""Size of the sample network."""

SAMPLE_SEED: Final = 6000
"""Random seed of the sample network."""

_SAMPLE_VERSIONS: Final = ("0.5.0-munich", "0.4.0-harrenburgg", "0.4.0-ingolstadt")

_SAMPLE_CITIES: Final = (
    ("United States", "US", "New York", 40.7128, -74.006),
    ("United States", "US", "Dallas", 32.7767, -96.797),
    ("Germany", "DE", "Frankfurt", 50.1109, 8.6821),
    ("Germany", "DE", "Munich", 48.1351, 11.582),
    ("Singapore", "SG", "Singapore", 1.3521, 103.8198),
    ("Japan", "JP", "Tokyo", 35.6762, 139.6503),
    ("Netherlands", "NL", "Amsterdam", 52.3676, 4.9041),
    ("France", "FR", "Paris", 48.8566, 2.3522),
    ("United Kingdom", "GB", "London", 51.5074, -0.1278),
    ("Canada", "CA", "Toronto", 43.6532, -79.3832),
    ("Australia", "AU", "Sydney", -33.8688, 151.2093),
    ("Brazil", "BR", "Sao Paulo", -23.5505, -46.6333),
)

_BASE58_ALPHABET: Final = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

_GIB: Final = 1024**3


class FallbackSource(Protocol):
    """Anything that can supply records when the live network cannot."""

    def records(self) -> list[ReliabilityRecord]:
        """Return a sorted record set."""
        ...


@dataclass(slots=True)
class SampleDataSource:
    """Deterministic sample network, generated once per instance."""

    latest_version: str
    """Release that compliance is measured against."""

    count: int = SAMPLE_NODE_COUNT
    """Number of sample peers."""

    seed: int = SAMPLE_SEED
    """Random seed. Equal seeds give equal networks."""

    _records: list[ReliabilityRecord] | None = field(default=None, init=False)

    def records(self) -> list[ReliabilityRecord]:
        if self._records is None:
            self._records = self._generate()
        return list(self._records)

    def reset(self) -> None:
        """Forget the generated network. The next call regenerates it."""
        self._records = None

    def _generate(self) -> list[ReliabilityRecord]:
        rng = random.Random(self.seed)
        now = time.time()
        responders = max(2, self.count // 3)

        records = []
        for _ in range(self.count):
            country, code, city, lat, lon = rng.choice(_SAMPLE_CITIES)
            version = rng.choice(_SAMPLE_VERSIONS)
            online = rng.random() > 0.1
            address = PeerAddress(
                host=".".join(str(rng.randint(1, 254)) for _ in range(4)),
                port=6000,
            )
            capacity = rng.randint(100, 10000) * _GIB

            announcement = PeerAnnouncement(
                identity=PeerIdentity("".join(rng.choices(_BASE58_ALPHABET, k=44))),
                address=address,
                last_seen=now - rng.randint(0, 300),
                version=version,
            )
            location = GeoLocation(
                country=country,
                country_code=code,
                city=city,
                latitude=lat + (rng.random() - 0.5) * 0.1,
                longitude=lon + (rng.random() - 0.5) * 0.1,
            )
            if online:
                probe = ProbeResult(
                    address=address,
                    reachable=True,
                    latency_ms=float(rng.randint(20, 500)),
                    capacity_bytes=capacity,
                    used_bytes=int(capacity * rng.random() * 0.8),
                    peer_count=rng.randint(5, 50),
                    uptime_seconds=rng.randint(3600, 2592000),
                    version=version,
                    location=location,
                )
            else:
                probe = ProbeResult(address=address, reachable=False, location=location)

            records.append(
                build_record(
                    announcement,
                    probe,
                    mentions=rng.randint(responders * 7 // 10, responders),
                    responders=responders,
                    latest_version=self.latest_version,
                )
            )

        return sort_records(records)
