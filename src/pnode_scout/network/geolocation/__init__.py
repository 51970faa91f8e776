"""Best-effort IP geolocation adapters."""

from .resolver import (
    GeoLocation,
    GeolocationResolver,
    IpApiResolver,
    NullResolver,
    PassResolver,
    is_public_ip,
)

__all__ = [
    "GeoLocation",
    "GeolocationResolver",
    "IpApiResolver",
    "NullResolver",
    "PassResolver",
    "is_public_ip",
]
