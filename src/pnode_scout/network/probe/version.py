"""
Version compliance.

Peers report decorated version strings such as "0.5.0-munich" or
"v0.4.2 (build 1187)". Compliance only looks at the first dotted
major.minor.patch triple found in the string.
"""

from __future__ import annotations

import re

VersionTriple = tuple[int, int, int]

_VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)\.(\d+)")


def parse_version(version: str | None) -> VersionTriple | None:
    """
    Extract the first numeric version triple from a version string.

    Returns None when the string carries no such triple.
    """
    if not version:
        return None
    match = _VERSION_PATTERN.search(version)
    if match is None:
        return None
    major, minor, patch = match.groups()
    return int(major), int(minor), int(patch)


def is_compliant(version: str | None, latest: str) -> bool:
    """
    Check whether a reported version is at least the latest release.

    Comparison is numeric per component (0.10.0 is newer than 0.9.9).
    Unparseable versions are never compliant.

    Raises:
        ValueError: If `latest` itself is not a valid version.
    """
    target = parse_version(latest)
    if target is None:
        raise ValueError(f"Invalid latest version: {latest!r}")

    current = parse_version(version)
    if current is None:
        return False
    return current >= target
