"""
Storage Reliability Index (SRI).

A single 0-100 score per peer, the weighted sum of three sub-scores:

    SRI = 0.40 * availability + 0.30 * visibility + 0.30 * compliance

rounded half-up to an integer. The arithmetic is exact (rational), so a
weighted sum of exactly x.5 always rounds up regardless of float
representation.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Final

from pnode_scout.network.probe import ProbeResult, is_compliant

AVAILABILITY_WEIGHT: Final = Fraction(40, 100)
"""Weight of pRPC availability."""

VISIBILITY_WEIGHT: Final = Fraction(30, 100)
"""Weight of gossip visibility."""

COMPLIANCE_WEIGHT: Final = Fraction(30, 100)
"""Weight of version compliance."""

SCORE_MIN: Final = 0
SCORE_MAX: Final = 100

DEFAULT_VISIBILITY: Final = 100
"""
Visibility used when it cannot be computed.

With fewer than two answering addresses a fraction is meaningless: a
single seed lists every peer it knows, so every peer would score 100 anyway.
Small test networks should not be penalized for being small.
"""

MIN_VISIBILITY_RESPONDERS: Final = 2
"""Answering addresses needed before visibility is computed."""

COMPLIANT_SCORE: Final = 100
"""Compliance of a reachable peer running the latest release or newer."""

OUTDATED_SCORE: Final = 50
"""Compliance of a reachable peer on an older or unparseable version."""


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def _check_range(name: str, value: float) -> None:
    if not SCORE_MIN <= value <= SCORE_MAX:
        raise ValueError(f"{name} must be within [{SCORE_MIN}, {SCORE_MAX}], got {value}")


def score(availability: float, visibility: float, compliance: float) -> int:
    """
    Combine three sub-scores into the SRI.

    Pure and total over [0, 100]^3. Non-decreasing in each argument.

    Raises:
        ValueError: If any sub-score lies outside [0, 100].
    """
    _check_range("availability", availability)
    _check_range("visibility", visibility)
    _check_range("compliance", compliance)

    weighted = (
        AVAILABILITY_WEIGHT * Fraction(availability)
        + VISIBILITY_WEIGHT * Fraction(visibility)
        + COMPLIANCE_WEIGHT * Fraction(compliance)
    )
    return _round_half_up(weighted)


def availability_score(probe: ProbeResult) -> int:
    """
    Binary pRPC availability.

    Latency is reported separately and deliberately not folded in: the SRI
    is a pass/fail reliability signal, not a speed ranking.
    """
    return SCORE_MAX if probe.reachable else SCORE_MIN


def visibility_score(mentions: int, responders: int, default: int = DEFAULT_VISIBILITY) -> int:
    """
    Share of answering addresses that listed a peer, scaled to 0-100.

    Args:
        mentions: Answering addresses whose pod list contained the peer.
        responders: Addresses that answered during the pass.
        default: Value used when too few addresses answered.
    """
    if responders < MIN_VISIBILITY_RESPONDERS:
        return default
    return min(SCORE_MAX, _round_half_up(Fraction(SCORE_MAX * mentions, responders)))


def compliance_score(probe: ProbeResult, version: str | None, latest: str) -> int:
    """
    Version compliance of a probed peer.

    Unreachable peers get the floor: their version could not be confirmed.
    Unparseable versions count as outdated.
    """
    if not probe.reachable:
        return SCORE_MIN
    return COMPLIANT_SCORE if is_compliant(version, latest) else OUTDATED_SCORE
