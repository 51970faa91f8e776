"""Reliability scoring: sub-scores, the composite SRI, and scored records."""

from .records import PeerStatus, ReliabilityRecord, build_record, sort_records
from .sri import (
    AVAILABILITY_WEIGHT,
    COMPLIANCE_WEIGHT,
    COMPLIANT_SCORE,
    DEFAULT_VISIBILITY,
    OUTDATED_SCORE,
    VISIBILITY_WEIGHT,
    availability_score,
    compliance_score,
    score,
    visibility_score,
)

__all__ = [
    "AVAILABILITY_WEIGHT",
    "COMPLIANCE_WEIGHT",
    "COMPLIANT_SCORE",
    "DEFAULT_VISIBILITY",
    "OUTDATED_SCORE",
    "PeerStatus",
    "ReliabilityRecord",
    "VISIBILITY_WEIGHT",
    "availability_score",
    "build_record",
    "compliance_score",
    "score",
    "sort_records",
    "visibility_score",
]
