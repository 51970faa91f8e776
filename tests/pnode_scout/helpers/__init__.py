"""Test helpers for pnode_scout unit tests."""

from __future__ import annotations

from .builders import make_announcement, make_pod, make_probe, make_record
from .mocks import MockNetwork, MockNode, RecordingResolver

__all__ = [
    # Builders
    "make_announcement",
    "make_pod",
    "make_probe",
    "make_record",
    # Mocks
    "MockNetwork",
    "MockNode",
    "RecordingResolver",
]
