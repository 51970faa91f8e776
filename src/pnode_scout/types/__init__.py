"""Reusable type definitions shared across the scout."""

from .base import CamelModel, StrictBaseModel, WireModel

__all__ = [
    "CamelModel",
    "StrictBaseModel",
    "WireModel",
]
