"""
Discovery configuration.

Traversal limits for walking the pNode gossip network.
"""

from typing import Final

from pydantic import Field

from pnode_scout.types import StrictBaseModel

from ..prpc import DEFAULT_TIMEOUT_MS

DEFAULT_PORT: Final = 6000
"""Default pRPC port of a pNode."""

MAX_DEPTH: Final = 3
"""Default traversal depth. Seeds are depth 0."""

BATCH_SIZE: Final = 10
"""Maximum get_pods calls in flight at once."""

DEADLINE_SECS: Final = 60.0
"""Wall-clock budget for a whole traversal."""


class DiscoveryConfig(StrictBaseModel):
    """Runtime configuration for network discovery."""

    max_depth: int = Field(default=MAX_DEPTH, ge=0)
    """Deepest level whose addresses are still queried."""

    batch_size: int = Field(default=BATCH_SIZE, ge=1)
    """Number of concurrent get_pods calls."""

    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    """Per-call timeout for get_pods."""

    deadline_secs: float | None = Field(default=DEADLINE_SECS, gt=0)
    """Budget for the whole traversal. None disables the deadline."""

    default_port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)
    """Port assumed for announced pods that do not carry one."""
