"""
Global configuration for the scout.

Built once at process start, from compiled-in defaults overridden by the
environment, and passed explicitly to the components that need it. Nothing
mutates it afterwards.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from pydantic import Field, field_validator

from pnode_scout.network import PeerAddress
from pnode_scout.network.discovery import (
    BATCH_SIZE,
    DEADLINE_SECS,
    DEFAULT_PORT,
    DiscoveryConfig,
)
from pnode_scout.network.probe import parse_version
from pnode_scout.network.prpc import DEFAULT_TIMEOUT_MS
from pnode_scout.scoring import DEFAULT_VISIBILITY
from pnode_scout.types import StrictBaseModel

SEED_NODES: Final[tuple[str, ...]] = ("173.212.220.65",)
"""Entry points to the pNode gossip network."""

LATEST_VERSION: Final = "0.5.0"
"""Current pNode release. Anything at or above it is compliant."""

AGGREGATE_MAX_DEPTH: Final = 2
"""Traversal depth of aggregate passes."""

CACHE_TTL_SECS: Final = 30.0
"""Lifetime of a cached aggregate result."""

ENV_SEED_NODES: Final = "XANDEUM_SEED_NODES"
ENV_PRPC_PORT: Final = "XANDEUM_PRPC_PORT"
ENV_TIMEOUT_MS: Final = "XANDEUM_PRPC_TIMEOUT_MS"
ENV_MAX_DEPTH: Final = "XANDEUM_DISCOVERY_MAX_DEPTH"
ENV_BATCH_SIZE: Final = "XANDEUM_BATCH_SIZE"
ENV_LATEST_VERSION: Final = "XANDEUM_LATEST_VERSION"
ENV_USE_MOCK_DATA: Final = "USE_MOCK_DATA"

_TRUTHY: Final = frozenset({"1", "true", "yes", "on"})


class ScoutConfig(StrictBaseModel):
    """Immutable runtime configuration."""

    seeds: tuple[str, ...] = SEED_NODES
    """Seed addresses, "host" or "host:port"."""

    default_port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)
    """pRPC port assumed when an address carries none."""

    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    """Per-call pRPC timeout."""

    max_depth: int = Field(default=AGGREGATE_MAX_DEPTH, ge=0)
    """Discovery depth for aggregate passes."""

    batch_size: int = Field(default=BATCH_SIZE, ge=1)
    """Concurrent calls during discovery and hydration."""

    discovery_deadline_secs: float | None = Field(default=DEADLINE_SECS, gt=0)
    """Wall-clock budget of one traversal."""

    probe_retries: int = Field(default=0, ge=0)
    """Extra get_stats attempts per probe."""

    latest_version: str = LATEST_VERSION
    """Release that compliance is measured against."""

    default_visibility: int = Field(default=DEFAULT_VISIBILITY, ge=0, le=100)
    """Visibility used when it cannot be computed."""

    geolocation: bool = True
    """Whether probes look up peer locations."""

    cache_ttl_secs: float = Field(default=CACHE_TTL_SECS, gt=0)
    """Lifetime of cached aggregate results."""

    use_mock_data: bool = False
    """Serve sample data instead of walking the live network."""

    @field_validator("seeds")
    @classmethod
    def _seeds_parse(cls, seeds: tuple[str, ...]) -> tuple[str, ...]:
        for seed in seeds:
            PeerAddress.parse(seed, DEFAULT_PORT)
        return seeds

    @field_validator("latest_version")
    @classmethod
    def _latest_version_parses(cls, version: str) -> str:
        if parse_version(version) is None:
            raise ValueError(f"Invalid latest version: {version!r}")
        return version

    @property
    def seed_addresses(self) -> tuple[PeerAddress, ...]:
        """Seeds as addresses, with the default port applied."""
        return tuple(PeerAddress.parse(seed, self.default_port) for seed in self.seeds)

    def discovery_config(self) -> DiscoveryConfig:
        """Traversal limits derived from this configuration."""
        return DiscoveryConfig(
            max_depth=self.max_depth,
            batch_size=self.batch_size,
            timeout_ms=self.timeout_ms,
            deadline_secs=self.discovery_deadline_secs,
            default_port=self.default_port,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> ScoutConfig:
        """
        Build the configuration from the environment.

        A non-empty XANDEUM_SEED_NODES (comma-separated) replaces the
        compiled-in seeds rather than extending them.

        Args:
            environ: Variables to read. Defaults to the process environment.
            overrides: Explicit values, applied on top of the environment.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        seeds = tuple(s.strip() for s in env.get(ENV_SEED_NODES, "").split(",") if s.strip())
        if seeds:
            values["seeds"] = seeds

        for name, key in (
            (ENV_PRPC_PORT, "default_port"),
            (ENV_TIMEOUT_MS, "timeout_ms"),
            (ENV_MAX_DEPTH, "max_depth"),
            (ENV_BATCH_SIZE, "batch_size"),
        ):
            raw = env.get(name)
            if raw:
                values[key] = _parse_int(name, raw)

        if latest := env.get(ENV_LATEST_VERSION):
            values["latest_version"] = latest.strip()

        if ENV_USE_MOCK_DATA in env:
            values["use_mock_data"] = env[ENV_USE_MOCK_DATA].strip().lower() in _TRUTHY

        return cls(**(values | overrides))


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"Invalid {name} environment variable: {raw!r}") from None
