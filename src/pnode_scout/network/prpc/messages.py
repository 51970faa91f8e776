"""
pRPC wire messages.

pRPC is JSON-RPC 2.0 carried in the body of an HTTP POST.

Request::

    {"jsonrpc": "2.0", "method": "get_pods", "params": [], "id": 1}

Success response::

    {"jsonrpc": "2.0", "result": {...}, "id": 1}

Error response::

    {"jsonrpc": "2.0", "error": {"code": -32601, "message": "..."}, "id": 1}
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Final, Literal

from pydantic import Field, ValidationError, field_validator

from pnode_scout.types import WireModel

JSONRPC_VERSION: Final = "2.0"
"""Protocol version tag carried by every envelope."""

METHOD_GET_PODS: Final = "get_pods"
"""Known-peers listing of the answering node."""

METHOD_GET_STATS: Final = "get_stats"
"""Capacity and uptime statistics of the answering node."""

METHOD_GET_VERSION: Final = "get_version"
"""Software version of the answering node."""

PARSE_ERROR: Final = -32700
"""JSON-RPC code for a body that is not valid JSON or not an envelope."""

MILLISECOND_EPOCH_THRESHOLD: Final = 1e11
"""Timestamps above this are taken as milliseconds (1e11 seconds is year 5138)."""

MAX_EPOCH_SECS: Final = 253_402_300_799.0
"""Last second of year 9999, the latest instant datetime can represent."""

logger = logging.getLogger(__name__)


def _clamp_epoch(seconds: float) -> float:
    """Bring a peer-reported Unix time into the range datetime accepts, else 0.0."""
    if not math.isfinite(seconds) or seconds < 0:
        return 0.0
    if seconds > MILLISECOND_EPOCH_THRESHOLD:
        seconds /= 1000
    return seconds if seconds <= MAX_EPOCH_SECS else 0.0


class JsonRpcRequest(WireModel):
    """Outgoing request envelope."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: list[Any] = Field(default_factory=list)
    id: int


class RpcErrorBody(WireModel):
    """The `error` member of a failed response."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(WireModel):
    """Incoming response envelope."""

    jsonrpc: str | None = None
    result: Any = None
    error: RpcErrorBody | None = None
    id: int | str | None = None


class PodInfo(WireModel):
    """One entry of a `get_pods` answer."""

    pubkey: str = Field(min_length=1)
    ip_address: str = Field(min_length=1)
    port: int | None = None
    last_seen: float = 0.0
    version: str = ""

    @field_validator("last_seen", mode="before")
    @classmethod
    def _normalize_last_seen(cls, value: Any) -> float:
        """
        Accept epoch seconds, epoch milliseconds or an ISO-8601 timestamp.

        Unparseable, non-finite and out-of-range timestamps collapse to 0.0
        (oldest possible) rather than rejecting the whole pod listing.
        """
        if isinstance(value, bool) or value is None:
            return 0.0
        if isinstance(value, int | float):
            try:
                return _clamp_epoch(float(value))
            except OverflowError:
                return 0.0
        if isinstance(value, str):
            try:
                return _clamp_epoch(float(value))
            except ValueError:
                pass
            try:
                return _clamp_epoch(
                    datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
                )
            except (ValueError, OverflowError):
                return 0.0
        return 0.0


class GetPodsResult(WireModel):
    """Result of `get_pods`."""

    pods: list[PodInfo] = Field(default_factory=list)
    total_count: int = 0

    @field_validator("pods", mode="before")
    @classmethod
    def _drop_invalid_pods(cls, value: Any) -> Any:
        """Validate entries one by one so a malformed pod only loses itself."""
        if not isinstance(value, list):
            return value
        pods = []
        for entry in value:
            try:
                pods.append(PodInfo.model_validate(entry))
            except ValidationError as e:
                logger.debug("Ignoring malformed pod entry: %s", e)
        return pods


class NodeStats(WireModel):
    """Result of `get_stats`."""

    uptime: int = 0
    storage_utilized: int = 0
    storage_available: int = 0
    storage_capacity: int = 0
    packets_sent: int = 0
    packets_received: int = 0
    cpu_percent: float = 0.0
    memory_percent: float = 0.0
    peer_count: int = 0

    @property
    def capacity_bytes(self) -> int:
        """Advertised capacity, falling back to available space for older releases."""
        return self.storage_capacity or self.storage_available
