"""
pRPC transport client.

Issues exactly one request/response exchange per call:

1. Open a fresh HTTP client (no connection reuse between calls)
2. POST the JSON-RPC envelope to the peer
3. Classify the outcome: result, protocol error, unreachable, or timeout

Retries are never attempted here. Whether a failed call is worth repeating
is a policy decision that belongs to the caller.

The client does not log and holds no shared state beyond the request id
counter, so one instance can serve any number of concurrent probes.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any, Final, TypeVar

import httpx
from pydantic import ValidationError

from ..types import PeerAddress
from .errors import TransportError, TransportErrorKind
from .messages import (
    METHOD_GET_PODS,
    METHOD_GET_STATS,
    METHOD_GET_VERSION,
    PARSE_ERROR,
    GetPodsResult,
    JsonRpcRequest,
    JsonRpcResponse,
    NodeStats,
)

DEFAULT_TIMEOUT_MS: Final = 5000
"""Per-call timeout in milliseconds."""

DEFAULT_RPC_PATH: Final = "/"
"""HTTP path pRPC requests are posted to."""

_HEADERS: Final = {"Content-Type": "application/json"}

M = TypeVar("M", GetPodsResult, NodeStats)


@dataclass(slots=True)
class PrpcClient:
    """
    JSON-RPC 2.0 client for pNode communication.

    Every call either returns the `result` member of the response envelope
    or raises TransportError.
    """

    timeout_ms: int = DEFAULT_TIMEOUT_MS
    """Default per-call timeout, used when a call does not override it."""

    rpc_path: str = DEFAULT_RPC_PATH
    """HTTP path of the pRPC endpoint."""

    transport: httpx.AsyncBaseTransport | None = None
    """Optional httpx transport. Tests inject an in-memory one."""

    _ids: Iterator[int] = field(default_factory=lambda: itertools.count(1), init=False)
    """Monotonic request id source."""

    async def call(
        self,
        address: PeerAddress,
        method: str,
        params: Sequence[Any] | None = None,
        timeout_ms: int | None = None,
    ) -> Any:
        """
        Perform one pRPC call.

        Args:
            address: Peer to call.
            method: pRPC method name.
            params: Positional parameters.
            timeout_ms: Hard deadline for the whole exchange. Defaults to the
                client's timeout.

        Returns:
            The `result` member of the response envelope.

        Raises:
            TransportError: TIMEOUT if the deadline expired, UNREACHABLE on a
                connection failure, PROTOCOL_ERROR on an error envelope or an
                unusable response.
        """
        timeout = (self.timeout_ms if timeout_ms is None else timeout_ms) / 1000
        request = JsonRpcRequest(method=method, params=list(params or []), id=next(self._ids))

        # The deadline covers connect, send and read together.
        #
        # httpx enforces its own per-phase timeouts, but only cancellation
        # bounds the total wall-clock time of the exchange.
        try:
            return await asyncio.wait_for(self._exchange(address, request, timeout), timeout)
        except asyncio.TimeoutError:
            raise TransportError(
                TransportErrorKind.TIMEOUT,
                str(address),
                method,
                f"Request timeout after {round(timeout * 1000)}ms",
            ) from None

    async def get_pods(self, address: PeerAddress, timeout_ms: int | None = None) -> GetPodsResult:
        """Ask a peer for the pods it knows about."""
        result = await self.call(address, METHOD_GET_PODS, timeout_ms=timeout_ms)
        return _validate(GetPodsResult, result, address, METHOD_GET_PODS)

    async def get_stats(self, address: PeerAddress, timeout_ms: int | None = None) -> NodeStats:
        """Ask a peer for its capacity and uptime statistics."""
        result = await self.call(address, METHOD_GET_STATS, timeout_ms=timeout_ms)
        return _validate(NodeStats, result, address, METHOD_GET_STATS)

    async def get_version(self, address: PeerAddress, timeout_ms: int | None = None) -> str:
        """
        Ask a peer for its software version.

        Older releases answer with a bare string, newer ones with an object
        holding a `version` member. Both are accepted.
        """
        result = await self.call(address, METHOD_GET_VERSION, timeout_ms=timeout_ms)
        if isinstance(result, dict):
            result = result.get("version")
        if not isinstance(result, str):
            raise TransportError(
                TransportErrorKind.PROTOCOL_ERROR,
                str(address),
                METHOD_GET_VERSION,
                f"Unexpected version result: {result!r}",
                code=PARSE_ERROR,
            )
        return result

    def url_for(self, address: PeerAddress) -> str:
        """Build the endpoint URL for a peer."""
        host = address.host
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return f"http://{host}:{address.port}{self.rpc_path}"

    async def _exchange(self, address: PeerAddress, request: JsonRpcRequest, timeout: float) -> Any:
        """POST one envelope and unwrap the response."""
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.post(
                    self.url_for(address),
                    content=request.model_dump_json(),
                    headers=_HEADERS,
                )
        except httpx.TimeoutException as exc:
            raise TransportError(
                TransportErrorKind.TIMEOUT, str(address), request.method, str(exc) or "timed out"
            ) from exc
        except httpx.TransportError as exc:
            raise TransportError(
                TransportErrorKind.UNREACHABLE,
                str(address),
                request.method,
                str(exc) or type(exc).__name__,
            ) from exc

        if not response.is_success:
            raise TransportError(
                TransportErrorKind.PROTOCOL_ERROR,
                str(address),
                request.method,
                f"HTTP error: {response.status_code}",
                code=response.status_code,
            )

        try:
            envelope = JsonRpcResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise TransportError(
                TransportErrorKind.PROTOCOL_ERROR,
                str(address),
                request.method,
                f"Malformed response envelope: {exc.error_count()} error(s)",
                code=PARSE_ERROR,
            ) from exc

        if envelope.error is not None:
            raise TransportError(
                TransportErrorKind.PROTOCOL_ERROR,
                str(address),
                request.method,
                envelope.error.message,
                code=envelope.error.code,
            )

        return envelope.result


def _validate(
    model: type[M], result: Any, address: PeerAddress, method: str
) -> M:
    """Validate a result member against its schema, as a protocol error on mismatch."""
    try:
        return model.model_validate(result)
    except ValidationError as exc:
        raise TransportError(
            TransportErrorKind.PROTOCOL_ERROR,
            str(address),
            method,
            f"Unexpected {method} result: {exc.error_count()} error(s)",
            code=PARSE_ERROR,
        ) from exc
