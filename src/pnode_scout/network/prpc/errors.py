"""Error taxonomy of the pRPC transport."""

from __future__ import annotations

from enum import Enum


class TransportErrorKind(Enum):
    """Classification of a failed pRPC call."""

    TIMEOUT = "timeout"
    """The call did not complete within its timeout."""

    UNREACHABLE = "unreachable"
    """Connection-level failure: refused, reset, DNS, TLS."""

    PROTOCOL_ERROR = "protocol_error"
    """The peer answered, but with an error envelope or an unusable body."""


class TransportError(Exception):
    """
    Raised when a single pRPC call fails.

    Attributes:
        kind: Failure classification.
        address: Address the call was made to, as "host:port".
        method: pRPC method name.
        code: Error code for protocol errors (JSON-RPC code or HTTP status).
        message: Human-readable error description.
    """

    def __init__(
        self,
        kind: TransportErrorKind,
        address: str,
        method: str,
        message: str,
        *,
        code: int | None = None,
    ) -> None:
        self.kind = kind
        self.address = address
        self.method = method
        self.code = code
        self.message = message

        detail = f"{kind.value} calling {method} on {address}: {message}"
        if code is not None:
            detail = f"{kind.value} {code} calling {method} on {address}: {message}"
        super().__init__(detail)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.kind.name}, {self.address!r}, {self.message!r})"

    @property
    def is_timeout(self) -> bool:
        """Whether the call was cancelled by its timeout."""
        return self.kind is TransportErrorKind.TIMEOUT

    @property
    def is_retryable(self) -> bool:
        """Whether a caller-side retry could plausibly succeed."""
        return self.kind is not TransportErrorKind.PROTOCOL_ERROR
