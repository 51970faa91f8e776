"""
pRPC transport.

JSON-RPC 2.0 over HTTP, one request per call, with a hard per-call timeout
and structured error classification.
"""

from .client import DEFAULT_RPC_PATH, DEFAULT_TIMEOUT_MS, PrpcClient
from .errors import TransportError, TransportErrorKind
from .messages import (
    METHOD_GET_PODS,
    METHOD_GET_STATS,
    METHOD_GET_VERSION,
    GetPodsResult,
    JsonRpcRequest,
    JsonRpcResponse,
    NodeStats,
    PodInfo,
    RpcErrorBody,
)

__all__ = [
    "DEFAULT_RPC_PATH",
    "DEFAULT_TIMEOUT_MS",
    "METHOD_GET_PODS",
    "METHOD_GET_STATS",
    "METHOD_GET_VERSION",
    "GetPodsResult",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "NodeStats",
    "PodInfo",
    "PrpcClient",
    "RpcErrorBody",
    "TransportError",
    "TransportErrorKind",
]
