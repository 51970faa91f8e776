"""
API server module for the pNode ranking and network status endpoints.

Provides HTTP endpoints for:
- /api/pnodes - Scored pNodes and network stats
- /api/stats - Network stats
- /api/port-check - pRPC port reachability
- /api/health - Health check endpoint
- /metrics - Prometheus metrics
"""

from .server import ApiServer, ApiServerConfig

__all__ = [
    "ApiServer",
    "ApiServerConfig",
]
