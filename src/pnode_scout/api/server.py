"""
API server for the pNode ranking, network stats, and metrics.

Provides HTTP endpoints for:
- /api/pnodes - Scored pNodes sorted by SRI, plus network stats
- /api/stats - Network stats only
- /api/port-check - Check whether a host's pRPC port answers
- /api/health - Health check endpoint
- /metrics - Prometheus metrics endpoint

Every data endpoint answers with the same envelope::

    {"success": true, "data": {...}, "error": "...", "timestamp": "..."}

`error` is present only when fallback data is being served or the request failed.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Final

from aiohttp import web

from pnode_scout.aggregate import AggregateService
from pnode_scout.metrics import generate_metrics
from pnode_scout.network import PeerAddress
from pnode_scout.network.probe import check_health

logger = logging.getLogger(__name__)

SERVICE_NAME: Final = "pnode-scout-api"
"""Fixed service identifier returned by the health endpoint."""

GOSSIP_PORT: Final = 9001
"""UDP gossip port of a pNode."""


def _envelope(data: Any, *, error: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "data": data}
    if error is not None:
        body["error"] = error
    body["timestamp"] = datetime.now(UTC).isoformat()
    return body


async def _handle_health(_request: web.Request) -> web.Response:
    """Handle health check endpoint."""
    return web.json_response({"status": "healthy", "service": SERVICE_NAME})


async def _handle_metrics(_request: web.Request) -> web.Response:
    """Handle Prometheus metrics endpoint."""
    return web.Response(
        body=generate_metrics(),
        content_type="text/plain; version=0.0.4",
    )


@dataclass(frozen=True, slots=True)
class ApiServerConfig:
    """Configuration for the API server."""

    host: str = "0.0.0.0"
    """Host address to bind to."""

    port: int = 8080
    """Port to listen on."""

    enabled: bool = True
    """Whether the API server is enabled."""


@dataclass(slots=True)
class ApiServer:
    """
    HTTP API over an AggregateService.

    Uses aiohttp to handle HTTP protocol details efficiently.
    """

    config: ApiServerConfig
    """Server configuration."""

    service: AggregateService
    """Source of snapshots."""

    _runner: web.AppRunner | None = field(default=None, init=False)
    """The aiohttp application runner."""

    _site: web.TCPSite | None = field(default=None, init=False)
    """The TCP site for the server."""

    def build_app(self) -> web.Application:
        """Create the aiohttp application with all routes registered."""
        app = web.Application()
        app.add_routes(
            [
                web.get("/api/health", _handle_health),
                web.get("/metrics", _handle_metrics),
                web.get("/api/pnodes", self._handle_pnodes),
                web.get("/api/stats", self._handle_stats),
                web.post("/api/port-check", self._handle_port_check),
            ]
        )
        return app

    async def start(self) -> None:
        """Start the API server in the background."""
        if not self.config.enabled:
            logger.info("API server is disabled")
            return

        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()

        logger.info(f"API server listening on {self.config.host}:{self.config.port}")

    async def run(self) -> None:
        """
        Run the API server until shutdown.

        This method blocks until stop() is called.
        """
        await self.start()

        while self._runner is not None:
            await asyncio.sleep(1)

    def stop(self) -> None:
        """Request graceful shutdown."""
        if self._runner is not None:
            asyncio.create_task(self._async_stop())

    async def _async_stop(self) -> None:
        """Gracefully stop the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            logger.info("API server stopped")

    async def _handle_pnodes(self, _request: web.Request) -> web.Response:
        """
        Handle the pNode ranking endpoint.

        Response data: {"nodes": [...], "stats": {...}} with nodes sorted by
        SRI descending. Fallback data carries an `error` explaining why.
        """
        snapshot = await self.service.get_snapshot()
        data = snapshot.model_dump(mode="json", by_alias=True, include={"nodes", "stats"})
        data["source"] = snapshot.source.value
        return web.json_response(_envelope(data, error=snapshot.error))

    async def _handle_stats(self, _request: web.Request) -> web.Response:
        """Handle the network stats endpoint."""
        stats = await self.service.get_stats()
        return web.json_response(_envelope(stats.model_dump(mode="json", by_alias=True)))

    async def _handle_port_check(self, request: web.Request) -> web.Response:
        """
        Handle the port check endpoint.

        Request body: {"ip": "<IPv4 address>"}.

        The pRPC port is checked with a real get_version call. The gossip
        port speaks UDP and cannot be probed from here, so its status is
        inferred from the pRPC result.

        Status Codes:
            200 OK: Check performed (ports may still be closed).
            400 Bad Request: Missing or invalid IP address.
        """
        try:
            body = await request.json()
        except ValueError:
            return web.json_response({"error": "Request body must be JSON"}, status=400)

        ip = body.get("ip") if isinstance(body, dict) else None
        if not ip:
            return web.json_response({"error": "IP address is required"}, status=400)
        try:
            if not isinstance(ip, str):
                raise ValueError(ip)
            ipaddress.IPv4Address(ip)
        except ValueError:
            return web.json_response({"error": "Invalid IP address format"}, status=400)

        prpc_port = self.service.config.default_port
        health = await check_health(self.service.client, PeerAddress(host=ip, port=prpc_port))

        results: list[dict[str, Any]] = []
        if health.healthy:
            results.append(
                {
                    "port": prpc_port,
                    "status": "open",
                    "latency": round(health.latency_ms or 0.0),
                    "message": "pRPC responding",
                }
            )
            results.append(
                {
                    "port": GOSSIP_PORT,
                    "status": "open",
                    "message": "Gossip port (assumed based on pRPC availability)",
                }
            )
        else:
            results.append(
                {"port": prpc_port, "status": "closed", "message": "No response from pRPC"}
            )
            results.append(
                {
                    "port": GOSSIP_PORT,
                    "status": "closed",
                    "message": "Cannot verify UDP port without direct probe",
                }
            )

        return web.json_response(
            {
                "success": True,
                "ip": ip,
                "results": results,
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )
