"""
pNode scout entry point.

Usage::

    python -m pnode_scout scan [--seed ADDR ...] [--max-depth N] [--json]
    python -m pnode_scout serve [--host HOST] [--port PORT]

`scan` runs one discovery and scoring pass and prints the ranking.
`serve` exposes the ranking over HTTP, refreshed at most once per cache TTL.

Seeds, ports and timeouts default to the XANDEUM_* environment variables.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from pnode_scout.aggregate import AggregateService, NetworkSnapshot
from pnode_scout.api import ApiServer, ApiServerConfig
from pnode_scout.config import ScoutConfig

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = f"{self.CYAN}{self.formatTime(record, self.datefmt)}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{timestamp} {levelname} {name}: {message}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure stderr logging with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    # Per-request lines from httpx drown out the crawler's own logging.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def format_table(snapshot: NetworkSnapshot) -> str:
    """Render a snapshot as a plain-text ranking."""
    lines = [
        f"{'#':>4}  {'PUBKEY':<12}  {'ADDRESS':<21}  {'STATUS':<7}  {'VERSION':<8}  "
        f"{'SRI':>3}  {'A':>3}  {'V':>3}  {'C':>3}",
    ]
    for rank, node in enumerate(snapshot.nodes, start=1):
        lines.append(
            f"{rank:>4}  {node.pubkey[:12]:<12}  {f'{node.ip_address}:{node.port}':<21}  "
            f"{node.status:<7}  {node.version[:8]:<8}  {node.sri:>3}  "
            f"{node.availability:>3}  {node.visibility:>3}  {node.compliance:>3}"
        )

    stats = snapshot.stats
    lines.append("")
    lines.append(
        f"{stats.active_nodes}/{stats.total_nodes} online, "
        f"average SRI {stats.average_sri}, source {snapshot.source.value}"
    )
    if snapshot.error:
        lines.append(f"note: {snapshot.error}")
    return "\n".join(lines)


async def run_scan(config: ScoutConfig, as_json: bool) -> int:
    """Run one pass and print it. Returns the process exit code."""
    service = AggregateService.from_config(config)
    snapshot = await service.compute_snapshot()

    if as_json:
        print(snapshot.model_dump_json(by_alias=True, indent=2))
    else:
        print(format_table(snapshot))

    return 0 if snapshot.is_live or config.use_mock_data else 1


async def run_server(config: ScoutConfig, host: str, port: int) -> None:
    """Serve the ranking until interrupted."""
    service = AggregateService.from_config(config)
    server = ApiServer(config=ApiServerConfig(host=host, port=port), service=service)
    await server.run()


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="pnode_scout",
        description="Discover, probe and rank Xandeum pNodes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    scan = commands.add_parser("scan", help="Run one pass and print the ranking")
    scan.add_argument(
        "--seed",
        action="append",
        default=[],
        dest="seeds",
        help="Seed address, host or host:port (can be repeated)",
    )
    scan.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Discovery depth (default: 2)",
    )
    scan.add_argument(
        "--json",
        action="store_true",
        help="Print the snapshot as JSON",
    )

    serve = commands.add_parser("serve", help="Serve the ranking over HTTP")
    serve.add_argument(
        "--host",
        default=ApiServerConfig().host,
        help="Address to bind to (default: 0.0.0.0)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=ApiServerConfig().port,
        help="Port to listen on (default: 8080)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose, args.no_color)

    overrides: dict[str, object] = {}
    if args.command == "scan":
        if args.seeds:
            overrides["seeds"] = tuple(args.seeds)
        if args.max_depth is not None:
            overrides["max_depth"] = args.max_depth

    try:
        config = ScoutConfig.from_env(**overrides)
    except (ValueError, ValidationError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    try:
        if args.command == "scan":
            return asyncio.run(run_scan(config, args.json))
        asyncio.run(run_server(config, args.host, args.port))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
