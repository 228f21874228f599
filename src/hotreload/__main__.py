"""Command-line entry point for the hot reload dev server.

Usage:
    python -m hotreload --watch dist/build-info.json --static dist

    # or configure through the environment
    HOT_RELOAD=dist/build-info.json python -m hotreload --static dist
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from hotreload import __version__
from hotreload.config import load_config
from hotreload.config.schema import Config
from hotreload.errors import ConfigError
from hotreload.logging import get_logger, setup_logging

log = get_logger()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="hotreload",
        description="Serve a build directory and reload browsers on every new build",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Config file path (default: ./hot-reload.yaml)",
    )
    parser.add_argument(
        "--watch",
        help="Build marker file to watch; enables hot reload",
    )
    parser.add_argument(
        "--mode",
        choices=["sse", "poll"],
        help="Client transport (default: sse)",
    )
    parser.add_argument(
        "--static",
        help="Directory to serve at /",
    )
    parser.add_argument("--host", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, help="Bind port (default: 8080)")
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Translate command-line flags into a config override dict."""
    hot: dict[str, Any] = {}
    if args.watch:
        hot["enabled"] = True
        hot["watch"] = args.watch
    if args.mode:
        hot["mode"] = args.mode

    overrides: dict[str, Any] = {}
    if hot:
        overrides["hot_reload"] = hot
    if args.static:
        overrides["static"] = {"directory": args.static}
    server = {"host": args.host, "port": args.port}
    if any(value is not None for value in server.values()):
        overrides["server"] = server
    return overrides


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, load config and run the server."""
    args = create_parser().parse_args(argv)

    try:
        config: Config = load_config(args.config, overrides=overrides_from_args(args))
    except ConfigError as e:
        print(f"hotreload: {e}", file=sys.stderr)
        return 2

    setup_logging(config.logging, verbose=args.verbose)

    from hotreload.server import serve

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        log.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
