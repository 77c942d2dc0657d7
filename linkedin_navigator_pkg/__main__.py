#!/usr/bin/env python3
"""
LinkedIn Sales Navigator - tool server

Exposes LinkedIn profile, search, Sales Navigator and messaging capabilities
over MCP (stdio, default) or HTTP.

Usage:
    LI_AT_COOKIE=... python -m linkedin_navigator_pkg
    LI_AT_COOKIE=... python -m linkedin_navigator_pkg --http --port 8000
"""
import argparse
import asyncio
import sys
from typing import List, Optional

import uvicorn

from .app import create_app
from .client import LinkedInClient
from .config import LOG_LEVEL, ClientConfig
from .exceptions import ConfigurationError
from .scraper_logging import configure_logging
from .server import serve_stdio


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LinkedIn Sales Navigator tool server")
    parser.add_argument("--http", action="store_true", help="Serve HTTP instead of MCP over stdio")
    parser.add_argument("--host", default="127.0.0.1", help="HTTP bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="HTTP port (default: 8000)")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (default: INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = ClientConfig.from_env()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.http:
        uvicorn.run(create_app(config=config), host=args.host, port=args.port, log_level=args.log_level.lower())
    else:
        asyncio.run(serve_stdio(LinkedInClient(config)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
