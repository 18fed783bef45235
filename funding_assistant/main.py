"""
Command line entry point for the funding assistant MCP server.

Transports:
- stdio: for local MCP clients that spawn the server
- sse: legacy HTTP+SSE transport served by FastMCP
- streamable-http: FastAPI app (see http_app) served by uvicorn
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn

from .config import TRANSPORTS, load_config, load_settings
from .http_app import create_app
from .observability import setup_logger
from .server import create_server


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="funding-assistant", description=__doc__.splitlines()[1])
    parser.add_argument("--transport", choices=TRANSPORTS, help="Overrides MCP_TRANSPORT and the config file")
    parser.add_argument("--config", type=Path, help="Path to a YAML config file")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    try:
        settings = load_settings(load_config(args.config) if args.config else None)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(2)

    logger = setup_logger(settings.server.log_level)
    transport = args.transport or settings.server.transport
    server_cfg = settings.server

    try:
        if transport == "streamable-http":
            app = create_app(settings)
            logger.info(f"Starting MCP server on http://{server_cfg.host}:{server_cfg.port}/mcp")
            uvicorn.run(
                app,
                host=server_cfg.host,
                port=server_cfg.port,
                log_level=server_cfg.log_level.lower(),
                server_header=False,
            )
        else:
            logger.info(f"Starting MCP server over {transport}")
            create_server(settings).run(transport=transport)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
        sys.exit(0)
    except Exception as exc:
        logger.error(f"Failed to start MCP server: {exc}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
