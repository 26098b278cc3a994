#!/usr/bin/env python3
# src/mcp_openapi/cli.py
"""
CLI entry point for mcp-openapi.

Runs the server over stdio by default, or over HTTP with ``--http``.
"""

import argparse
import logging
import os
import sys

from .config import ServerOptions
from .constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_MAX_TOOL_NAME_LENGTH,
    DEFAULT_PORT,
    DEFAULT_PROMPTS_DIR,
    DEFAULT_SPECS_DIR,
    ENV_MCP_LOG_LEVEL,
    SERVER_NAME,
    SERVER_VERSION,
)
from .errors import MCPError
from .server import OpenAPIMCPServer

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Set up logging configuration.

    Always logs to stderr; stdout is the stdio protocol channel.
    """
    level_name = os.environ.get(ENV_MCP_LOG_LEVEL)
    level = logging.DEBUG if debug else logging.INFO
    if level_name:
        level = logging.getLevelName(level_name.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="Generate MCP tools, resources and prompts from OpenAPI specifications",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {SERVER_VERSION}")
    parser.add_argument(
        "-s", "--specs", default=DEFAULT_SPECS_DIR, help="Directory containing OpenAPI specifications"
    )
    parser.add_argument("-c", "--config", default=DEFAULT_CONFIG_FILE, help="Configuration file path")
    parser.add_argument(
        "-p", "--prompts", default=DEFAULT_PROMPTS_DIR, help="Directory containing prompt specifications"
    )
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port for HTTP server mode")
    parser.add_argument("--base-url", help="Base URL for backend APIs (overrides config file)")
    parser.add_argument(
        "--max-tool-name-length",
        type=int,
        default=DEFAULT_MAX_TOOL_NAME_LENGTH,
        help="Maximum length for generated tool names",
    )
    parser.add_argument("--http", action="store_true", help="Run in HTTP server mode instead of stdio")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    return parser


def options_from_args(args: argparse.Namespace) -> ServerOptions:
    return ServerOptions(
        specs_dir=args.specs,
        config_file=args.config,
        prompts_dir=args.prompts,
        port=args.port,
        base_url=args.base_url,
        max_tool_name_length=args.max_tool_name_length,
        verbose=args.verbose,
        http=args.http,
    )


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.verbose)

    options = options_from_args(args)
    server = OpenAPIMCPServer(options)

    try:
        server.initialize()
        if options.http:
            server.run_http()
        else:
            server.run_stdio()
    except MCPError as e:
        logger.error(f"Failed to start server: {e.to_message()}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Server stopped")


if __name__ == "__main__":
    main()
