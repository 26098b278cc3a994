#!/usr/bin/env python3
# src/mcp_openapi/__init__.py
"""
mcp-openapi - expose REST APIs described by OpenAPI documents as MCP tools,
resources and prompts.

    from mcp_openapi import OpenAPIMCPServer, ServerOptions

    server = OpenAPIMCPServer(ServerOptions(specs_dir="./specs", http=True))
    server.run_http()
"""

from .catalogue import Catalogue, build_catalogue
from .config import ServerConfig, ServerOptions
from .constants import SERVER_VERSION
from .dispatcher import RequestDispatcher
from .errors import MCPError
from .server import OpenAPIMCPServer

__version__ = SERVER_VERSION
__all__ = [
    "Catalogue",
    "MCPError",
    "OpenAPIMCPServer",
    "RequestDispatcher",
    "ServerConfig",
    "ServerOptions",
    "build_catalogue",
]
