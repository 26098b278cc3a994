#!/usr/bin/env python3
# src/mcp_openapi/endpoints/__init__.py
"""
HTTP endpoints.
"""

from .health import handle_health, handle_info
from .mcp import handle_get, handle_post

__all__ = ["handle_get", "handle_health", "handle_info", "handle_post"]
