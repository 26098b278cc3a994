#!/usr/bin/env python3
# src/mcp_openapi/protocol/__init__.py
"""
Protocol package - JSON-RPC routing and session management.
"""

from .handler import MCPProtocolHandler, ServerCapabilities, ServerInfo
from .session_manager import Session, SessionManager

__all__ = ["MCPProtocolHandler", "ServerCapabilities", "ServerInfo", "Session", "SessionManager"]
