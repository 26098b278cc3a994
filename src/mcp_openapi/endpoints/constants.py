#!/usr/bin/env python3
# src/mcp_openapi/endpoints/constants.py
"""
Endpoint constants - HTTP status codes, URL paths and canned messages.
"""

from enum import IntEnum


class HttpStatus(IntEnum):
    OK = 200
    ACCEPTED = 202
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    REQUEST_ENTITY_TOO_LARGE = 413


# URL paths
PATH_MCP = "/mcp"
PATH_HEALTH = "/health"
PATH_INFO = "/info"

HEADER_CACHE_CONTROL = "Cache-Control"
CACHE_NO_STORE = "no-cache"

STATUS_OK = "ok"

# GET /mcp until server-sent streaming exists
SSE_NOT_IMPLEMENTED = "SSE streaming not yet implemented"
SSE_NOT_IMPLEMENTED_NOTE = "This endpoint will support Server-Sent Events in a future update"
ERROR_MISSING_SESSION = "Missing Mcp-Session-Id header"
ERROR_INVALID_SESSION = "Invalid or expired session"
ERROR_EMPTY_BODY = "Parse error: Empty body"
ERROR_BODY_TOO_LARGE = "Request body too large"
