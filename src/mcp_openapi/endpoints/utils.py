#!/usr/bin/env python3
# src/mcp_openapi/endpoints/utils.py
"""
JSON response helpers for the HTTP endpoints.
"""

from typing import Any

import orjson
from starlette.responses import Response

from ..constants import CONTENT_TYPE_JSON, JSONRPC_KEY, JSONRPC_VERSION, KEY_ERROR, KEY_ID
from .constants import CACHE_NO_STORE, HEADER_CACHE_CONTROL, HttpStatus


def json_response(
    data: dict[str, Any] | list[Any],
    status_code: int = HttpStatus.OK,
    headers: dict[str, str] | None = None,
) -> Response:
    """Serialize with orjson and disable caching."""
    all_headers = {HEADER_CACHE_CONTROL: CACHE_NO_STORE}
    if headers:
        all_headers.update(headers)
    return Response(orjson.dumps(data), status_code=status_code, media_type=CONTENT_TYPE_JSON, headers=all_headers)


def jsonrpc_error_response(msg_id: Any, code: int, message: str, status_code: int = HttpStatus.OK) -> Response:
    body = {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_ERROR: {"code": int(code), "message": message}}
    return json_response(body, status_code=status_code)
