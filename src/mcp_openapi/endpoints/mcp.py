#!/usr/bin/env python3
# src/mcp_openapi/endpoints/mcp.py
"""
MCP streaming HTTP endpoint.

POST carries one JSON-RPC message per request. Every method except
``initialize`` must present the ``Mcp-Session-Id`` returned by initialize;
the caller token captured at initialize is reused for the whole session.
"""

import logging

import orjson
from starlette.requests import Request
from starlette.responses import Response

from ..auth import extract_auth_context
from ..constants import HEADER_MCP_SESSION_ID, KEY_ID, KEY_METHOD, KEY_PARAMS, JsonRpcError, McpMethod
from ..errors import InvalidSession, MissingSession
from ..protocol import MCPProtocolHandler
from .constants import (
    ERROR_BODY_TOO_LARGE,
    ERROR_EMPTY_BODY,
    ERROR_INVALID_SESSION,
    ERROR_MISSING_SESSION,
    SSE_NOT_IMPLEMENTED,
    SSE_NOT_IMPLEMENTED_NOTE,
    HttpStatus,
)
from .utils import json_response, jsonrpc_error_response

logger = logging.getLogger(__name__)


def _protocol(request: Request) -> MCPProtocolHandler:
    return request.app.state.protocol


async def handle_post(request: Request) -> Response:
    """Route one JSON-RPC message through the protocol handler."""
    protocol = _protocol(request)

    body = await request.body()
    if len(body) > request.app.state.max_request_bytes:
        return jsonrpc_error_response(
            None, JsonRpcError.INVALID_REQUEST, ERROR_BODY_TOO_LARGE, HttpStatus.REQUEST_ENTITY_TOO_LARGE
        )
    if not body:
        return jsonrpc_error_response(None, JsonRpcError.PARSE_ERROR, ERROR_EMPTY_BODY, HttpStatus.BAD_REQUEST)
    try:
        message = orjson.loads(body)
    except orjson.JSONDecodeError as e:
        return jsonrpc_error_response(None, JsonRpcError.PARSE_ERROR, f"Parse error: {e}", HttpStatus.BAD_REQUEST)
    if not isinstance(message, dict):
        return jsonrpc_error_response(None, JsonRpcError.INVALID_REQUEST, "Invalid Request", HttpStatus.BAD_REQUEST)

    method = message.get(KEY_METHOD)
    msg_id = message.get(KEY_ID)
    session_id = request.headers.get(HEADER_MCP_SESSION_ID)
    logger.debug(f"MCP method call: {method}")

    if method == McpMethod.INITIALIZE:
        params = message.get(KEY_PARAMS)
        auth_context = extract_auth_context(request.headers, params if isinstance(params, dict) else None)
        session_id = None
    else:
        try:
            session = protocol.session_manager.touch(session_id)
        except MissingSession as e:
            return jsonrpc_error_response(msg_id, e.code, str(e), HttpStatus.BAD_REQUEST)
        except InvalidSession as e:
            return jsonrpc_error_response(msg_id, e.code, str(e), HttpStatus.UNAUTHORIZED)
        auth_context = session.auth_context

    response, new_session_id = await protocol.handle_request(message, session_id, auth_context)

    if response is None:
        return Response(status_code=HttpStatus.ACCEPTED)

    headers = {HEADER_MCP_SESSION_ID: new_session_id} if new_session_id else None
    return json_response(response, headers=headers)


async def handle_get(request: Request) -> Response:
    """Placeholder for the server-sent event stream."""
    session_id = request.headers.get(HEADER_MCP_SESSION_ID)
    try:
        _protocol(request).session_manager.touch(session_id)
    except MissingSession:
        return json_response({"error": ERROR_MISSING_SESSION}, status_code=HttpStatus.BAD_REQUEST)
    except InvalidSession:
        return json_response({"error": ERROR_INVALID_SESSION}, status_code=HttpStatus.UNAUTHORIZED)

    logger.debug(f"SSE stream requested for session {session_id} (not implemented yet)")
    return json_response({"message": SSE_NOT_IMPLEMENTED, "sessionId": session_id, "note": SSE_NOT_IMPLEMENTED_NOTE})
