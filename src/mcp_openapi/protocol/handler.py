#!/usr/bin/env python3
# src/mcp_openapi/protocol/handler.py
"""
MCP Protocol Handler - JSON-RPC routing for the OpenAPI capability catalogue.

Protocol problems (bad message, unknown method, unknown tool, resource or
prompt) come back as JSON-RPC errors. Backend outcomes are already folded
into successful results by the dispatcher.
"""

import asyncio
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..auth import AuthContext, extract_auth_context
from ..catalogue import Catalogue
from ..constants import (
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_CAPABILITIES,
    KEY_CLIENT_INFO,
    KEY_ERROR,
    KEY_ID,
    KEY_METHOD,
    KEY_PARAMS,
    KEY_PROTOCOL_VERSION,
    KEY_RESULT,
    KEY_SERVER_INFO,
    MCP_PROTOCOL_VERSION,
    SERVER_NAME,
    SERVER_VERSION,
    JsonRpcError,
    McpMethod,
)
from ..dispatcher import RequestDispatcher
from ..errors import MCPError, PromptNotFound
from ..prompts import render_prompt
from .session_manager import SessionManager

logger = logging.getLogger(__name__)


# ============================================================================
# Server identity
# ============================================================================


class ServerInfo(BaseModel):
    name: str = SERVER_NAME
    version: str = SERVER_VERSION


class ListChanged(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    list_changed: bool = Field(default=True, alias="listChanged")


class ResourcesCapability(ListChanged):
    subscribe: bool = False


class ServerCapabilities(BaseModel):
    tools: ListChanged = Field(default_factory=ListChanged)
    resources: ResourcesCapability = Field(default_factory=ResourcesCapability)
    prompts: ListChanged = Field(default_factory=ListChanged)


# ============================================================================
# Protocol Handler
# ============================================================================


class MCPProtocolHandler:
    """Core MCP protocol handler."""

    def __init__(
        self,
        catalogue: Catalogue,
        dispatcher: RequestDispatcher,
        session_manager: SessionManager | None = None,
        server_info: ServerInfo | None = None,
        capabilities: ServerCapabilities | None = None,
    ):
        self.catalogue = catalogue
        self.dispatcher = dispatcher
        self.session_manager = session_manager or SessionManager()
        self.server_info = server_info or ServerInfo()
        self.capabilities = capabilities or ServerCapabilities()

        # Don't log during init to keep stdio mode clean
        logger.debug("MCP protocol handler initialized")

    async def handle_request(
        self,
        message: dict[str, Any],
        session_id: str | None = None,
        auth_context: AuthContext | None = None,
    ) -> tuple[dict[str, Any] | None, str | None]:
        """Handle an MCP request.

        Returns the response (None for notifications) and, for ``initialize``,
        the id of the session it created.
        """
        msg_id = message.get(KEY_ID) if isinstance(message, dict) else None
        try:
            if not isinstance(message, dict) or not isinstance(message.get(KEY_METHOD), str):
                return self._create_error_response(msg_id, JsonRpcError.INVALID_REQUEST, "Invalid Request"), None

            method = message[KEY_METHOD]
            params = message.get(KEY_PARAMS) or {}
            if not isinstance(params, dict):
                return self._create_error_response(
                    msg_id, JsonRpcError.INVALID_PARAMS, "params must be an object"
                ), None

            logger.debug(f"Handling {method} (ID: {msg_id}, session: {session_id[:8] if session_id else '-'})")

            if auth_context is None:
                auth_context = extract_auth_context(params=params)

            # Route to appropriate handler
            if method == McpMethod.INITIALIZE:
                return self._handle_initialize(params, msg_id, auth_context)
            elif method == McpMethod.INITIALIZED:
                logger.debug("MCP client initialized successfully")
                return None, None
            elif method == McpMethod.PING:
                return self._result(msg_id, {}), None
            elif method == McpMethod.TOOLS_LIST:
                logger.debug(f"Returning {len(self.catalogue.tools)} tools")
                return self._result(msg_id, {"tools": self.catalogue.tools_list()}), None
            elif method == McpMethod.TOOLS_CALL:
                return await self._handle_tools_call(params, msg_id, auth_context), None
            elif method == McpMethod.RESOURCES_LIST:
                logger.debug(f"Returning {len(self.catalogue.resources)} resources")
                return self._result(msg_id, {"resources": self.catalogue.resources_list()}), None
            elif method == McpMethod.RESOURCES_READ:
                return await self._handle_resources_read(params, msg_id, auth_context), None
            elif method == McpMethod.PROMPTS_LIST:
                logger.debug(f"Returning {len(self.catalogue.prompts)} prompts")
                return self._result(msg_id, {"prompts": self.catalogue.prompts_list()}), None
            elif method == McpMethod.PROMPTS_GET:
                return self._handle_prompts_get(params, msg_id), None
            elif msg_id is None:
                logger.debug(f"Ignoring unknown notification {method}")
                return None, None
            else:
                return self._create_error_response(
                    msg_id, JsonRpcError.METHOD_NOT_FOUND, f"Method not found: {method}"
                ), None

        except asyncio.CancelledError:
            raise  # Never swallow cancellation
        except MCPError as e:
            logger.debug(f"MCP error for request {msg_id}: {e.to_message()}")
            return self._create_error_response(msg_id, e.code, e.to_message()), None
        except Exception as e:
            logger.error(f"Error handling request: {e}", exc_info=True)
            return self._create_error_response(msg_id, JsonRpcError.INTERNAL_ERROR, "Internal server error"), None

    def _handle_initialize(
        self, params: dict[str, Any], msg_id: Any, auth_context: AuthContext
    ) -> tuple[dict[str, Any], str]:
        client_info = params.get(KEY_CLIENT_INFO) or {}
        protocol_version = params.get(KEY_PROTOCOL_VERSION, MCP_PROTOCOL_VERSION)

        session_id = self.session_manager.create_session(client_info, protocol_version, auth_context)

        result = {
            KEY_PROTOCOL_VERSION: MCP_PROTOCOL_VERSION,
            KEY_CAPABILITIES: self.capabilities.model_dump(by_alias=True),
            KEY_SERVER_INFO: self.server_info.model_dump(exclude_none=True),
        }
        logger.debug(f"Initialized session {session_id[:8]}... for {client_info.get('name', 'unknown')}")
        return self._result(msg_id, result), session_id

    async def _handle_tools_call(self, params: dict[str, Any], msg_id: Any, auth_context: AuthContext) -> dict[str, Any]:
        tool_name = params.get("name")
        arguments = params.get("arguments") or {}

        if not tool_name:
            return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, "Tool name is required")
        if not isinstance(arguments, dict):
            return self._create_error_response(
                msg_id, JsonRpcError.INVALID_PARAMS, f"arguments must be an object, got {type(arguments).__name__}"
            )

        result = await self.dispatcher.invoke_action(tool_name, arguments, auth_context)
        return self._result(msg_id, result)

    async def _handle_resources_read(
        self, params: dict[str, Any], msg_id: Any, auth_context: AuthContext
    ) -> dict[str, Any]:
        uri = params.get("uri")
        parameters = params.get("parameters") or {}

        if not uri:
            return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, "Resource URI is required")
        if not isinstance(parameters, dict):
            return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, "parameters must be an object")

        result = await self.dispatcher.read_resource(uri, auth_context, parameters)
        logger.debug(f"Read resource {uri}")
        return self._result(msg_id, result)

    def _handle_prompts_get(self, params: dict[str, Any], msg_id: Any) -> dict[str, Any]:
        prompt_name = params.get("name")
        arguments = params.get("arguments") or {}

        if not prompt_name:
            return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, "Prompt name is required")

        prompt = self.catalogue.get_prompt(prompt_name)
        if prompt is None:
            raise PromptNotFound(prompt_name)

        logger.debug(f"Generated prompt {prompt_name}")
        return self._result(msg_id, render_prompt(prompt, arguments))

    @staticmethod
    def _result(msg_id: Any, result: dict[str, Any]) -> dict[str, Any]:
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_RESULT: result}

    @staticmethod
    def _create_error_response(msg_id: Any, code: int, message: str) -> dict[str, Any]:
        """Create error response."""
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_ERROR: {"code": int(code), "message": message}}
