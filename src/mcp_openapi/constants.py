#!/usr/bin/env python3
"""
Top-level constants shared across the mcp_openapi package.
"""

from enum import IntEnum

# ---------------------------------------------------------------------------
# JSON-RPC
# ---------------------------------------------------------------------------
JSONRPC_VERSION = "2.0"
JSONRPC_KEY = "jsonrpc"

# JSON-RPC message keys
KEY_METHOD = "method"
KEY_PARAMS = "params"
KEY_ID = "id"
KEY_RESULT = "result"
KEY_ERROR = "error"
KEY_META = "_meta"


class JsonRpcError(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


# MCP error codes beyond JSON-RPC standard
MCP_ERROR_RESOURCE_NOT_FOUND = -32002


# ---------------------------------------------------------------------------
# MCP protocol
# ---------------------------------------------------------------------------
MCP_PROTOCOL_VERSION = "2024-11-05"


class McpMethod:
    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    RESOURCES_LIST = "resources/list"
    RESOURCES_READ = "resources/read"
    PROMPTS_LIST = "prompts/list"
    PROMPTS_GET = "prompts/get"


# MCP initialize parameter keys
KEY_CLIENT_INFO = "clientInfo"
KEY_PROTOCOL_VERSION = "protocolVersion"
KEY_SERVER_INFO = "serverInfo"
KEY_CAPABILITIES = "capabilities"


# ---------------------------------------------------------------------------
# Server identity
# ---------------------------------------------------------------------------
SERVER_NAME = "mcp-openapi"
SERVER_VERSION = "1.0.0"
PACKAGE_LOGGER = "mcp_openapi"
SECURITY_LOGGER = "mcp_openapi.security"
HTTP_PROTOCOL_DESCRIPTION = "MCP Streaming HTTP (SSE placeholder)"

# Special readable describing everything this server generated
SERVER_INFO_URI = "mcp-openapi://server/info"
SERVER_INFO_NAME = "MCP OpenAPI Server Information"
SERVER_INFO_DESCRIPTION = "Detailed information about loaded OpenAPI specs, tools, resources, and prompts"


# ---------------------------------------------------------------------------
# Content types
# ---------------------------------------------------------------------------
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_TEXT = "text"


# ---------------------------------------------------------------------------
# Common HTTP headers
# ---------------------------------------------------------------------------
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_AUTHORIZATION = "Authorization"
HEADER_MCP_SESSION_ID = "Mcp-Session-Id"
HEADER_USER_TOKEN = "X-User-Token"
HEADER_DEFAULT_API_KEY = "X-API-Key"
BEARER_PREFIX = "Bearer "
BASIC_PREFIX = "Basic "


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------
ENV_USER_API_TOKEN = "USER_API_TOKEN"
ENV_MCP_USER_TOKEN = "MCP_USER_TOKEN"
ENV_MCP_LOG_LEVEL = "MCP_LOG_LEVEL"


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 4000
DEFAULT_ENCODING = "utf-8"
DEFAULT_BASE_URL = "http://localhost:3001"
DEFAULT_SPECS_DIR = "./examples/specs"
DEFAULT_CONFIG_FILE = "./examples/mcp-config.json"
DEFAULT_PROMPTS_DIR = "./examples/prompts"
DEFAULT_MAX_TOOL_NAME_LENGTH = 48
DEFAULT_MAX_RESPONSE_SIZE_MB = 50
DEFAULT_MAX_MESSAGE_BYTES = DEFAULT_MAX_RESPONSE_SIZE_MB * 1024 * 1024
DEFAULT_CLIENT_TIMEOUT_MS = 30000
TOOL_NAME_ELLIPSIS = "..."

# Sessions idle longer than this are swept
SESSION_TTL_SECONDS = 30 * 60
SESSION_SWEEP_INTERVAL_SECONDS = 5 * 60


# ---------------------------------------------------------------------------
# OpenAPI
# ---------------------------------------------------------------------------
SPEC_ID_EXTENSION = "x-spec-id"
SPEC_FILE_SUFFIXES = (".yaml", ".yml", ".json")
PROMPT_FILE_SUFFIX = ".json"


class HttpVerb:
    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"


SUPPORTED_VERBS = (HttpVerb.GET, HttpVerb.POST, HttpVerb.PUT, HttpVerb.PATCH, HttpVerb.DELETE)
MUTATING_VERBS = frozenset({HttpVerb.POST, HttpVerb.PUT, HttpVerb.PATCH, HttpVerb.DELETE})

# Verb abbreviations used inside generated tool names
VERB_ABBREVIATIONS = {
    HttpVerb.GET: "get",
    HttpVerb.POST: "create",
    HttpVerb.PUT: "update",
    HttpVerb.PATCH: "patch",
    HttpVerb.DELETE: "delete",
}

# Read operations that look like business logic become tools
COMPLEX_PARAM_KEYWORDS = ("search", "filter", "query", "analyze")
BUSINESS_LOGIC_VERBS = ("search", "analyze", "calculate", "generate", "process", "compute")


# ---------------------------------------------------------------------------
# Backend outcome taxonomy
# ---------------------------------------------------------------------------
class OutcomeKind:
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    HTTP_ERROR = "HTTP_ERROR"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    READ_FAILED = "READ_FAILED"
