"""
Structured error types for mcp-openapi.

Protocol-level failures carry a JSON-RPC code and an optional fix suggestion.
Backend API outcomes are never raised through here; see ``dispatcher``.
"""

from difflib import get_close_matches

from .constants import MCP_ERROR_RESOURCE_NOT_FOUND, JsonRpcError


class MCPError(Exception):
    """Structured MCP error with fix suggestions."""

    def __init__(
        self,
        message: str,
        code: int = JsonRpcError.INTERNAL_ERROR,
        suggestion: str | None = None,
    ):
        self.code = code
        self.suggestion = suggestion
        super().__init__(message)

    def to_message(self) -> str:
        """Format the error with suggestion."""
        parts = [str(self)]
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


class ConfigurationError(MCPError):
    """The configuration file parsed but failed validation."""

    def __init__(self, section: str, problems: list[str]):
        self.section = section
        self.problems = problems
        super().__init__(f"{section} configuration errors: {'; '.join(problems)}")


class CapabilityNotFound(MCPError):
    """An action name, or the spec/path behind it, could not be resolved."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message, code=JsonRpcError.INVALID_PARAMS, suggestion=suggestion)


class ResourceNotFound(MCPError):
    """No declared readable matches the requested URI."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Resource {uri} not found", code=MCP_ERROR_RESOURCE_NOT_FOUND)


class PromptNotFound(MCPError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Prompt {name} not found", code=JsonRpcError.INVALID_PARAMS)


class MissingSession(MCPError):
    def __init__(self) -> None:
        super().__init__(
            "Missing Mcp-Session-Id header. Call initialize first.",
            code=JsonRpcError.INVALID_PARAMS,
        )


class InvalidSession(MCPError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__("Invalid or expired session. Please reinitialize.", code=JsonRpcError.INTERNAL_ERROR)


class DuplicateCapabilityError(MCPError):
    """Two operations produced the same action name."""

    def __init__(self, name: str, first: str, second: str):
        self.name = name
        super().__init__(
            f"Tool name '{name}' generated for both {first} and {second}",
            suggestion="Add an override with an explicit toolName for one of the operations",
        )


class TransportError(Exception):
    """The backend call produced no usable response."""


def suggest_tool_name(tool_name: str, available_tools: list[str]) -> str | None:
    """Find the closest matching tool name using fuzzy matching.

    Args:
        tool_name: The unknown tool name.
        available_tools: List of registered tool names.

    Returns:
        The closest match, or None if no good match found.
    """
    matches = get_close_matches(tool_name, available_tools, n=1, cutoff=0.6)
    return matches[0] if matches else None


def unknown_tool_error(tool_name: str, available_tools: list[str]) -> CapabilityNotFound:
    """Build a CapabilityNotFound for an unknown tool, with a did-you-mean hint."""
    suggestion = suggest_tool_name(tool_name, available_tools)
    if suggestion:
        return CapabilityNotFound(f"Tool {tool_name} not found", suggestion=f"Did you mean '{suggestion}'?")
    if available_tools:
        names = ", ".join(sorted(available_tools)[:10])
        suffix = "..." if len(available_tools) > 10 else ""
        return CapabilityNotFound(f"Tool {tool_name} not found", suggestion=f"Available tools: {names}{suffix}")
    return CapabilityNotFound(f"Tool {tool_name} not found", suggestion="No tools are registered.")
