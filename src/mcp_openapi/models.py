#!/usr/bin/env python3
# src/mcp_openapi/models.py
"""
Data models for loaded OpenAPI documents and the generated capabilities.

Operations and documents are parsed once at load time into frozen
dataclasses; tools, resources and prompts carry a ``to_mcp_format()``
that produces the wire shape used by the list methods.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CapabilityKind(str, Enum):
    """What an operation becomes in the catalogue."""

    TOOL = "tool"
    RESOURCE = "resource"


class ParameterLocation(str, Enum):
    PATH = "path"
    QUERY = "query"


# ============================================================================
# OpenAPI document model
# ============================================================================


@dataclass(frozen=True)
class Parameter:
    """A path or query parameter declared on an operation."""

    name: str
    location: ParameterLocation
    required: bool = False
    schema: dict[str, Any] | None = None
    description: str | None = None


@dataclass(frozen=True)
class Operation:
    """One HTTP verb on one path."""

    verb: str
    summary: str | None = None
    description: str | None = None
    parameters: tuple[Parameter, ...] = ()
    request_body_schema: dict[str, Any] | None = None

    def parameters_in(self, location: ParameterLocation) -> list[Parameter]:
        return [p for p in self.parameters if p.location == location]


@dataclass(frozen=True)
class SpecDocument:
    """A parsed OpenAPI document keyed by its spec identifier."""

    spec_id: str
    title: str
    version: str
    # path pattern -> verb -> Operation, in document order
    paths: dict[str, dict[str, Operation]]
    source_file: str | None = None

    def operations(self) -> list[tuple[str, str, Operation]]:
        """Flatten to (path, verb, operation) triples in document order."""
        return [(path, verb, op) for path, verbs in self.paths.items() for verb, op in verbs.items()]


# ============================================================================
# Generated capabilities
# ============================================================================


@dataclass(frozen=True)
class OperationRef:
    """Identity of the operation a capability was generated from."""

    spec_id: str
    path: str
    verb: str

    def __str__(self) -> str:
        return f"{self.spec_id} {self.verb.upper()} {self.path}"


@dataclass(frozen=True)
class Tool:
    """An invocable action generated from an operation."""

    name: str
    description: str
    input_schema: dict[str, Any]
    operation: OperationRef
    overridden: bool = False

    def to_mcp_format(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema}


@dataclass(frozen=True)
class ResourceParameter:
    name: str
    description: str | None = None
    required: bool = False
    schema: dict[str, Any] = field(default_factory=lambda: {"type": "string"})

    def to_mcp_format(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "required": self.required,
            "schema": self.schema,
        }


@dataclass(frozen=True)
class Resource:
    """A readable generated from a GET operation."""

    uri: str
    name: str
    description: str
    mime_type: str
    parameters: tuple[ResourceParameter, ...] = ()
    operation: OperationRef | None = None
    overridden: bool = False

    def to_mcp_format(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }
        if self.parameters:
            data["parameters"] = [p.to_mcp_format() for p in self.parameters]
        return data


# ============================================================================
# Prompts
# ============================================================================


@dataclass(frozen=True)
class PromptArgument:
    name: str
    description: str | None = None
    required: bool = False

    def to_mcp_format(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "required": self.required}
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class PromptSpec:
    """A prompt template loaded from a JSON file."""

    name: str
    template: str
    description: str | None = None
    arguments: tuple[PromptArgument, ...] = ()

    def to_mcp_format(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description or f"{self.name} prompt template",
            "arguments": [a.to_mcp_format() for a in self.arguments],
        }
