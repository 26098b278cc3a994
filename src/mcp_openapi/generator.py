#!/usr/bin/env python3
# src/mcp_openapi/generator.py
"""
CapabilityGenerator - externally visible shape of each capability.

Tools get a short deterministic name and a flattened input schema; resources
get a ``<spec-id>://<path>`` URI and a parameter list. Request bodies are
merged one level deep only; nested schemas are passed through untouched.
"""

import logging
import re
from typing import Any

from .config import OverrideRule, ServerConfig
from .constants import (
    CONTENT_TYPE_JSON,
    DEFAULT_MAX_TOOL_NAME_LENGTH,
    HttpVerb,
    TOOL_NAME_ELLIPSIS,
    VERB_ABBREVIATIONS,
)
from .models import (
    Operation,
    OperationRef,
    ParameterLocation,
    Resource,
    ResourceParameter,
    Tool,
)

logger = logging.getLogger(__name__)

PATH_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")
_VERSION_PREFIX_RE = re.compile(r"^/v\d+")
_SEGMENT_PARAM_RE = re.compile(r"^\{(.+)\}$")


def path_placeholders(path: str) -> list[str]:
    """Names of every ``{placeholder}`` in a path, in order."""
    return PATH_PLACEHOLDER_RE.findall(path)


def generate_tool_name(spec_id: str, path: str, verb: str, max_length: int = DEFAULT_MAX_TOOL_NAME_LENGTH) -> str:
    """Build ``<specId>_<verb>_<resource>[_<params>][_<subresources>]`` within ``max_length``.

    Parameters and sub-resources are only appended while the name still fits;
    a base name that is already too long is cut and marked with an ellipsis.
    """
    clean_path = _VERSION_PREFIX_RE.sub("", path).lstrip("/")
    segments = [s for s in clean_path.split("/") if s]

    resource_parts: list[str] = []
    param_parts: list[str] = []
    for segment in segments:
        match = _SEGMENT_PARAM_RE.match(segment)
        if match:
            param_parts.append(re.sub(r"Id$", "", match.group(1)))
        else:
            resource_parts.append(segment)

    main_resource = resource_parts[0] if resource_parts else "resource"
    verb_name = VERB_ABBREVIATIONS.get(verb.lower(), verb.lower())
    name = f"{spec_id}_{verb_name}_{main_resource}"

    if param_parts:
        suffix = "_".join(param_parts)
        if len(name) + len(suffix) + 1 <= max_length:
            name += "_" + suffix

    sub_resources = [part for part in resource_parts[1:] if part not in main_resource]
    if sub_resources:
        suffix = "_".join(sub_resources)
        if len(name) + len(suffix) + 1 <= max_length:
            name += "_" + suffix

    if len(name) > max_length:
        name = name[: max_length - len(TOOL_NAME_ELLIPSIS)] + TOOL_NAME_ELLIPSIS

    return name


def build_input_schema(path: str, operation: Operation) -> dict[str, Any]:
    properties: dict[str, Any] = {}
    required: list[str] = []

    for name in path_placeholders(path):
        properties[name] = {"type": "string", "description": f"Path parameter: {name}"}
        required.append(name)

    for param in operation.parameters_in(ParameterLocation.QUERY):
        prop: dict[str, Any] = {"type": (param.schema or {}).get("type", "string")}
        if param.description is not None:
            prop["description"] = param.description
        properties[param.name] = prop
        if param.required:
            required.append(param.name)

    body = operation.request_body_schema or {}
    if isinstance(body.get("properties"), dict):
        properties.update(body["properties"])
        required.extend(body.get("required") or [])

    return {"type": "object", "properties": properties, "required": list(dict.fromkeys(required))}


def resource_uri_for(spec_id: str, path: str) -> str:
    return f"{spec_id}://{path[1:] if path.startswith('/') else path}"


class CapabilityGenerator:
    """Turn classified operations into Tool and Resource values."""

    def __init__(self, config: ServerConfig | None = None, max_tool_name_length: int = DEFAULT_MAX_TOOL_NAME_LENGTH):
        self.config = config or ServerConfig()
        self.max_tool_name_length = max_tool_name_length

    def _override(self, spec_id: str, path: str, verb: str) -> OverrideRule | None:
        return self.config.find_override(spec_id, path, verb)

    def name_for(self, spec_id: str, path: str, verb: str) -> str:
        override = self._override(spec_id, path, verb)
        if override is not None and override.tool_name:
            return override.tool_name
        return generate_tool_name(spec_id, path, verb, self.max_tool_name_length)

    def create_tool(self, spec_id: str, path: str, verb: str, operation: Operation) -> Tool:
        override = self._override(spec_id, path, verb)
        description = (
            (override.description if override else None)
            or operation.summary
            or operation.description
            or f"{verb.upper()} {path}"
        )
        return Tool(
            name=self.name_for(spec_id, path, verb),
            description=description,
            input_schema=build_input_schema(path, operation),
            operation=OperationRef(spec_id, path, verb),
            overridden=override is not None,
        )

    def create_resource(self, spec_id: str, path: str, verb: str, operation: Operation) -> Resource:
        override = self._override(spec_id, path, verb)
        uri = (override.resource_uri if override else None) or resource_uri_for(spec_id, path)
        description = (
            (override.description if override else None)
            or operation.description
            or f"Data from {verb.upper()} {path}"
        )
        parameters = tuple(
            ResourceParameter(
                name=p.name,
                description=p.description,
                required=p.required,
                schema=p.schema or {"type": "string"},
            )
            for p in operation.parameters
        )
        if verb.lower() != HttpVerb.GET:
            logger.debug(f"{verb.upper()} {path} exposed as a resource by override; reads are sent as GET")
        return Resource(
            uri=uri,
            name=operation.summary or f"{spec_id} {path}",
            description=description,
            mime_type=CONTENT_TYPE_JSON,
            parameters=parameters,
            operation=OperationRef(spec_id, path, verb),
            overridden=override is not None,
        )
