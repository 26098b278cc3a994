#!/usr/bin/env python3
# src/mcp_openapi/catalogue.py
"""
The capability catalogue.

Built once from a SpecRegistry and never mutated afterwards. Tool identity is
kept in an explicit name index, so dispatch never has to parse a tool name
back into a spec, path and verb.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .classifier import CapabilityClassifier
from .constants import CONTENT_TYPE_JSON, SERVER_INFO_DESCRIPTION, SERVER_INFO_NAME, SERVER_INFO_URI
from .errors import DuplicateCapabilityError
from .generator import CapabilityGenerator
from .models import CapabilityKind, PromptSpec, Resource, Tool
from .registry import SpecRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogueEntry:
    """One generated capability, for the breakdown and server-info views."""

    spec_id: str
    spec_file: str
    path: str
    verb: str
    kind: CapabilityKind
    name: str
    description: str
    overridden: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "method": self.verb.upper(),
            "mcpType": self.kind.value,
            "mcpName": self.name,
            "description": self.description,
            "isOverridden": self.overridden,
        }


SERVER_INFO_RESOURCE = Resource(
    uri=SERVER_INFO_URI,
    name=SERVER_INFO_NAME,
    description=SERVER_INFO_DESCRIPTION,
    mime_type=CONTENT_TYPE_JSON,
)


class Catalogue:
    """Immutable set of tools, resources and prompts for one running server."""

    def __init__(
        self,
        tools: tuple[Tool, ...],
        resources: tuple[Resource, ...],
        prompts: tuple[PromptSpec, ...],
        entries: tuple[CatalogueEntry, ...],
        registry: SpecRegistry,
    ):
        self.tools = tools
        self.resources = resources
        self.prompts = prompts
        self.entries = entries
        self.registry = registry
        self._tools_by_name = MappingProxyType({t.name: t for t in tools})
        self._prompts_by_name = MappingProxyType({p.name: p for p in prompts})

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools_by_name)

    @property
    def resource_uris(self) -> list[str]:
        return [r.uri for r in self.resources]

    def get_tool(self, name: str) -> Tool | None:
        return self._tools_by_name.get(name)

    def get_prompt(self, name: str) -> PromptSpec | None:
        return self._prompts_by_name.get(name)

    def get_resource(self, uri: str) -> Resource | None:
        for resource in self.resources:
            if resource.uri == uri:
                return resource
        return None

    # ------------------------------------------------------------------
    # MCP views
    # ------------------------------------------------------------------

    def tools_list(self) -> list[dict[str, Any]]:
        return [t.to_mcp_format() for t in self.tools]

    def resources_list(self) -> list[dict[str, Any]]:
        return [r.to_mcp_format() for r in self.resources]

    def prompts_list(self) -> list[dict[str, Any]]:
        return [p.to_mcp_format() for p in self.prompts]

    def server_info(self) -> dict[str, Any]:
        """Breakdown of every loaded spec and what it generated."""
        specs = []
        for spec in self.registry:
            specs.append(
                {
                    "specId": spec.spec_id,
                    "specFile": spec.source_file or spec.spec_id,
                    "title": spec.title,
                    "version": spec.version,
                    "items": [e.to_dict() for e in self.entries if e.spec_id == spec.spec_id],
                }
            )
        return {
            "summary": {
                "totalSpecs": len(self.registry),
                "totalTools": len(self.tools),
                "totalResources": len(self.resources) - 1,
                "totalPrompts": len(self.prompts),
                "overriddenItems": len(self.registry.overrides),
            },
            "specs": specs,
            "prompts": [
                {"name": p.name, "description": p.description, "arguments": [a.to_mcp_format() for a in p.arguments]}
                for p in self.prompts
            ],
        }


def build_catalogue(
    registry: SpecRegistry,
    prompts: list[PromptSpec] | tuple[PromptSpec, ...] = (),
    max_tool_name_length: int | None = None,
) -> Catalogue:
    """Classify and generate every operation of every loaded spec.

    Raises:
        DuplicateCapabilityError: If two operations produce the same tool name.
    """
    classifier = CapabilityClassifier(registry.config)
    generator = (
        CapabilityGenerator(registry.config, max_tool_name_length)
        if max_tool_name_length is not None
        else CapabilityGenerator(registry.config)
    )

    tools: dict[str, Tool] = {}
    resources: dict[str, Resource] = {}
    entries: list[CatalogueEntry] = []

    for spec in registry:
        spec_file = spec.source_file or spec.spec_id
        for path, verb, operation in spec.operations():
            kind = classifier.classify(spec.spec_id, path, verb, operation)

            if kind == CapabilityKind.TOOL:
                tool = generator.create_tool(spec.spec_id, path, verb, operation)
                if tool.name in tools:
                    raise DuplicateCapabilityError(tool.name, str(tools[tool.name].operation), str(tool.operation))
                tools[tool.name] = tool
                name, description, overridden = tool.name, tool.description, tool.overridden
            else:
                resource = generator.create_resource(spec.spec_id, path, verb, operation)
                if resource.uri in resources:
                    logger.warning(f"Resource URI {resource.uri} generated twice; keeping the first")
                    continue
                resources[resource.uri] = resource
                name, description, overridden = resource.name, resource.description, resource.overridden

            entries.append(CatalogueEntry(spec.spec_id, spec_file, path, verb, kind, name, description, overridden))

    prompt_map: dict[str, PromptSpec] = {}
    for prompt in prompts:
        prompt_map[prompt.name] = prompt

    return Catalogue(
        tools=tuple(tools.values()),
        resources=(*resources.values(), SERVER_INFO_RESOURCE),
        prompts=tuple(prompt_map.values()),
        entries=tuple(entries),
        registry=registry,
    )
