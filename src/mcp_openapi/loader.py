#!/usr/bin/env python3
# src/mcp_openapi/loader.py
"""
Load OpenAPI documents and prompt templates from disk.

Unreadable directories and unparseable files are logged and skipped so a
single bad file only reduces the catalogue instead of aborting startup.
"""

import logging
from pathlib import Path
from typing import Any

import orjson
import yaml

from .constants import (
    CONTENT_TYPE_JSON,
    DEFAULT_ENCODING,
    PROMPT_FILE_SUFFIX,
    SPEC_FILE_SUFFIXES,
    SPEC_ID_EXTENSION,
    SUPPORTED_VERBS,
)
from .models import Operation, Parameter, ParameterLocation, PromptArgument, PromptSpec, SpecDocument

logger = logging.getLogger(__name__)


def _list_files(directory: str | Path, suffixes: tuple[str, ...]) -> list[Path]:
    root = Path(directory)
    if not root.is_dir():
        logger.warning(f"Directory {directory} does not exist, skipping")
        return []
    try:
        return sorted(p for p in root.iterdir() if p.is_file() and p.suffix in suffixes)
    except OSError as e:
        logger.warning(f"Could not read directory {directory}: {e}")
        return []


# ============================================================================
# OpenAPI parsing
# ============================================================================


def _parse_parameter(raw: Any) -> Parameter | None:
    if not isinstance(raw, dict) or "name" not in raw:
        return None
    try:
        location = ParameterLocation(raw.get("in"))
    except ValueError:
        # header and cookie parameters are not part of the capability surface
        return None
    schema = raw.get("schema")
    return Parameter(
        name=str(raw["name"]),
        location=location,
        required=bool(raw.get("required", False)),
        schema=schema if isinstance(schema, dict) else None,
        description=raw.get("description"),
    )


def _mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _request_body_schema(operation: dict[str, Any]) -> dict[str, Any] | None:
    body = operation.get("requestBody")
    content = body.get("content") if isinstance(body, dict) else None
    media = content.get(CONTENT_TYPE_JSON) if isinstance(content, dict) else None
    schema = media.get("schema") if isinstance(media, dict) else None
    return schema if isinstance(schema, dict) else None


def parse_operation(verb: str, operation: dict[str, Any], shared: list[Any] | None = None) -> Operation:
    """Build an Operation, merging path-level parameters under operation-level ones."""
    merged: dict[tuple[str, ParameterLocation], Parameter] = {}
    own = operation.get("parameters")
    for raw in [*(shared or []), *(own if isinstance(own, list) else [])]:
        param = _parse_parameter(raw)
        if param is not None:
            merged[(param.name, param.location)] = param

    return Operation(
        verb=verb,
        summary=operation.get("summary"),
        description=operation.get("description"),
        parameters=tuple(merged.values()),
        request_body_schema=_request_body_schema(operation),
    )


def parse_spec(raw: dict[str, Any], fallback_id: str, source_file: str | None = None) -> SpecDocument:
    """Turn a raw OpenAPI mapping into a SpecDocument.

    Raises:
        ValueError: If ``info`` or ``paths`` is present but not a mapping.
    """
    info = _mapping(raw, "info")
    spec_id = info.get(SPEC_ID_EXTENSION) or fallback_id

    paths: dict[str, dict[str, Operation]] = {}
    for path, path_item in _mapping(raw, "paths").items():
        if not isinstance(path_item, dict):
            continue
        shared = path_item.get("parameters")
        shared = shared if isinstance(shared, list) else []
        verbs: dict[str, Operation] = {}
        for key, operation in path_item.items():
            verb = str(key).lower()
            if verb not in SUPPORTED_VERBS or not isinstance(operation, dict):
                continue
            verbs[verb] = parse_operation(verb, operation, shared)
        if verbs:
            paths[str(path)] = verbs

    return SpecDocument(
        spec_id=str(spec_id),
        title=str(info.get("title", spec_id)),
        version=str(info.get("version", "")),
        paths=paths,
        source_file=source_file,
    )


class SpecLoader:
    """Load every OpenAPI document in a directory."""

    def load_file(self, path: Path) -> SpecDocument:
        content = path.read_text(encoding=DEFAULT_ENCODING)
        raw = orjson.loads(content) if path.suffix == ".json" else yaml.safe_load(content)
        if not isinstance(raw, dict):
            raise ValueError("document is not a mapping")
        return parse_spec(raw, fallback_id=path.stem, source_file=path.name)

    def load_all(self, directory: str | Path) -> list[SpecDocument]:
        specs: list[SpecDocument] = []
        for path in _list_files(directory, SPEC_FILE_SUFFIXES):
            try:
                spec = self.load_file(path)
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.error(f"Error loading spec {path.name}: {e}")
                continue
            logger.debug(f"Loaded OpenAPI spec: {spec.spec_id} (from {path.name})")
            specs.append(spec)
        return specs


# ============================================================================
# Prompts
# ============================================================================


def parse_prompt(raw: dict[str, Any]) -> PromptSpec:
    if not isinstance(raw, dict):
        raise ValueError("prompt file is not a JSON object")
    arguments = tuple(
        PromptArgument(
            name=str(arg["name"]),
            description=arg.get("description"),
            required=bool(arg.get("required", False)),
        )
        for arg in raw.get("arguments") or []
        if isinstance(arg, dict) and "name" in arg
    )
    return PromptSpec(
        name=str(raw["name"]),
        template=str(raw.get("template", "")),
        description=raw.get("description"),
        arguments=arguments,
    )


class PromptLoader:
    """Load JSON prompt templates from a directory."""

    def load_all(self, directory: str | Path) -> list[PromptSpec]:
        prompts: list[PromptSpec] = []
        if not Path(directory).is_dir():
            logger.debug(f"Prompts directory {directory} does not exist, skipping prompts")
            return prompts
        for path in _list_files(directory, (PROMPT_FILE_SUFFIX,)):
            try:
                raw = orjson.loads(path.read_text(encoding=DEFAULT_ENCODING))
                prompt = parse_prompt(raw)
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.error(f"Error loading prompt {path.name}: {e}")
                continue
            logger.debug(f"Loaded prompt: {prompt.name}")
            prompts.append(prompt)
        return prompts
