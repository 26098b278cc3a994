#!/usr/bin/env python3
# src/mcp_openapi/classifier.py
"""
Decide whether an OpenAPI operation becomes a tool or a resource.
"""

import re

from .config import ServerConfig
from .constants import BUSINESS_LOGIC_VERBS, COMPLEX_PARAM_KEYWORDS, MUTATING_VERBS
from .models import CapabilityKind, Operation

_BUSINESS_LOGIC_RE = re.compile(r"\b(" + "|".join(BUSINESS_LOGIC_VERBS) + r")\b", re.IGNORECASE)


def has_complex_parameters(operation: Operation) -> bool:
    return any(keyword in p.name.lower() for p in operation.parameters for keyword in COMPLEX_PARAM_KEYWORDS)


def has_business_logic(operation: Operation) -> bool:
    return bool(operation.summary and _BUSINESS_LOGIC_RE.search(operation.summary))


class CapabilityClassifier:
    """Pure classification: overrides first, then the verb, then the operation shape."""

    def __init__(self, config: ServerConfig | None = None):
        self.config = config or ServerConfig()

    def classify(self, spec_id: str, path: str, verb: str, operation: Operation) -> CapabilityKind:
        override = self.config.find_override(spec_id, path, verb)
        if override is not None:
            return override.type

        if verb.lower() in MUTATING_VERBS:
            return CapabilityKind.TOOL

        # Reads that search or compute are still invocations
        if has_complex_parameters(operation) or has_business_logic(operation):
            return CapabilityKind.TOOL

        return CapabilityKind.RESOURCE
