#!/usr/bin/env python3
# src/mcp_openapi/registry.py
"""
SpecRegistry - loaded OpenAPI documents plus the operator configuration.
"""

import logging
from collections.abc import Iterable, Iterator

from .config import OverrideRule, ServerConfig
from .models import SpecDocument

logger = logging.getLogger(__name__)


class SpecRegistry:
    """Parsed documents keyed by spec id, in load order."""

    def __init__(self, specs: Iterable[SpecDocument] = (), config: ServerConfig | None = None):
        self.config = config or ServerConfig()
        self._specs: dict[str, SpecDocument] = {}
        for spec in specs:
            self.add(spec)

    def add(self, spec: SpecDocument) -> None:
        if spec.spec_id in self._specs:
            logger.warning(f"Spec id {spec.spec_id} loaded twice; {spec.source_file} replaces the earlier document")
        self._specs[spec.spec_id] = spec

    def get(self, spec_id: str) -> SpecDocument | None:
        return self._specs.get(spec_id)

    def __iter__(self) -> Iterator[SpecDocument]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, spec_id: object) -> bool:
        return spec_id in self._specs

    @property
    def overrides(self) -> list[OverrideRule]:
        return self.config.overrides

    def find_override(self, spec_id: str, path: str, verb: str) -> OverrideRule | None:
        return self.config.find_override(spec_id, path, verb)
