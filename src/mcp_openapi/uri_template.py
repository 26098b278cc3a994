#!/usr/bin/env python3
# src/mcp_openapi/uri_template.py
"""
Resolve a concrete resource URI against declared ``{placeholder}`` templates.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from .errors import ResourceNotFound

_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")


@dataclass(frozen=True)
class TemplateMatch:
    template: str
    # placeholder name -> value captured from the concrete URI
    values: dict[str, str] = field(default_factory=dict)


def compile_template(template: str) -> re.Pattern[str]:
    """Each ``{name}`` matches one or more non-``/`` characters; everything else is literal."""
    pattern = ""
    last = 0
    for match in _PLACEHOLDER_RE.finditer(template):
        pattern += re.escape(template[last : match.start()]) + "([^/]+)"
        last = match.end()
    pattern += re.escape(template[last:])
    return re.compile(f"^{pattern}$")


class URITemplateMatcher:
    """Exact match first, then the first template that matches, in declaration order."""

    def __init__(self, templates: Iterable[str]):
        self.templates = list(templates)
        self._compiled = [(t, compile_template(t), _PLACEHOLDER_RE.findall(t)) for t in self.templates]

    def match(self, uri: str) -> TemplateMatch | None:
        if uri in self.templates:
            return TemplateMatch(uri)
        for template, pattern, names in self._compiled:
            found = pattern.match(uri)
            if found:
                return TemplateMatch(template, dict(zip(names, found.groups())))
        return None

    def resolve(self, uri: str) -> TemplateMatch:
        """Like ``match`` but raises ResourceNotFound when nothing matches."""
        found = self.match(uri)
        if found is None:
            raise ResourceNotFound(uri)
        return found


def resolve(actual_uri: str, declared_uris: Iterable[str]) -> str | None:
    """Return the declared template matching ``actual_uri``, or None."""
    found = URITemplateMatcher(declared_uris).match(actual_uri)
    return found.template if found else None
