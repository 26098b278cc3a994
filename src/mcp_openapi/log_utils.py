#!/usr/bin/env python3
# src/mcp_openapi/log_utils.py
"""Logging helpers with redaction."""

import re
from typing import Any

_SENSITIVE_KEYS = re.compile(r"(token|secret|api[_-]?key|password|authorization)", re.IGNORECASE)
REDACTED = "***REDACTED***"


def redact_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``payload`` with sensitive keys masked, recursing into nested dicts."""
    redacted: dict[str, Any] = {}
    for key, value in payload.items():
        if _SENSITIVE_KEYS.search(str(key)):
            redacted[key] = REDACTED
        elif isinstance(value, dict):
            redacted[key] = redact_payload(value)
        else:
            redacted[key] = value
    return redacted
