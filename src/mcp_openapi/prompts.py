#!/usr/bin/env python3
# src/mcp_openapi/prompts.py
"""
Prompt template rendering for ``prompts/get``.
"""

import logging
from typing import Any

from .constants import CONTENT_TYPE_TEXT
from .models import PromptSpec

logger = logging.getLogger(__name__)


def render_template(template: str, arguments: dict[str, Any]) -> str:
    """Replace every ``{{key}}`` with its argument value. Unknown placeholders are left as-is."""
    for key, value in arguments.items():
        template = template.replace("{{" + str(key) + "}}", str(value))
    return template


def render_prompt(prompt: PromptSpec, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    arguments = arguments or {}
    missing = [a.name for a in prompt.arguments if a.required and a.name not in arguments]
    if missing:
        logger.debug(f"Prompt {prompt.name} rendered without required arguments: {', '.join(missing)}")
    return {
        "description": prompt.description,
        "messages": [
            {
                "role": "user",
                "content": {"type": CONTENT_TYPE_TEXT, "text": render_template(prompt.template, arguments)},
            }
        ],
    }
