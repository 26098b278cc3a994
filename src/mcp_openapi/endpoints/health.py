#!/usr/bin/env python3
# src/mcp_openapi/endpoints/health.py
"""
Health and discovery endpoints for operators.
"""

from starlette.requests import Request
from starlette.responses import Response

from ..constants import HTTP_PROTOCOL_DESCRIPTION, SERVER_VERSION
from .constants import STATUS_OK
from .utils import json_response


async def handle_health(request: Request) -> Response:
    protocol = request.app.state.protocol
    catalogue = protocol.catalogue
    return json_response(
        {
            "status": STATUS_OK,
            "specs": [spec.spec_id for spec in catalogue.registry],
            "tools": len(catalogue.tools),
            "resources": len(catalogue.resources),
            "prompts": len(catalogue.prompts),
            "sessions": len(protocol.session_manager),
            "version": SERVER_VERSION,
            "protocol": HTTP_PROTOCOL_DESCRIPTION,
        }
    )


async def handle_info(request: Request) -> Response:
    catalogue = request.app.state.protocol.catalogue
    return json_response(
        {
            "specs": [{"id": s.spec_id, "title": s.title, "version": s.version} for s in catalogue.registry],
            "tools": [{"name": t.name, "description": t.description} for t in catalogue.tools],
            "resources": [{"uri": r.uri, "name": r.name} for r in catalogue.resources],
            "prompts": [p.name for p in catalogue.prompts],
        }
    )
