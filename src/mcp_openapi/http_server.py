#!/usr/bin/env python3
# src/mcp_openapi/http_server.py
"""
Starlette application for the MCP streaming HTTP transport.
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from .config import CorsConfig
from .constants import DEFAULT_HOST, DEFAULT_MAX_MESSAGE_BYTES, DEFAULT_PORT, HEADER_MCP_SESSION_ID
from .endpoints import handle_get, handle_health, handle_info, handle_post
from .endpoints.constants import PATH_HEALTH, PATH_INFO, PATH_MCP
from .protocol import MCPProtocolHandler

logger = logging.getLogger(__name__)


def create_app(
    protocol: MCPProtocolHandler,
    cors: CorsConfig | None = None,
    max_request_bytes: int = DEFAULT_MAX_MESSAGE_BYTES,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
) -> Starlette:
    """Create the application. The session sweeper runs for the app's lifetime."""
    cors = cors or CorsConfig()

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        protocol.session_manager.start_sweeper()
        try:
            yield
        finally:
            await protocol.session_manager.stop_sweeper()
            protocol.session_manager.clear()
            if on_shutdown is not None:
                await on_shutdown()
            logger.debug("HTTP server shut down")

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=cors.origins,
            allow_credentials=cors.credentials,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=[HEADER_MCP_SESSION_ID],
        ),
    ]

    routes = [
        Route(PATH_MCP, handle_post, methods=["POST"]),
        Route(PATH_MCP, handle_get, methods=["GET"]),
        Route(PATH_HEALTH, handle_health, methods=["GET"]),
        Route(PATH_INFO, handle_info, methods=["GET"]),
    ]

    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.protocol = protocol
    app.state.max_request_bytes = max_request_bytes
    return app


def run_http_server(app: Starlette, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, log_level: str = "info") -> None:
    logger.info(f"MCP OpenAPI Server running on port {port}")
    logger.info(f"Health check: http://{host}:{port}{PATH_HEALTH}")
    logger.info(f"Server info: http://{host}:{port}{PATH_INFO}")
    uvicorn.run(app, host=host, port=port, log_level=log_level)
