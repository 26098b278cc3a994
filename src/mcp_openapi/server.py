#!/usr/bin/env python3
# src/mcp_openapi/server.py
"""
OpenAPIMCPServer - wire configuration, specs, catalogue and transports together.
"""

import asyncio
import logging
from itertools import groupby

import httpx
from starlette.applications import Starlette

from .auth import AuthResolver
from .catalogue import Catalogue, build_catalogue
from .config import ServerConfigManager, ServerOptions
from .constants import DEFAULT_HOST
from .dispatcher import RequestDispatcher
from .http_server import create_app, run_http_server
from .loader import PromptLoader, SpecLoader
from .protocol import MCPProtocolHandler, SessionManager
from .registry import SpecRegistry
from .stdio_transport import run_stdio_server
from .transport_client import TransportClient

logger = logging.getLogger(__name__)


class OpenAPIMCPServer:
    """Builds the capability catalogue once and serves it over stdio or HTTP."""

    def __init__(self, options: ServerOptions | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.options = options or ServerOptions()
        self.config_manager = ServerConfigManager(self.options)
        self._transport = transport

        self.registry: SpecRegistry | None = None
        self.catalogue: Catalogue | None = None
        self.client: TransportClient | None = None
        self.protocol: MCPProtocolHandler | None = None

    def initialize(self) -> MCPProtocolHandler:
        """Load everything from disk and build the protocol handler.

        Raises:
            ConfigurationError: If the configuration file is invalid.
            DuplicateCapabilityError: If two operations generate the same tool name.
        """
        config = self.config_manager.load()

        specs = SpecLoader().load_all(self.options.specs_dir)
        prompts = PromptLoader().load_all(self.options.prompts_dir)

        self.registry = SpecRegistry(specs, config)
        self.catalogue = build_catalogue(self.registry, prompts, self.options.max_tool_name_length)

        self.client = TransportClient(
            config.https_client,
            max_response_bytes=self.config_manager.max_response_bytes,
            transport=self._transport,
        )
        dispatcher = RequestDispatcher(
            self.catalogue,
            self.client,
            AuthResolver(self.config_manager.auth),
            base_url=self.config_manager.base_url,
        )
        self.protocol = MCPProtocolHandler(self.catalogue, dispatcher, SessionManager())

        overridden = sum(1 for e in self.catalogue.entries if e.overridden)
        logger.info(
            f"Loaded {len(self.catalogue.tools)} tools, {len(self.catalogue.resources)} resources, "
            f"{len(self.catalogue.prompts)} prompts from {len(self.registry)} OpenAPI specs"
            + (f" ({overridden} overridden)" if overridden else "")
        )
        if self.options.verbose:
            self.log_breakdown()
        return self.protocol

    def log_breakdown(self) -> None:
        """Log every generated capability grouped by spec file."""
        if self.catalogue is None:
            return
        logger.info("Breakdown by spec:")
        logger.info(f"{'Spec File & Path':<44} | {'Method':<6} | {'Type':<8} | Name")
        entries = sorted(self.catalogue.entries, key=lambda e: e.spec_file)
        for spec_file, group in groupby(entries, key=lambda e: e.spec_file):
            logger.info(f"{spec_file}")
            for entry in group:
                name = f"(Overridden) {entry.name}" if entry.overridden else entry.name
                logger.info(f"  {entry.path:<42} | {entry.verb.upper():<6} | {entry.kind.value:<8} | {name}")
        for prompt in self.catalogue.prompts:
            logger.info(f"  {'prompt':<42} | {'-':<6} | {'prompt':<8} | {prompt.name}")

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()

    # ------------------------------------------------------------------
    # Transports
    # ------------------------------------------------------------------

    def _ensure_initialized(self) -> MCPProtocolHandler:
        return self.protocol if self.protocol is not None else self.initialize()

    async def serve_stdio(self) -> None:
        protocol = self._ensure_initialized()
        protocol.session_manager.start_sweeper()
        try:
            await run_stdio_server(protocol, max_message_bytes=self.config_manager.max_response_bytes)
        finally:
            await protocol.session_manager.stop_sweeper()
            await self.aclose()

    def run_stdio(self) -> None:
        asyncio.run(self.serve_stdio())

    def create_http_app(self) -> Starlette:
        protocol = self._ensure_initialized()
        return create_app(
            protocol,
            cors=self.config_manager.config.cors,
            max_request_bytes=self.config_manager.max_response_bytes,
            on_shutdown=self.aclose,
        )

    def run_http(self, host: str = DEFAULT_HOST) -> None:
        log_level = "debug" if self.options.verbose else "info"
        run_http_server(self.create_http_app(), host=host, port=self.options.port, log_level=log_level)
