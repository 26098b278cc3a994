#!/usr/bin/env python3
# src/mcp_openapi/stdio_transport.py
"""
STDIO Transport - MCP protocol over standard input/output.

One JSON-RPC message per line on stdin, one response per line on stdout.
Logging always goes to stderr so stdout carries nothing but protocol traffic.
"""

import asyncio
import logging
import sys
from typing import Any, TextIO

import orjson

from .constants import (
    DEFAULT_ENCODING,
    DEFAULT_MAX_MESSAGE_BYTES,
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_ERROR,
    KEY_ID,
    JsonRpcError,
)
from .protocol import MCPProtocolHandler

logger = logging.getLogger(__name__)


class StdioTransport:
    """
    Handle MCP protocol communication over stdio (stdin/stdout).
    """

    def __init__(
        self, protocol_handler: MCPProtocolHandler, max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES
    ) -> None:
        self.protocol = protocol_handler
        self.max_message_bytes = max_message_bytes
        self.reader: asyncio.StreamReader | None = None
        self.writer: TextIO | None = None
        self.running = False
        self.session_id: str | None = None

    async def start(self) -> None:
        """Connect stdin and stdout, then serve until stdin closes."""
        self.running = True

        loop = asyncio.get_running_loop()
        self.reader = asyncio.StreamReader(limit=self.max_message_bytes)
        await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(self.reader), sys.stdin)
        self.writer = sys.stdout

        await self._listen()

    async def _listen(self) -> None:
        """Read one newline-terminated message at a time.

        Lines reach orjson as raw bytes; invalid UTF-8 is answered with a parse
        error like any other malformed message.
        """
        while self.running and self.reader is not None:
            try:
                line = await self.reader.readline()
            except ValueError:
                logger.warning(f"Dropped stdio message larger than {self.max_message_bytes} bytes")
                await self._send_error(None, JsonRpcError.PARSE_ERROR, "Parse error: message too large")
                continue
            if not line:
                break
            line = line.strip()
            if line:
                await self._handle_message(line)

    async def _handle_message(self, message: str | bytes) -> None:
        """Parse one line and route it through the protocol handler."""
        try:
            request_data = orjson.loads(message)
        except orjson.JSONDecodeError as e:
            logger.debug(f"Invalid JSON in stdio message: {e}")
            await self._send_error(None, JsonRpcError.PARSE_ERROR, f"Parse error: {e}")
            return

        response, session_id = await self.protocol.handle_request(request_data, self.session_id)
        if session_id:
            self.session_id = session_id

        if response is not None:
            await self._send_response(response)

    async def _send_response(self, response: dict[str, Any]) -> None:
        """Write one response line to stdout."""
        if self.writer:
            self.writer.write(orjson.dumps(response).decode(DEFAULT_ENCODING) + "\n")
            self.writer.flush()

    async def _send_error(self, request_id: Any, code: int, message: str) -> None:
        error_response = {
            JSONRPC_KEY: JSONRPC_VERSION,
            KEY_ID: request_id,
            KEY_ERROR: {"code": int(code), "message": message},
        }
        await self._send_response(error_response)

    async def stop(self) -> None:
        """Stop the stdio transport."""
        self.running = False
        if self.reader:
            self.reader.feed_eof()


async def run_stdio_server(
    protocol_handler: MCPProtocolHandler, max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES
) -> None:
    """Serve MCP over stdio until stdin closes."""
    transport = StdioTransport(protocol_handler, max_message_bytes)
    try:
        await transport.start()
    finally:
        await transport.stop()
