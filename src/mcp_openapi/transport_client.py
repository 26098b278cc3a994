#!/usr/bin/env python3
# src/mcp_openapi/transport_client.py
"""
Backend HTTP client.

A single shared ``httpx.AsyncClient`` per server. Anything that yields no
usable response (connect failure, timeout, oversized body) surfaces as
``TransportError``; every HTTP status, including errors, is a response.
"""

import logging
import ssl
from dataclasses import dataclass, field

import httpx

from .config import HttpsClientConfig
from .constants import DEFAULT_ENCODING, DEFAULT_MAX_RESPONSE_SIZE_MB
from .errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    status: int
    reason: str
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode(DEFAULT_ENCODING, errors="replace")


def build_ssl_context(settings: HttpsClientConfig) -> ssl.SSLContext:
    """Map the client TLS settings onto an SSL context for httpx."""
    context = ssl.create_default_context(cafile=settings.ca_file)
    if not settings.reject_unauthorized:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    if settings.certificate_type == "cert-key":
        context.load_cert_chain(settings.cert_file, settings.key_file, password=settings.passphrase)
    return context


class TransportClient:
    """Send one request to the backend and hand back the raw outcome."""

    def __init__(
        self,
        settings: HttpsClientConfig | None = None,
        max_response_bytes: int = DEFAULT_MAX_RESPONSE_SIZE_MB * 1024 * 1024,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or HttpsClientConfig()
        self.max_response_bytes = max_response_bytes
        limits = httpx.Limits() if self.settings.keep_alive else httpx.Limits(max_keepalive_connections=0)
        self._client = httpx.AsyncClient(
            timeout=self.settings.timeout / 1000,
            verify=build_ssl_context(self.settings),
            limits=limits,
            transport=transport,
        )

    async def send(
        self, url: str, method: str, headers: dict[str, str], body: bytes | None = None
    ) -> TransportResponse:
        """Execute a request.

        Raises:
            TransportError: If no complete response was received.
        """
        try:
            async with self._client.stream(method.upper(), url, headers=headers, content=body) as response:
                chunks: list[bytes] = []
                size = 0
                async for chunk in response.aiter_bytes():
                    size += len(chunk)
                    if size > self.max_response_bytes:
                        raise TransportError(
                            f"Response from {url} exceeds the {self.max_response_bytes} byte limit"
                        )
                    chunks.append(chunk)
                return TransportResponse(
                    status=response.status_code,
                    reason=response.reason_phrase,
                    body=b"".join(chunks),
                    headers=dict(response.headers),
                )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {url} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e

    async def aclose(self) -> None:
        await self._client.aclose()
