#!/usr/bin/env python3
"""Shared fixtures: a small banking API and helpers to build a catalogue from it."""

import copy

import httpx
import pytest

from mcp_openapi.auth import AuthResolver
from mcp_openapi.catalogue import build_catalogue
from mcp_openapi.config import ServerConfig
from mcp_openapi.dispatcher import RequestDispatcher
from mcp_openapi.loader import parse_spec
from mcp_openapi.models import PromptArgument, PromptSpec
from mcp_openapi.registry import SpecRegistry
from mcp_openapi.transport_client import TransportClient

BASE_URL = "http://localhost:3001"

PAY_TO_TOOL = "banking-payments_create_banking_payments_payTo"

BANKING_SPEC = {
    "openapi": "3.0.0",
    "info": {"title": "Banking Payments API", "version": "1.2.0", "x-spec-id": "banking-payments"},
    "paths": {
        "/v1/banking/payments/payTo": {
            "post": {
                "summary": "Make a payment to a payee",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "accountNumber": {"type": "string"},
                                    "amount": {"type": "number"},
                                },
                                "required": ["accountNumber", "amount"],
                            }
                        }
                    }
                },
            }
        },
        "/v1/banking/accounts": {
            "get": {
                "summary": "List accounts",
                "description": "All accounts visible to the caller",
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer"}, "description": "Page size"},
                    {"name": "X-Trace", "in": "header", "schema": {"type": "string"}},
                ],
            }
        },
        "/v1/banking/accounts/{accountId}": {
            "parameters": [{"name": "accountId", "in": "path", "required": True, "schema": {"type": "string"}}],
            "get": {"summary": "Get account"},
            "delete": {"summary": "Close account"},
        },
        "/v1/banking/payees/search": {
            "get": {
                "summary": "Search payees",
                "parameters": [{"name": "name", "in": "query", "schema": {"type": "string"}}],
            }
        },
    },
}

PAY_TO_OVERRIDE = {
    "specId": "banking-payments",
    "path": "/v1/banking/payments/payTo",
    "method": "post",
    "type": "tool",
    "toolName": PAY_TO_TOOL,
}

GREETING_PROMPT = PromptSpec(
    name="greeting",
    template="Hello {{name}}, welcome to {{bank}}!",
    description="Greet a customer",
    arguments=(PromptArgument("name", "Customer name", True), PromptArgument("bank")),
)


@pytest.fixture
def banking_raw():
    return copy.deepcopy(BANKING_SPEC)


@pytest.fixture
def make_catalogue():
    """Factory: build a catalogue from the banking API with optional config."""

    def _make(config=None, prompts=(GREETING_PROMPT,), specs=None, max_tool_name_length=None):
        server_config = ServerConfig.model_validate(config if config is not None else {"overrides": [PAY_TO_OVERRIDE]})
        documents = specs if specs is not None else [parse_spec(copy.deepcopy(BANKING_SPEC), "banking")]
        registry = SpecRegistry(documents, server_config)
        return build_catalogue(registry, prompts, max_tool_name_length)

    return _make


class RecordingBackend:
    """httpx MockTransport handler that records requests and replays canned responses."""

    def __init__(self, status=200, json=None, content=None, headers=None, error=None):
        self.requests: list[httpx.Request] = []
        self.status = status
        self.json = json
        self.content = content
        self.headers = headers
        self.error = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.json is not None:
            return httpx.Response(self.status, json=self.json, headers=self.headers)
        return httpx.Response(self.status, content=self.content or b"", headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_dispatcher(make_catalogue):
    """Factory: a dispatcher wired to a RecordingBackend through httpx.MockTransport."""

    def _make(backend=None, catalogue=None, auth_config=None, environ=None, max_response_bytes=1024 * 1024):
        backend = backend or RecordingBackend(json={"ok": True})
        client = TransportClient(max_response_bytes=max_response_bytes, transport=httpx.MockTransport(backend))
        dispatcher = RequestDispatcher(
            catalogue or make_catalogue(),
            client,
            AuthResolver(auth_config, environ=environ if environ is not None else {}),
            base_url=BASE_URL,
        )
        return dispatcher, backend

    return _make
