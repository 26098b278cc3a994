#!/usr/bin/env python3
"""Tests for the HTTP transport: /mcp sessions, health and info."""

import pytest
from conftest import PAY_TO_TOOL, RecordingBackend
from starlette.testclient import TestClient

from mcp_openapi.config import CorsConfig
from mcp_openapi.http_server import create_app
from mcp_openapi.protocol import MCPProtocolHandler, SessionManager

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {"protocolVersion": "2024-11-05", "clientInfo": {"name": "test-client"}},
}

# ============================================================================
# Helpers
# ============================================================================


@pytest.fixture(autouse=True)
def _no_user_token_env(monkeypatch):
    monkeypatch.delenv("USER_API_TOKEN", raising=False)
    monkeypatch.delenv("MCP_USER_TOKEN", raising=False)


@pytest.fixture
def make_client(make_dispatcher):
    def _make(backend=None, **app_kwargs):
        dispatcher, backend = make_dispatcher(backend)
        protocol = MCPProtocolHandler(dispatcher.catalogue, dispatcher, SessionManager())
        return TestClient(create_app(protocol, **app_kwargs)), protocol, backend

    return _make


def _initialize(client, headers=None):
    response = client.post("/mcp", json=INITIALIZE, headers=headers or {})
    assert response.status_code == 200
    return response.headers["mcp-session-id"]


# ============================================================================
# POST /mcp
# ============================================================================


class TestInitialize:
    def test_returns_session_header(self, make_client):
        client, protocol, _ = make_client()
        response = client.post("/mcp", json=INITIALIZE)

        assert response.status_code == 200
        session_id = response.headers["mcp-session-id"]
        assert protocol.session_manager.get_session(session_id) is not None
        assert response.json()["result"]["protocolVersion"] == "2024-11-05"
        assert response.headers["cache-control"] == "no-cache"

    def test_initialize_ignores_stale_session_header(self, make_client):
        client, _, _ = make_client()
        response = client.post("/mcp", json=INITIALIZE, headers={"Mcp-Session-Id": "stale"})
        assert response.status_code == 200
        assert response.headers["mcp-session-id"] != "stale"

    def test_bearer_token_captured_for_session(self, make_client):
        client, protocol, _ = make_client()
        session_id = _initialize(client, {"Authorization": "Bearer caller-token"})
        assert protocol.session_manager.get_session(session_id).auth_context.token == "caller-token"


class TestSessionEnforcement:
    def test_missing_session_header(self, make_client):
        client, _, _ = make_client()
        response = client.post("/mcp", json={"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
        assert response.status_code == 400
        assert response.json()["error"] == {
            "code": -32602,
            "message": "Missing Mcp-Session-Id header. Call initialize first.",
        }
        assert response.json()["id"] == 2

    def test_unknown_session(self, make_client):
        client, _, _ = make_client()
        response = client.post(
            "/mcp", json={"jsonrpc": "2.0", "id": 2, "method": "tools/list"}, headers={"Mcp-Session-Id": "bogus"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == {
            "code": -32603,
            "message": "Invalid or expired session. Please reinitialize.",
        }

    def test_valid_session(self, make_client):
        client, _, _ = make_client()
        session_id = _initialize(client)
        response = client.post(
            "/mcp", json={"jsonrpc": "2.0", "id": 2, "method": "tools/list"}, headers={"Mcp-Session-Id": session_id}
        )
        assert response.status_code == 200
        assert len(response.json()["result"]["tools"]) == 3
        assert "mcp-session-id" not in response.headers

    def test_notification_accepted(self, make_client):
        client, _, _ = make_client()
        session_id = _initialize(client)
        response = client.post(
            "/mcp",
            json={"jsonrpc": "2.0", "method": "notifications/initialized"},
            headers={"Mcp-Session-Id": session_id},
        )
        assert response.status_code == 202
        assert response.content == b""

    def test_session_token_reused_for_tool_calls(self, make_client):
        client, _, backend = make_client(RecordingBackend(json={"ok": True}))
        session_id = _initialize(client, {"Authorization": "Bearer caller-token"})
        response = client.post(
            "/mcp",
            json={"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": PAY_TO_TOOL, "arguments": {}}},
            headers={"Mcp-Session-Id": session_id},
        )
        assert response.status_code == 200
        assert backend.last.headers["authorization"] == "Bearer caller-token"

    def test_protocol_errors_use_http_200(self, make_client):
        client, _, _ = make_client()
        session_id = _initialize(client)
        response = client.post(
            "/mcp", json={"jsonrpc": "2.0", "id": 4, "method": "nope"}, headers={"Mcp-Session-Id": session_id}
        )
        assert response.status_code == 200
        assert response.json()["error"]["code"] == -32601


class TestMalformedBodies:
    def test_empty_body(self, make_client):
        client, _, _ = make_client()
        response = client.post("/mcp", content=b"")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32700

    def test_invalid_json(self, make_client):
        client, _, _ = make_client()
        response = client.post("/mcp", content=b"{oops", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32700

    def test_non_object_body(self, make_client):
        client, _, _ = make_client()
        response = client.post("/mcp", json=[INITIALIZE])
        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32600

    def test_body_too_large(self, make_client):
        client, _, _ = make_client(max_request_bytes=16)
        response = client.post("/mcp", json=INITIALIZE)
        assert response.status_code == 413


# ============================================================================
# GET /mcp
# ============================================================================


class TestStreamPlaceholder:
    def test_missing_session(self, make_client):
        client, _, _ = make_client()
        response = client.get("/mcp")
        assert response.status_code == 400
        assert response.json() == {"error": "Missing Mcp-Session-Id header"}

    def test_invalid_session(self, make_client):
        client, _, _ = make_client()
        response = client.get("/mcp", headers={"Mcp-Session-Id": "bogus"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or expired session"}

    def test_valid_session(self, make_client):
        client, _, _ = make_client()
        session_id = _initialize(client)
        response = client.get("/mcp", headers={"Mcp-Session-Id": session_id})
        assert response.status_code == 200
        body = response.json()
        assert body["sessionId"] == session_id
        assert body["message"] == "SSE streaming not yet implemented"


# ============================================================================
# Operator endpoints
# ============================================================================


class TestHealthAndInfo:
    def test_health(self, make_client):
        client, _, _ = make_client()
        _initialize(client)
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["specs"] == ["banking-payments"]
        assert body["tools"] == 3
        assert body["resources"] == 3
        assert body["prompts"] == 1
        assert body["sessions"] == 1
        assert body["version"] == "1.0.0"

    def test_info(self, make_client):
        client, _, _ = make_client()
        body = client.get("/info").json()
        assert body["specs"] == [{"id": "banking-payments", "title": "Banking Payments API", "version": "1.2.0"}]
        assert {"name": PAY_TO_TOOL, "description": "Make a payment to a payee"} in body["tools"]
        assert body["prompts"] == ["greeting"]


class TestCors:
    def test_session_header_is_exposed(self, make_client):
        client, _, _ = make_client()
        response = client.post("/mcp", json=INITIALIZE, headers={"Origin": "https://app.test"})
        assert response.headers["access-control-allow-origin"] == "*"
        assert "Mcp-Session-Id" in response.headers["access-control-expose-headers"]

    def test_configured_origins(self, make_client):
        cors = CorsConfig(origin=["https://app.test"], credentials=True)
        client, _, _ = make_client(cors=cors)
        response = client.options(
            "/mcp",
            headers={"Origin": "https://app.test", "Access-Control-Request-Method": "POST"},
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://app.test"
        assert response.headers["access-control-allow-credentials"] == "true"


class TestLifespan:
    def test_sessions_cleared_on_shutdown(self, make_client):
        client, protocol, _ = make_client()
        with client:
            _initialize(client)
            assert len(protocol.session_manager) == 1
        assert len(protocol.session_manager) == 0
