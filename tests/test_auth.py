#!/usr/bin/env python3
"""Tests for caller token extraction and outbound auth headers."""

import base64

import pytest

from mcp_openapi.auth import AuthContext, AuthResolver, extract_auth_context
from mcp_openapi.config import AuthConfig


def _auth(type_="bearer", env_var="SERVICE_TOKEN", header_name=None):
    return AuthConfig.model_validate({"type": type_, "envVar": env_var, "headerName": header_name})


# ============================================================================
# AuthResolver
# ============================================================================


class TestAuthResolver:
    def test_caller_token_wins_over_service_token(self):
        resolver = AuthResolver(_auth(), environ={"SERVICE_TOKEN": "service"})
        assert resolver.headers_for(AuthContext("caller")) == {"Authorization": "Bearer caller"}

    def test_service_bearer_token(self):
        resolver = AuthResolver(_auth(), environ={"SERVICE_TOKEN": "service"})
        assert resolver.headers_for(AuthContext()) == {"Authorization": "Bearer service"}

    def test_service_apikey(self):
        resolver = AuthResolver(_auth("apikey", header_name="X-Bank-Key"), environ={"SERVICE_TOKEN": "k-1"})
        assert resolver.headers_for(None) == {"X-Bank-Key": "k-1"}

    def test_service_basic(self):
        resolver = AuthResolver(_auth("basic"), environ={"SERVICE_TOKEN": "user:pass"})
        expected = base64.b64encode(b"user:pass").decode("ascii")
        assert resolver.headers_for() == {"Authorization": f"Basic {expected}"}

    def test_unset_env_var_sends_nothing(self):
        assert AuthResolver(_auth(), environ={}).headers_for(AuthContext()) == {}

    def test_no_auth_configured_sends_nothing(self):
        assert AuthResolver(None, environ={"SERVICE_TOKEN": "service"}).headers_for(AuthContext()) == {}

    def test_caller_token_used_without_config(self):
        assert AuthResolver(None, environ={}).headers_for(AuthContext("abc")) == {"Authorization": "Bearer abc"}


# ============================================================================
# extract_auth_context
# ============================================================================


class TestExtractAuthContext:
    def test_environment_first(self):
        ctx = extract_auth_context({"Authorization": "Bearer header"}, environ={"USER_API_TOKEN": "env"})
        assert ctx.token == "env"

    def test_mcp_user_token_env(self):
        assert extract_auth_context(environ={"MCP_USER_TOKEN": "mcp"}).token == "mcp"

    def test_bearer_header(self):
        assert extract_auth_context({"authorization": "Bearer abc"}, environ={}).token == "abc"

    def test_non_bearer_authorization_is_ignored(self):
        assert extract_auth_context({"Authorization": "Basic abc"}, environ={}).token is None

    def test_user_token_header(self):
        assert extract_auth_context({"x-user-token": "xyz"}, environ={}).token == "xyz"

    def test_bearer_beats_user_token_header(self):
        headers = {"Authorization": "Bearer first", "X-User-Token": "second"}
        assert extract_auth_context(headers, environ={}).token == "first"

    def test_meta_user_token(self):
        ctx = extract_auth_context(params={"_meta": {"userToken": "meta"}}, environ={})
        assert ctx.token == "meta"

    def test_nothing_found(self):
        assert extract_auth_context({}, {}, environ={}) == AuthContext()

    @pytest.mark.parametrize("meta", [None, "token", {"other": 1}])
    def test_malformed_meta_is_ignored(self, meta):
        assert extract_auth_context(params={"_meta": meta}, environ={}).token is None


class TestAuthContext:
    def test_repr_hides_token(self):
        assert "secret" not in repr(AuthContext("secret"))
