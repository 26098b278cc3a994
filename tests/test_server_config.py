#!/usr/bin/env python3
"""Tests for configuration validation and the config manager."""

import logging

import orjson
import pytest

from mcp_openapi.config import (
    HttpsClientConfig,
    ServerConfig,
    ServerConfigManager,
    ServerOptions,
    parse_config,
)
from mcp_openapi.errors import ConfigurationError
from mcp_openapi.models import CapabilityKind


def _write_config(tmp_path, data):
    path = tmp_path / "mcp-config.json"
    if isinstance(data, str):
        path.write_text(data)
    else:
        path.write_bytes(orjson.dumps(data))
    return str(path)


# ============================================================================
# Validation
# ============================================================================


class TestParseConfig:
    def test_empty_config_uses_defaults(self):
        config = parse_config({})
        assert config.overrides == []
        assert config.base_url is None
        assert config.authentication is None
        assert config.max_response_size_mb == 50
        assert config.cors.origins == ["*"]
        assert config.https_client.timeout == 30000

    def test_full_config(self):
        config = parse_config(
            {
                "baseUrl": "https://api.bank.test",
                "authentication": {"type": "apikey", "envVar": "BANK_KEY", "headerName": "X-Bank-Key"},
                "cors": {"origin": ["https://a.test", "https://b.test"], "credentials": True},
                "maxResponseSizeMB": 5,
                "httpsClient": {"timeout": 1500, "rejectUnauthorized": False, "keepAlive": False},
                "overrides": [{"specId": "bank", "path": "/x", "method": "GET", "type": "tool", "toolName": "x"}],
            }
        )
        assert config.base_url == "https://api.bank.test"
        assert config.authentication.header_name == "X-Bank-Key"
        assert config.cors.origins == ["https://a.test", "https://b.test"]
        assert config.cors.credentials
        assert config.max_response_size_mb == 5
        assert not config.https_client.reject_unauthorized
        assert not config.https_client.keep_alive
        assert config.overrides[0].type == CapabilityKind.TOOL

    def test_unknown_keys_are_ignored(self):
        assert parse_config({"somethingElse": 1}).overrides == []

    def test_apikey_requires_header_name(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"authentication": {"type": "apikey", "envVar": "KEY"}})
        assert exc_info.value.section == "Authentication"
        assert "headerName" in str(exc_info.value)

    def test_auth_requires_env_var(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"authentication": {"type": "bearer"}})
        assert exc_info.value.section == "Authentication"

    def test_unknown_auth_type(self):
        with pytest.raises(ConfigurationError):
            parse_config({"authentication": {"type": "oauth", "envVar": "T"}})

    def test_override_requires_fields(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"overrides": [{"specId": "bank", "type": "tool"}]})
        assert exc_info.value.section == "Override"

    def test_override_type_must_be_known(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"overrides": [{"specId": "b", "path": "/x", "method": "get", "type": "prompt"}]})
        assert exc_info.value.section == "Override"

    @pytest.mark.parametrize("size", [0, 1001])
    def test_response_size_bounds(self, size):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"maxResponseSizeMB": size})
        assert exc_info.value.section == "General"

    def test_authentication_reported_before_overrides(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"overrides": [{}], "authentication": {"type": "bearer"}})
        assert exc_info.value.section == "Authentication"


class TestOverrideMatching:
    def test_method_is_case_insensitive(self):
        config = ServerConfig.model_validate(
            {"overrides": [{"specId": "bank", "path": "/x", "method": "POST", "type": "resource"}]}
        )
        assert config.find_override("bank", "/x", "post") is not None
        assert config.find_override("bank", "/x", "get") is None

    def test_path_is_exact(self):
        config = ServerConfig.model_validate(
            {"overrides": [{"specId": "bank", "path": "/x", "method": "get", "type": "tool"}]}
        )
        assert config.find_override("bank", "/x/", "get") is None


class TestHttpsClientConfig:
    def test_certificate_type(self):
        assert HttpsClientConfig().certificate_type == "none"
        assert HttpsClientConfig(certFile="c.pem").certificate_type == "none"
        assert HttpsClientConfig(certFile="c.pem", keyFile="k.pem").certificate_type == "cert-key"
        assert HttpsClientConfig(pfxFile="c.pfx", certFile="c.pem", keyFile="k.pem").certificate_type == "pfx"


# ============================================================================
# ServerConfigManager
# ============================================================================


class TestServerConfigManager:
    def test_missing_file_gives_defaults(self, tmp_path):
        manager = ServerConfigManager(ServerOptions(config_file=str(tmp_path / "nope.json")))
        config = manager.load()
        assert config == ServerConfig()
        assert manager.base_url == "http://localhost:3001"
        assert manager.auth is None

    def test_unparseable_file_gives_defaults(self, tmp_path, caplog):
        manager = ServerConfigManager(ServerOptions(config_file=_write_config(tmp_path, "{not json")))
        with caplog.at_level(logging.WARNING):
            config = manager.load()
        assert config.overrides == []
        assert "Could not load config file" in caplog.text

    def test_non_object_file_gives_defaults(self, tmp_path):
        manager = ServerConfigManager(ServerOptions(config_file=_write_config(tmp_path, [1, 2])))
        assert manager.load().overrides == []

    def test_invalid_file_raises(self, tmp_path):
        path = _write_config(tmp_path, {"authentication": {"type": "apikey", "envVar": "K"}})
        with pytest.raises(ConfigurationError):
            ServerConfigManager(ServerOptions(config_file=path)).load()

    def test_base_url_from_config(self, tmp_path):
        path = _write_config(tmp_path, {"baseUrl": "https://config.test"})
        manager = ServerConfigManager(ServerOptions(config_file=path))
        manager.load()
        assert manager.base_url == "https://config.test"

    def test_cli_base_url_wins(self, tmp_path):
        path = _write_config(tmp_path, {"baseUrl": "https://config.test"})
        manager = ServerConfigManager(ServerOptions(config_file=path, base_url="https://cli.test"))
        manager.load()
        assert manager.base_url == "https://cli.test"

    def test_max_response_bytes(self, tmp_path):
        manager = ServerConfigManager(ServerOptions(config_file=_write_config(tmp_path, {"maxResponseSizeMB": 2})))
        manager.load()
        assert manager.max_response_bytes == 2 * 1024 * 1024

    def test_pfx_setting_is_warned_about(self, tmp_path, caplog):
        path = _write_config(tmp_path, {"httpsClient": {"pfxFile": "client.pfx"}})
        with caplog.at_level(logging.WARNING):
            ServerConfigManager(ServerOptions(config_file=path)).load()
        assert "PFX client certificates are not supported" in caplog.text
