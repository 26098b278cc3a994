#!/usr/bin/env python3
# src/mcp_openapi/config.py
"""
Configuration for mcp-openapi.

The JSON configuration file is validated with pydantic models; process
options come from the CLI as a plain ``ServerOptions`` dataclass.
``ServerConfigManager`` merges the two and resolves the backend base URL.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_CLIENT_TIMEOUT_MS,
    DEFAULT_CONFIG_FILE,
    DEFAULT_ENCODING,
    DEFAULT_MAX_RESPONSE_SIZE_MB,
    DEFAULT_MAX_TOOL_NAME_LENGTH,
    DEFAULT_PORT,
    DEFAULT_PROMPTS_DIR,
    DEFAULT_SPECS_DIR,
)
from .errors import ConfigurationError
from .models import CapabilityKind

logger = logging.getLogger(__name__)


class _ConfigModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class OverrideRule(_ConfigModel):
    """Operator-declared classification and naming for one operation."""

    spec_id: str = Field(alias="specId", min_length=1)
    path: str = Field(min_length=1)
    method: str = Field(min_length=1)
    type: CapabilityKind
    tool_name: str | None = Field(default=None, alias="toolName")
    resource_uri: str | None = Field(default=None, alias="resourceUri")
    description: str | None = None

    def matches(self, spec_id: str, path: str, verb: str) -> bool:
        return self.spec_id == spec_id and self.path == path and self.method.lower() == verb.lower()


class AuthConfig(_ConfigModel):
    """Service authentication used when the caller supplies no token."""

    type: Literal["bearer", "apikey", "basic"]
    env_var: str = Field(alias="envVar", min_length=1)
    header_name: str | None = Field(default=None, alias="headerName")

    @model_validator(mode="after")
    def _apikey_needs_header(self) -> "AuthConfig":
        if self.type == "apikey" and not self.header_name:
            raise ValueError("headerName is required for apikey authentication")
        return self


class CorsConfig(_ConfigModel):
    origin: str | list[str] = "*"
    credentials: bool = False

    @property
    def origins(self) -> list[str]:
        return [self.origin] if isinstance(self.origin, str) else list(self.origin)


class HttpsClientConfig(_ConfigModel):
    """Backend client settings. ``timeout`` is in milliseconds."""

    timeout: int = DEFAULT_CLIENT_TIMEOUT_MS
    reject_unauthorized: bool = Field(default=True, alias="rejectUnauthorized")
    keep_alive: bool = Field(default=True, alias="keepAlive")
    ca_file: str | None = Field(default=None, alias="caFile")
    cert_file: str | None = Field(default=None, alias="certFile")
    key_file: str | None = Field(default=None, alias="keyFile")
    pfx_file: str | None = Field(default=None, alias="pfxFile")
    passphrase: str | None = None

    @property
    def certificate_type(self) -> Literal["none", "cert-key", "pfx"]:
        if self.pfx_file:
            return "pfx"
        if self.cert_file and self.key_file:
            return "cert-key"
        return "none"


class ServerConfig(_ConfigModel):
    """Contents of the JSON configuration file."""

    overrides: list[OverrideRule] = Field(default_factory=list)
    base_url: str | None = Field(default=None, alias="baseUrl")
    authentication: AuthConfig | None = None
    cors: CorsConfig = Field(default_factory=CorsConfig)
    max_response_size_mb: int = Field(default=DEFAULT_MAX_RESPONSE_SIZE_MB, alias="maxResponseSizeMB", ge=1, le=1000)
    https_client: HttpsClientConfig = Field(default_factory=HttpsClientConfig, alias="httpsClient")

    def find_override(self, spec_id: str, path: str, verb: str) -> OverrideRule | None:
        """First matching override wins."""
        for rule in self.overrides:
            if rule.matches(spec_id, path, verb):
                return rule
        return None


@dataclass
class ServerOptions:
    """Process-level options, normally filled from the command line."""

    specs_dir: str = DEFAULT_SPECS_DIR
    config_file: str = DEFAULT_CONFIG_FILE
    prompts_dir: str = DEFAULT_PROMPTS_DIR
    port: int = DEFAULT_PORT
    base_url: str | None = None
    max_tool_name_length: int = DEFAULT_MAX_TOOL_NAME_LENGTH
    verbose: bool = False
    http: bool = False


# Validation error sections, keyed by the top-level config field
_SECTION_NAMES = {"authentication": "Authentication", "overrides": "Override"}


def _problems_by_section(exc: ValidationError) -> dict[str, list[str]]:
    sections: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("general",)
        section = _SECTION_NAMES.get(str(loc[0]), "General")
        where = ".".join(str(part) for part in loc)
        sections.setdefault(section, []).append(f"{where}: {err.get('msg')}")
    return sections


def parse_config(raw: dict[str, Any]) -> ServerConfig:
    """Validate a raw configuration mapping.

    Raises:
        ConfigurationError: If any section fails validation.
    """
    try:
        return ServerConfig.model_validate(raw)
    except ValidationError as e:
        sections = _problems_by_section(e)
        # Report authentication first, then overrides, then general settings
        for section in ("Authentication", "Override", "General"):
            if section in sections:
                raise ConfigurationError(section, sections[section]) from e
        raise


class ServerConfigManager:
    """Load, validate and merge the configuration file with process options."""

    def __init__(self, options: ServerOptions):
        self.options = options
        self.config = ServerConfig()

    def load(self) -> ServerConfig:
        raw = self._read_config_file(self.options.config_file)
        self.config = parse_config(raw)

        if self.config.https_client.pfx_file:
            logger.warning("PFX client certificates are not supported; ignoring pfxFile setting")

        source = "CLI --base-url" if self.options.base_url else "config file" if self.config.base_url else "default"
        logger.debug(f"Using base URL: {self.base_url} (from {source})")
        return self.config

    @staticmethod
    def _read_config_file(config_file: str) -> dict[str, Any]:
        path = Path(config_file)
        if not path.exists():
            logger.debug(f"Config file {config_file} not found, using defaults")
            return {}
        try:
            raw = orjson.loads(path.read_text(encoding=DEFAULT_ENCODING))
        except (OSError, orjson.JSONDecodeError) as e:
            logger.warning(f"Could not load config file: {e}")
            return {}
        if not isinstance(raw, dict):
            logger.warning(f"Could not load config file: {config_file} does not contain a JSON object")
            return {}
        logger.debug(f"Loaded config from {config_file}")
        return raw

    @property
    def base_url(self) -> str:
        """CLI override, then config file, then the fixed fallback."""
        return self.options.base_url or self.config.base_url or DEFAULT_BASE_URL

    @property
    def auth(self) -> AuthConfig | None:
        return self.config.authentication

    @property
    def max_response_bytes(self) -> int:
        return self.config.max_response_size_mb * 1024 * 1024
