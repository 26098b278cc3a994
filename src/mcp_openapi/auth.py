#!/usr/bin/env python3
# src/mcp_openapi/auth.py
"""
Outbound authentication for backend API calls.

A token supplied by the caller always wins and suppresses the configured
service token. Without either, requests go out unauthenticated.
"""

import base64
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .config import AuthConfig
from .constants import (
    BASIC_PREFIX,
    BEARER_PREFIX,
    DEFAULT_ENCODING,
    ENV_MCP_USER_TOKEN,
    ENV_USER_API_TOKEN,
    HEADER_AUTHORIZATION,
    HEADER_DEFAULT_API_KEY,
    HEADER_USER_TOKEN,
    KEY_META,
)

logger = logging.getLogger(__name__)

META_USER_TOKEN = "userToken"


@dataclass(frozen=True)
class AuthContext:
    """Identity used for one outbound call. Never persisted beyond a session."""

    token: str | None = None

    def __repr__(self) -> str:
        return f"AuthContext(token={'***' if self.token else None})"


class AuthResolver:
    """Compute outbound auth headers from the caller token or the service config."""

    def __init__(self, auth_config: AuthConfig | None = None, environ: Mapping[str, str] | None = None):
        self.auth_config = auth_config
        self._environ = environ if environ is not None else os.environ

    def headers_for(self, context: AuthContext | None = None) -> dict[str, str]:
        if context is not None and context.token:
            return {HEADER_AUTHORIZATION: f"{BEARER_PREFIX}{context.token}"}

        auth = self.auth_config
        if auth is None:
            return {}

        token = self._environ.get(auth.env_var)
        if not token:
            logger.debug(f"Service token variable {auth.env_var} is not set")
            return {}

        if auth.type == "bearer":
            return {HEADER_AUTHORIZATION: f"{BEARER_PREFIX}{token}"}
        if auth.type == "apikey":
            return {auth.header_name or HEADER_DEFAULT_API_KEY: token}
        encoded = base64.b64encode(token.encode(DEFAULT_ENCODING)).decode("ascii")
        return {HEADER_AUTHORIZATION: f"{BASIC_PREFIX}{encoded}"}


def extract_auth_context(
    headers: Mapping[str, str] | None = None,
    params: dict[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> AuthContext:
    """Find the caller's own token.

    Order: user-token environment variables, ``Authorization: Bearer``,
    the ``X-User-Token`` header, then ``_meta.userToken`` in the request params.
    """
    env = environ if environ is not None else os.environ
    token = env.get(ENV_USER_API_TOKEN) or env.get(ENV_MCP_USER_TOKEN)
    if token:
        return AuthContext(token)

    if headers:
        lowered = {k.lower(): v for k, v in headers.items()}
        authorization = lowered.get(HEADER_AUTHORIZATION.lower(), "")
        if authorization.startswith(BEARER_PREFIX) and authorization[len(BEARER_PREFIX) :]:
            return AuthContext(authorization[len(BEARER_PREFIX) :])
        user_token = lowered.get(HEADER_USER_TOKEN.lower())
        if user_token:
            return AuthContext(user_token)

    meta = (params or {}).get(KEY_META)
    if isinstance(meta, dict) and meta.get(META_USER_TOKEN):
        return AuthContext(str(meta[META_USER_TOKEN]))

    return AuthContext()
