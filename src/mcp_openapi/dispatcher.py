#!/usr/bin/env python3
# src/mcp_openapi/dispatcher.py
"""
RequestDispatcher - turn tool calls and resource reads into backend requests.

Backend outcomes never raise past this module. Every HTTP failure and every
transport failure is folded into a JSON error description that is returned
inside an otherwise successful MCP result, so the calling agent can read it.
Only an unknown tool or an unmatched resource URI raises (see ``errors``).
"""

import logging
from typing import Any
from urllib.parse import quote, urlencode

import orjson

from .auth import AuthContext, AuthResolver
from .catalogue import Catalogue
from .constants import (
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_TEXT,
    DEFAULT_BASE_URL,
    DEFAULT_ENCODING,
    HEADER_CONTENT_TYPE,
    MUTATING_VERBS,
    SECURITY_LOGGER,
    SERVER_INFO_URI,
    HttpVerb,
    OutcomeKind,
)
from .errors import CapabilityNotFound, ResourceNotFound, TransportError, unknown_tool_error
from .generator import path_placeholders
from .log_utils import redact_payload
from .models import Resource
from .transport_client import TransportClient, TransportResponse
from .uri_template import URITemplateMatcher

logger = logging.getLogger(__name__)
security_logger = logging.getLogger(SECURITY_LOGGER)


def to_text(value: Any) -> str:
    """Stringify an argument for a URL the way a JSON client would read it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return orjson.dumps(value).decode(DEFAULT_ENCODING)
    return str(value)


def dump_json(value: Any) -> str:
    return orjson.dumps(value, option=orjson.OPT_INDENT_2).decode(DEFAULT_ENCODING)


def substitute_path(path: str, values: dict[str, Any]) -> tuple[str, set[str]]:
    """Replace ``{key}`` for every key in ``values`` present in the path."""
    used: set[str] = set()
    for name in path_placeholders(path):
        if name in values and values[name] is not None:
            path = path.replace(f"{{{name}}}", quote(to_text(values[name]), safe=""))
            used.add(name)
    return path, used


def _query_string(params: dict[str, Any]) -> str:
    pairs = [(k, to_text(v)) for k, v in params.items() if v is not None]
    return f"?{urlencode(pairs)}" if pairs else ""


def _parse_body(response: TransportResponse) -> Any:
    if not response.body:
        return None
    try:
        return orjson.loads(response.body)
    except orjson.JSONDecodeError:
        return response.text


class RequestDispatcher:
    """Execute tools and read resources against the backend APIs."""

    def __init__(
        self,
        catalogue: Catalogue,
        client: TransportClient,
        auth_resolver: AuthResolver | None = None,
        base_url: str = DEFAULT_BASE_URL,
    ):
        self.catalogue = catalogue
        self.client = client
        self.auth_resolver = auth_resolver or AuthResolver()
        self.base_url = base_url.rstrip("/")
        self.matcher = URITemplateMatcher(catalogue.resource_uris)

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def build_tool_request(self, name: str, arguments: dict[str, Any]) -> tuple[str, str, bytes | None]:
        """Work out method, URL and body for a tool call.

        Raises:
            CapabilityNotFound: If the tool or the spec behind it is unknown.
        """
        tool = self.catalogue.get_tool(name)
        if tool is None:
            raise unknown_tool_error(name, self.catalogue.tool_names)
        ref = tool.operation
        if self.catalogue.registry.get(ref.spec_id) is None:
            raise CapabilityNotFound(f"Spec {ref.spec_id} not found")

        path, used = substitute_path(ref.path, arguments)
        remaining = {k: v for k, v in arguments.items() if k not in used and k not in path_placeholders(ref.path)}

        verb = ref.verb.lower()
        body: bytes | None = None
        query = ""
        if verb in MUTATING_VERBS:
            body = orjson.dumps(remaining)
        else:
            query = _query_string(remaining)

        return verb, f"{self.base_url}{path}{query}", body

    async def invoke_action(
        self, name: str, arguments: dict[str, Any] | None = None, auth_context: AuthContext | None = None
    ) -> dict[str, Any]:
        arguments = arguments or {}
        verb, url, body = self.build_tool_request(name, arguments)

        headers = {HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON, **self.auth_resolver.headers_for(auth_context)}
        logger.debug(f"Tool {name}: {verb.upper()} {url} args={redact_payload(arguments)}")

        try:
            response = await self.client.send(url, verb, headers, body)
        except TransportError as e:
            logger.error(f"Tool execution failed for {name}: {e}")
            payload = {
                "error": OutcomeKind.EXECUTION_FAILED,
                "message": f"Failed to execute tool {name}",
                "details": str(e),
                "tool": name,
            }
            return self._tool_result(payload)

        if response.ok:
            return self._tool_result(_parse_body(response))
        return self._tool_result(self._failure_payload(response, url, auth_context, "tool", name))

    @staticmethod
    def _tool_result(payload: Any) -> dict[str, Any]:
        return {"content": [{"type": CONTENT_TYPE_TEXT, "text": dump_json(payload)}]}

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def build_resource_url(self, resource: Resource, captured: dict[str, str], parameters: dict[str, Any]) -> str:
        """Split declared parameters between the path and the query string.

        A declared parameter whose ``{name}`` appears in the path is substituted
        there and never repeated in the query.
        """
        template = resource.operation.path if resource.operation else "/" + resource.uri.split("://", 1)[-1]
        declared = [p.name for p in resource.parameters]
        placeholders = set(path_placeholders(template))

        path_values: dict[str, Any] = dict(captured)
        path_values.update({n: parameters[n] for n in declared if n in placeholders and n in parameters})
        path, _ = substitute_path(template, path_values)

        query = {n: parameters[n] for n in declared if n not in placeholders and n in parameters}
        return f"{self.base_url}{path}{_query_string(query)}"

    async def read_resource(
        self, uri: str, auth_context: AuthContext | None = None, parameters: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Read a resource by concrete URI.

        Raises:
            ResourceNotFound: If no declared resource matches ``uri``.
        """
        if uri == SERVER_INFO_URI:
            return self._resource_result(uri, self.catalogue.server_info())

        match = self.matcher.resolve(uri)
        resource = self.catalogue.get_resource(match.template)
        if resource is None:
            raise ResourceNotFound(uri)

        parameters = parameters or {}
        url = self.build_resource_url(resource, match.values, parameters)
        logger.debug(f"Resource read URL: {url}")
        if parameters:
            logger.debug(f"Resource parameters: {redact_payload(parameters)}")

        try:
            response = await self.client.send(url, HttpVerb.GET, self.auth_resolver.headers_for(auth_context))
        except TransportError as e:
            logger.error(f"Resource read failed for {uri}: {e}")
            payload = {
                "error": OutcomeKind.READ_FAILED,
                "message": f"Failed to read resource {uri}",
                "details": str(e),
                "resource": uri,
            }
            return self._resource_result(uri, payload)

        if response.ok:
            return self._resource_result(uri, _parse_body(response))
        return self._resource_result(uri, self._failure_payload(response, url, auth_context, "resource", uri))

    @staticmethod
    def _resource_result(uri: str, payload: Any) -> dict[str, Any]:
        return {"contents": [{"uri": uri, "mimeType": CONTENT_TYPE_JSON, "text": dump_json(payload)}]}

    # ------------------------------------------------------------------
    # Failure normalization
    # ------------------------------------------------------------------

    def _failure_payload(
        self,
        response: TransportResponse,
        url: str,
        auth_context: AuthContext | None,
        subject_key: str,
        subject: str,
    ) -> dict[str, Any]:
        status = response.status
        if status in (401, 403):
            security_logger.warning(f"{status} security error for {subject_key} {subject} - {response.reason}")

        if status == 401:
            has_token = bool(auth_context and auth_context.token)
            return {
                "error": OutcomeKind.AUTHENTICATION_REQUIRED,
                "message": "Invalid or expired authentication token"
                if has_token
                else "No authentication token provided",
                "suggestion": "Check your API token or re-authenticate",
                "status": 401,
                subject_key: subject,
            }

        if status == 403:
            target = "operation" if subject_key == "tool" else "resource"
            return {
                "error": OutcomeKind.INSUFFICIENT_PERMISSIONS,
                "message": f"Access denied for this {target}",
                "suggestion": "Contact administrator for required permissions",
                "status": 403,
                subject_key: subject,
            }

        try:
            details: Any = orjson.loads(response.body) if response.body else response.reason
        except orjson.JSONDecodeError:
            details = response.reason
        return {
            "error": OutcomeKind.HTTP_ERROR,
            "message": f"HTTP {status}: {response.reason}",
            "status": status,
            subject_key: subject,
            "url": url.split("?", 1)[0],
            "details": details,
        }
