"""
Document parser that builds the typed document model.

Phase 1 of the pipeline: turn a decoded node tree (from YAML or JSON)
into document nodes without resolving references. Every entity that may
be referenced becomes either a Reference or an Inline value.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from ...constants import HTTP_METHODS
from ..errors import DocumentError, NilDocumentError
from .nodes import (
    Components,
    Document,
    Header,
    Info,
    Inline,
    MediaType,
    OAuthFlow,
    OAuthFlows,
    Operation,
    Parameter,
    PathItem,
    Reference,
    RefOr,
    RequestBody,
    Response,
    SecurityRequirement,
    SecurityScheme,
    Server,
    ServerVariable,
)

T = TypeVar("T")


def _mapping(value: Any) -> dict[str, Any]:
    """Return value as a string-keyed dict, or an empty dict if it is not a mapping."""
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items()}


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class DocumentParser:
    """Parses a decoded document tree into a Document."""

    def parse(self, tree: Any) -> Document:
        """
        Parse a decoded document tree.

        Args:
            tree: The decoded document (nested dicts and lists)

        Returns:
            Document with unresolved references

        Raises:
            NilDocumentError: If no tree was supplied
            DocumentError: If the tree is not a mapping
        """
        if tree is None:
            raise NilDocumentError()
        if not isinstance(tree, dict):
            raise DocumentError(f"document root must be a mapping, got {type(tree).__name__}")
        tree = _mapping(tree)

        info = _mapping(tree.get("info"))
        document = Document(
            openapi=_text(tree.get("openapi")),
            info=Info(title=_text(info.get("title")), version=_text(info.get("version"))),
            servers=self._parse_servers(tree.get("servers")),
            security=self._parse_security(tree.get("security")),
        )

        for path, item in _mapping(tree.get("paths")).items():
            document.paths[path] = self._ref_or(item, self._parse_path_item)
        for name, item in _mapping(tree.get("webhooks")).items():
            document.webhooks[name] = self._ref_or(item, self._parse_path_item)

        if isinstance(tree.get("components"), dict):
            document.components = self._parse_components(_mapping(tree["components"]))

        return document

    def _ref_or(self, value: Any, parse: Callable[[dict[str, Any]], T]) -> RefOr[T]:
        """Wrap a node as a Reference if it carries ``$ref``, otherwise parse it inline."""
        node = _mapping(value)
        ref = node.get("$ref")
        if isinstance(ref, str):
            return Reference(ref)
        return Inline(parse(node))

    def _parse_components(self, node: dict[str, Any]) -> Components:
        components = Components()
        for name, schema in _mapping(node.get("schemas")).items():
            components.schemas[name] = schema if isinstance(schema, dict) else {}
        for name, value in _mapping(node.get("responses")).items():
            components.responses[name] = self._ref_or(value, self._parse_response)
        for name, value in _mapping(node.get("requestBodies")).items():
            components.request_bodies[name] = self._ref_or(value, self._parse_request_body)
        for name, value in _mapping(node.get("parameters")).items():
            components.parameters[name] = self._ref_or(value, self._parse_parameter)
        for name, value in _mapping(node.get("headers")).items():
            components.headers[name] = self._ref_or(value, self._parse_header)
        for name, value in _mapping(node.get("securitySchemes")).items():
            components.security_schemes[name] = self._ref_or(value, self._parse_security_scheme)
        for name, value in _mapping(node.get("pathItems")).items():
            components.path_items[name] = self._ref_or(value, self._parse_path_item)
        return components

    def _parse_path_item(self, node: dict[str, Any]) -> PathItem:
        item = PathItem(
            parameters=[self._ref_or(p, self._parse_parameter) for p in _list(node.get("parameters"))],
            servers=self._parse_servers(node.get("servers")),
        )
        for method in HTTP_METHODS:
            if isinstance(node.get(method), dict):
                item.operations[method] = self._parse_operation(_mapping(node[method]))
        return item

    def _parse_operation(self, node: dict[str, Any]) -> Operation:
        operation = Operation(
            parameters=[self._ref_or(p, self._parse_parameter) for p in _list(node.get("parameters"))],
            security=self._parse_security(node.get("security")),
            servers=self._parse_servers(node.get("servers")),
        )
        if isinstance(node.get("requestBody"), dict):
            operation.request_body = self._ref_or(node["requestBody"], self._parse_request_body)
        for code, value in _mapping(node.get("responses")).items():
            operation.responses[code] = self._ref_or(value, self._parse_response)
        return operation

    def _parse_parameter(self, node: dict[str, Any]) -> Parameter:
        return Parameter(
            name=_text(node.get("name")),
            location=_text(node.get("in")),
            required=node.get("required") is True,
            schema=self._parse_schema(node.get("schema")),
            content=self._parse_content(node.get("content")),
        )

    def _parse_header(self, node: dict[str, Any]) -> Header:
        return Header(
            required=node.get("required") is True,
            schema=self._parse_schema(node.get("schema")),
            content=self._parse_content(node.get("content")),
        )

    def _parse_request_body(self, node: dict[str, Any]) -> RequestBody:
        return RequestBody(
            required=node.get("required") is True,
            content=self._parse_content(node.get("content")),
        )

    def _parse_response(self, node: dict[str, Any]) -> Response:
        return Response(
            description=_text(node.get("description")),
            headers={name: self._ref_or(h, self._parse_header) for name, h in _mapping(node.get("headers")).items()},
            content=self._parse_content(node.get("content")),
        )

    def _parse_content(self, value: Any) -> dict[str, MediaType]:
        content = {}
        for media_type, node in _mapping(value).items():
            content[media_type] = MediaType(schema=self._parse_schema(_mapping(node).get("schema")))
        return content

    def _parse_schema(self, value: Any) -> dict[str, Any] | None:
        # Boolean schemas carry no structure worth compiling
        if isinstance(value, dict):
            return value
        return None

    def _parse_security_scheme(self, node: dict[str, Any]) -> SecurityScheme:
        scheme = SecurityScheme(
            type=_text(node.get("type")),
            description=_text(node.get("description")),
            name=_text(node.get("name")),
            location=_text(node.get("in")),
            scheme=_text(node.get("scheme")),
            bearer_format=_text(node.get("bearerFormat")),
            open_id_connect_url=_text(node.get("openIdConnectUrl")),
        )
        if isinstance(node.get("flows"), dict):
            flows = _mapping(node["flows"])
            scheme.flows = OAuthFlows(
                implicit=self._parse_oauth_flow(flows.get("implicit")),
                password=self._parse_oauth_flow(flows.get("password")),
                client_credentials=self._parse_oauth_flow(flows.get("clientCredentials")),
                authorization_code=self._parse_oauth_flow(flows.get("authorizationCode")),
            )
        return scheme

    def _parse_oauth_flow(self, value: Any) -> OAuthFlow | None:
        if not isinstance(value, dict):
            return None
        node = _mapping(value)
        return OAuthFlow(
            authorization_url=_text(node.get("authorizationUrl")),
            token_url=_text(node.get("tokenUrl")),
            refresh_url=_text(node.get("refreshUrl")),
            scopes={k: _text(v) for k, v in _mapping(node.get("scopes")).items()},
        )

    def _parse_servers(self, value: Any) -> list[Server]:
        servers = []
        for raw in _list(value):
            node = _mapping(raw)
            variables = {}
            for name, var in _mapping(node.get("variables")).items():
                var = _mapping(var)
                variables[name] = ServerVariable(
                    default=_text(var.get("default")),
                    description=_text(var.get("description")),
                    enum=[_text(v) for v in _list(var.get("enum"))],
                )
            servers.append(
                Server(
                    url=_text(node.get("url")),
                    description=_text(node.get("description")),
                    variables=variables,
                )
            )
        return servers

    def _parse_security(self, value: Any) -> list[SecurityRequirement]:
        requirements = []
        for raw in _list(value):
            requirement = {}
            for scheme, scopes in _mapping(raw).items():
                requirement[scheme] = [_text(s) for s in _list(scopes)]
            requirements.append(requirement)
        return requirements
