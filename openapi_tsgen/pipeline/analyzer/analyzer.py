"""
IR builder that compiles a parsed document into the IR.

Phase 2 of the pipeline: resolve references, compile every component
section, then every path and webhook operation. Components come first
because operations may point at them by name.
"""

from __future__ import annotations

import logging
from typing import Any

from ...constants import TS_NEVER, TS_RECORD_UNKNOWN, TS_STRING, TS_UNKNOWN
from ...utils import (
    FieldSpec,
    is_status_code,
    join_hint,
    object_type,
    paren_join,
    quote,
    render_field,
    safe_prop,
    sanitize_ident,
)
from ..config import DEFAULT_MAX_DEPTH, SchemaMode
from ..document.nodes import (
    Document,
    Header,
    MediaType,
    OAuthFlow,
    OAuthFlows,
    Operation,
    Parameter,
    PathItem,
    RefOr,
    RequestBody,
    Response,
    SecurityScheme,
)
from ..errors import NilDocumentError, OpenApiTsGenError
from .enum_registry import EnumRegistry
from .ir_nodes import IR, IROperation, IRPathItem, ResolvedParam
from .reference_resolver import ReferenceResolver, component_lookup
from .schema_compiler import CompileContext, SchemaCompiler

logger = logging.getLogger(__name__)


def status_sort_key(code: str) -> tuple[int, int, str]:
    """Numeric status codes first in numeric order, then everything else lexicographically."""
    if is_status_code(code):
        return (0, int(code), "")
    return (1, 0, code)


def _string_literal(value: str) -> str:
    """Quoted literal, or the plain string type when there is no value."""
    return quote(value) if value else TS_STRING


def security_scheme_ts(scheme: SecurityScheme) -> str:
    """
    Compile a security scheme to an object type.

    Literal fields (type, name, in...) render as quoted string literals;
    a declared description adds an optional ``description`` field first.
    """
    if scheme.type == "apiKey":
        fields = {"type": quote("apiKey"), "name": _string_literal(scheme.name), "in": _string_literal(scheme.location)}
    elif scheme.type == "http":
        fields = {"type": quote("http"), "scheme": _string_literal(scheme.scheme)}
        if scheme.bearer_format:
            fields["bearerFormat"] = quote(scheme.bearer_format)
    elif scheme.type == "oauth2":
        fields = {"type": quote("oauth2"), "flows": oauth_flows_ts(scheme.flows)}
    elif scheme.type == "openIdConnect":
        fields = {"type": quote("openIdConnect"), "openIdConnectUrl": _string_literal(scheme.open_id_connect_url)}
    else:
        fields = {}
        for key, value in (
            ("type", scheme.type),
            ("name", scheme.name),
            ("in", scheme.location),
            ("scheme", scheme.scheme),
            ("bearerFormat", scheme.bearer_format),
            ("openIdConnectUrl", scheme.open_id_connect_url),
        ):
            if value:
                fields[key] = quote(value)
        if scheme.flows is not None:
            fields["flows"] = oauth_flows_ts(scheme.flows)
        if not fields:
            return TS_RECORD_UNKNOWN

    lines = ["{\n"]
    if scheme.description:
        lines.append(render_field("  ", "description", TS_STRING, optional=True))
    lines.extend(render_field("  ", safe_prop(key), fields[key]) for key in sorted(fields))
    lines.append("}")
    return "".join(lines)


def oauth_flows_ts(flows: OAuthFlows | None) -> str:
    if flows is None:
        return TS_UNKNOWN
    fields = [
        FieldSpec(name, oauth_flow_ts(flow))
        for name, flow in (
            ("implicit", flows.implicit),
            ("password", flows.password),
            ("clientCredentials", flows.client_credentials),
            ("authorizationCode", flows.authorization_code),
        )
        if flow is not None
    ]
    return object_type(fields)


def oauth_flow_ts(flow: OAuthFlow) -> str:
    # Field order follows the flow object, not the alphabet
    fields = []
    if flow.authorization_url:
        fields.append(FieldSpec("authorizationUrl", TS_STRING))
    if flow.token_url:
        fields.append(FieldSpec("tokenUrl", TS_STRING))
    if flow.refresh_url:
        fields.append(FieldSpec("refreshUrl", TS_STRING))
    if flow.scopes:
        scopes = object_type([FieldSpec(name, TS_STRING) for name in flow.scopes])
    else:
        scopes = f"Record<{TS_STRING}, {TS_STRING}>"
    fields.append(FieldSpec("scopes", scopes))
    return object_type(fields, sort=False)


class IRBuilder:
    """Builds the IR for one document.

    A builder owns the enum registry of the compilation it runs, so a
    fresh builder must be used per document.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize the builder.

        Args:
            max_depth: Depth past which schema nodes compile to ``unknown``
        """
        self.max_depth = max_depth

        # Will be set during build
        self.document: Document | None = None
        self.resolver: ReferenceResolver | None = None
        self.compiler: SchemaCompiler | None = None

    def build(self, document: Document | None) -> IR:
        """
        Compile a document into the IR.

        Args:
            document: The parsed document

        Returns:
            IR ready for emission

        Raises:
            NilDocumentError: If no document was supplied
            OpenApiTsGenError: On the first reference failure, labelled
                with the location that triggered it
        """
        if document is None:
            raise NilDocumentError()

        ir = IR(servers=list(document.servers), openapi_version=document.openapi)
        self.document = document
        self.resolver = ReferenceResolver(document)
        self.compiler = SchemaCompiler(self.resolver, EnumRegistry(ir.enums), self.max_depth)

        self._build_components(ir)
        self._build_path_items(document.paths, ir.paths, "path")
        self._build_path_items(document.webhooks, ir.webhooks, "webhook")

        logger.debug(
            "Built IR: %d schemas, %d enums, %d paths, %d webhooks",
            len(ir.schemas),
            len(ir.enums),
            len(ir.paths),
            len(ir.webhooks),
        )
        return ir

    def _compile(self, node: Any, mode: SchemaMode, name_hint: str) -> str:
        return self.compiler.compile(node, CompileContext(mode=mode, name_hint=name_hint))

    # Components

    def _build_components(self, ir: IR) -> None:
        components = self.document.components
        if components is None:
            return

        for name in sorted(components.schemas):
            ir.schemas[name] = self._compile(components.schemas[name], SchemaMode.DEFAULT, name)

        sections = [
            ("responses", components.responses, ir.responses, self._response_ts, SchemaMode.OUTPUT),
            ("requestBodies", components.request_bodies, ir.request_bodies, self._request_body_ts, SchemaMode.INPUT),
            ("parameters", components.parameters, ir.parameters, self._parameter_ts, SchemaMode.INPUT),
            ("headers", components.headers, ir.headers, self._header_ts, SchemaMode.OUTPUT),
        ]
        for section, entries, target, compile_entry, mode in sections:
            for name in sorted(entries):
                try:
                    value = self.resolver.resolve(entries[name], section)
                    target[name] = compile_entry(value, name, mode)
                except OpenApiTsGenError as err:
                    raise err.add_context(f"components.{section}.{name}")

        for name in sorted(components.security_schemes):
            try:
                scheme = self.resolver.resolve(components.security_schemes[name], "securitySchemes")
            except OpenApiTsGenError as err:
                raise err.add_context(f"components.securitySchemes.{name}")
            ir.security_schemes[name] = security_scheme_ts(scheme)

    # Paths and webhooks

    def _build_path_items(self, items: dict[str, RefOr[PathItem]], target: dict[str, IRPathItem], label: str) -> None:
        for key in sorted(items):
            try:
                item = self.resolver.resolve(items[key], "pathItems")
                operations = self._build_operations(item)
            except OpenApiTsGenError as err:
                raise err.add_context(f"{label} {quote(key)}")
            if operations:
                target[key] = IRPathItem(operations=operations)

    def _build_operations(self, item: PathItem) -> dict[str, IROperation]:
        shared_params = self._collect_params(item.parameters)

        operations = {}
        for method, operation in item.operations.items():
            operations[method] = self._build_operation(method, operation, item, shared_params)
        return operations

    def _build_operation(
        self,
        method: str,
        operation: Operation,
        item: PathItem,
        shared_params: dict[tuple[str, str], ResolvedParam],
    ) -> IROperation:
        try:
            params = {**shared_params, **self._collect_params(operation.parameters)}
        except OpenApiTsGenError as err:
            raise err.add_context(f"{method} params")

        try:
            request_body = self._operation_request_body(method, operation)
        except OpenApiTsGenError as err:
            raise err.add_context(f"{method} requestBody")

        try:
            responses = self._operation_responses(method, operation)
        except OpenApiTsGenError as err:
            raise err.add_context(f"{method} responses")

        ir_operation = IROperation(
            request_body=request_body,
            responses=responses,
            security=operation.security or self.document.security,
            servers=operation.servers or item.servers or self.document.servers,
        )
        groups = {
            "path": ir_operation.path_params,
            "query": ir_operation.query_params,
            "header": ir_operation.header_params,
            "cookie": ir_operation.cookie_params,
        }
        for (name, location), param in sorted(params.items()):
            # Parameters in any other location are dropped
            if location in groups:
                groups[location][name] = param
        return ir_operation

    def _collect_params(self, params: list[RefOr[Parameter]]) -> dict[tuple[str, str], ResolvedParam]:
        """Compile parameters keyed by (name, location); later entries override earlier ones."""
        out = {}
        for value in params:
            param = self.resolver.resolve(value, "parameters")
            ref_name = self.resolver.reference_name(value, "parameters")
            if ref_name is not None:
                ts = component_lookup("parameters", ref_name)
            else:
                ts = self._parameter_ts(param, param.name, SchemaMode.INPUT)
            # Path segments can never be omitted
            required = param.required or param.location == "path"
            out[(param.name, param.location)] = ResolvedParam(location=param.location, ts=ts, required=required)
        return out

    def _operation_request_body(self, method: str, operation: Operation) -> str:
        if operation.request_body is None:
            return TS_NEVER
        body = self.resolver.resolve(operation.request_body, "requestBodies")
        ref_name = self.resolver.reference_name(operation.request_body, "requestBodies")
        if ref_name is not None:
            return component_lookup("requestBodies", ref_name)
        return self._request_body_ts(body, join_hint(method, "RequestBody"), SchemaMode.INPUT)

    def _operation_responses(self, method: str, operation: Operation) -> dict[str, str]:
        out = {}
        for code in sorted(operation.responses, key=status_sort_key):
            value = operation.responses[code]
            response = self.resolver.resolve(value, "responses")
            ref_name = self.resolver.reference_name(value, "responses")
            if ref_name is not None:
                out[code] = component_lookup("responses", ref_name)
            else:
                out[code] = self._response_ts(response, join_hint(method, f"Response_{code}"), SchemaMode.OUTPUT)
        return out

    # Entity compilation

    def _content_ts(self, content: dict[str, MediaType], empty: str, name_hint: str, mode: SchemaMode) -> str:
        """
        Compile a media-type map to the union of its distinct schema types.

        Args:
            content: Media type -> media type object
            empty: Type used when the map is empty
            name_hint: Naming hint, extended by each media type
            mode: Projection mode

        Returns:
            A single type, or a parenthesized union of distinct types
        """
        if not content:
            return empty

        parts: list[str] = []
        for media_type in sorted(content):
            schema = content[media_type].schema
            ts = TS_UNKNOWN
            if schema is not None:
                ts = self._compile(schema, mode, join_hint(name_hint, f"Media_{sanitize_ident(media_type)}"))
            if ts not in parts:
                parts.append(ts)
        if len(parts) == 1:
            return parts[0]
        return paren_join(parts, " | ")

    def _request_body_ts(self, body: RequestBody, name_hint: str, mode: SchemaMode) -> str:
        return self._content_ts(body.content, TS_UNKNOWN, name_hint, mode)

    def _parameter_ts(self, param: Parameter, name_hint: str, mode: SchemaMode) -> str:
        if param.schema is not None:
            return self._compile(param.schema, mode, name_hint)
        return self._content_ts(param.content, TS_UNKNOWN, name_hint, mode)

    def _header_ts(self, header: Header, name_hint: str, mode: SchemaMode) -> str:
        if header.schema is not None:
            return self._compile(header.schema, mode, name_hint)
        return self._content_ts(header.content, TS_UNKNOWN, name_hint, mode)

    def _response_ts(self, response: Response, name_hint: str, mode: SchemaMode) -> str:
        body = self._content_ts(response.content, TS_NEVER, name_hint, mode)
        if not response.headers:
            return body

        lines = ["{\n", "  headers: {\n"]
        for name in sorted(response.headers):
            value = response.headers[name]
            try:
                header = self.resolver.resolve(value, "headers")
            except OpenApiTsGenError as err:
                raise err.add_context(f"header {quote(name)}")
            ref_name = self.resolver.reference_name(value, "headers")
            if ref_name is not None:
                ts = component_lookup("headers", ref_name)
            else:
                ts = self._header_ts(header, name, SchemaMode.OUTPUT)
            lines.append(render_field("    ", safe_prop(name), ts, optional=not header.required))
        lines.append("  };\n")
        lines.append(render_field("  ", "body", body))
        lines.append("}")
        return "".join(lines)
