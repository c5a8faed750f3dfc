"""
TypeScript backend that renders the IR as declarations.

Phase 3 of the pipeline. Pure rendering: every type text is already
compiled, the backend only decides order and layout. Each top-level
declaration is followed by one blank line.
"""

from __future__ import annotations

from datetime import datetime, timezone

from ...constants import TS_EMPTY_OBJECT, TS_NEVER
from ...utils import FieldSpec, is_status_code, literal_union, object_type, paren_join, quote, render_field, safe_prop
from ..analyzer.analyzer import status_sort_key
from ..analyzer.ir_nodes import IR, IROperation, IRPathItem, ResolvedParam
from ..config import GeneratorConfig
from ..document.nodes import SecurityRequirement, Server, ServerVariable
from ..rendering import render_template

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def array_of(parts: list[str]) -> str:
    """Array type of a single element type, or of the union of several."""
    if not parts:
        return "[]"
    if len(parts) == 1:
        return parts[0] + "[]"
    return paren_join(parts, " | ") + "[]"


def servers_ts(servers: list[Server]) -> str:
    return array_of([server_ts(server) for server in servers])


def server_ts(server: Server) -> str:
    fields = [FieldSpec("url", quote(server.url))]
    if server.description:
        fields.append(FieldSpec("description", quote(server.description)))
    if server.variables:
        variables = [FieldSpec(name, server_variable_ts(var)) for name, var in server.variables.items()]
        fields.append(FieldSpec("variables", object_type(variables)))
    return object_type(fields)


def server_variable_ts(variable: ServerVariable) -> str:
    fields = [FieldSpec("default", quote(variable.default))]
    if variable.description:
        fields.append(FieldSpec("description", quote(variable.description)))
    if variable.enum:
        fields.append(FieldSpec("enum", literal_union([quote(v) for v in variable.enum], "") + "[]"))
    return object_type(fields)


def security_ts(requirements: list[SecurityRequirement]) -> str:
    return array_of([security_requirement_ts(requirement) for requirement in requirements])


def security_requirement_ts(requirement: SecurityRequirement) -> str:
    """Scheme name -> scope literals; an empty requirement means no authentication."""
    if not requirement:
        return TS_EMPTY_OBJECT
    fields = []
    for scheme, scopes in requirement.items():
        if scopes:
            ts = literal_union([quote(scope) for scope in scopes], "") + "[]"
        else:
            ts = "string[]"
        fields.append(FieldSpec(scheme, ts))
    return object_type(fields)


def response_key(code: str) -> str:
    """Numeric status codes and ``default`` stay bare, anything else is quoted."""
    if is_status_code(code) or code == "default":
        return code
    return quote(code)


class TypeScriptBackend:
    """Renders an IR to a TypeScript declaration file."""

    def __init__(self, config: GeneratorConfig | None = None):
        """
        Initialize the backend.

        Args:
            config: Generator configuration (banner identity)
        """
        self.config = config or GeneratorConfig()

    def generate(self, ir: IR, generated_at: datetime | None = None) -> str:
        """
        Render the IR.

        Args:
            ir: The compiled IR
            generated_at: Timestamp for the banner, defaults to now

        Returns:
            The declaration file text
        """
        if generated_at is None:
            generated_at = datetime.now(timezone.utc)

        blocks = []
        if self.config.add_generation_comment:
            blocks.append(self.generate_header(ir, generated_at))
        blocks.extend(ir.enums[name] for name in sorted(ir.enums))
        if ir.servers:
            blocks.append(f"export type Servers = {servers_ts(ir.servers)};")
        if ir.has_components():
            blocks.append(self._components(ir))
        if ir.paths:
            blocks.append(self._path_items("Routes", ir.paths))
        if ir.webhooks:
            blocks.append(self._path_items("Webhooks", ir.webhooks))

        return "".join(block + "\n\n" for block in blocks)

    def generate_header(self, ir: IR, generated_at: datetime) -> str:
        """Render the banner comment."""
        if generated_at.tzinfo is not None:
            generated_at = generated_at.astimezone(timezone.utc)
        return render_template(
            "prefix.ts.jinja2",
            generator=self.config.generator,
            openapi_version=ir.openapi_version,
            generated_at=generated_at.strftime(TIMESTAMP_FORMAT),
        )

    def _components(self, ir: IR) -> str:
        lines = ["export type Components = {\n"]
        for section, values in ir.component_sections():
            if not values:
                continue
            lines.append(f"  {section}: {{\n")
            lines.extend(render_field("    ", safe_prop(name), values[name]) for name in sorted(values))
            lines.append("  };\n")
        lines.append("};")
        return "".join(lines)

    def _path_items(self, label: str, items: dict[str, IRPathItem]) -> str:
        lines = [f"export type {label} = {{\n"]
        for key in sorted(items):
            lines.append(f"  {quote(key)}: {{\n")
            operations = items[key].operations
            for method in sorted(operations):
                lines.append(render_field("    ", method, self._operation(operations[method])))
            lines.append("  };\n")
        lines.append("};")
        return "".join(lines)

    def _operation(self, operation: IROperation) -> str:
        """Render one operation as an object type (without trailing semicolon)."""
        lines = ["{\n"]
        for label, params in operation.param_groups():
            if params:
                lines.append(render_field("  ", label, self._params(params)))
        if operation.security:
            lines.append(render_field("  ", "security", security_ts(operation.security)))
        if operation.servers:
            lines.append(render_field("  ", "servers", servers_ts(operation.servers)))
        if operation.request_body != TS_NEVER:
            lines.append(render_field("  ", "requestBody", operation.request_body))

        lines.append("  responses: {\n")
        for code in sorted(operation.responses, key=status_sort_key):
            lines.append(render_field("    ", response_key(code), operation.responses[code]))
        lines.append("  };\n")
        lines.append("}")
        return "".join(lines)

    def _params(self, params: dict[str, ResolvedParam]) -> str:
        fields = [FieldSpec(name, param.ts, optional=not param.required) for name, param in params.items()]
        return object_type(fields)
