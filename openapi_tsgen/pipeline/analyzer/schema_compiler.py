"""
Schema compiler that turns JSON-Schema nodes into TypeScript type text.

A node is interpreted by the first matching rule: literal extraction
(``const``/``enum``), then combinators (``oneOf``/``anyOf``/``allOf``),
then the declared or implied ``type``. Compilation may register enums in
the registry it was given; it never touches any other shared state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from ...constants import (
    TS_BOOLEAN,
    TS_NEVER,
    TS_NULL,
    TS_NUMBER,
    TS_RECORD_NEVER,
    TS_RECORD_UNKNOWN,
    TS_STRING,
    TS_UNKNOWN,
)
from ...utils import FieldSpec, join_hint, literal_to_ts, literal_union, object_type, paren_join, quote
from ..config import DEFAULT_MAX_DEPTH, SchemaMode
from .enum_registry import EnumRegistry
from .reference_resolver import ReferenceResolver, component_lookup, component_name

# Combinator keyword, hint prefix, joiner; first present keyword wins
COMBINATORS = (
    ("oneOf", "OneOf", " | "),
    ("anyOf", "AnyOf", " | "),
    ("allOf", "AllOf", " & "),
)

NUMERIC_KEY_PATTERNS = ("^[0-9]+$", "^\\d+$")

# Regex metacharacters that make a key prefix impossible to express as a template literal
_PATTERN_METACHARACTERS = frozenset("[]()|+*?.\\")


@dataclass(frozen=True)
class CompileContext:
    """Position of a node in the compilation walk.

    Attributes:
        depth: Nesting depth, bounded by the compiler's max depth
        mode: Projection mode controlling readOnly/writeOnly filtering
        name_hint: Naming hint used to derive enum names
    """

    depth: int = 0
    mode: SchemaMode = SchemaMode.DEFAULT
    name_hint: str = ""

    def child(self, hint_part: str = "") -> CompileContext:
        """Context one level deeper, with the hint extended by ``hint_part``."""
        return replace(self, depth=self.depth + 1, name_hint=join_hint(self.name_hint, hint_part))

    def rebased(self, name_hint: str) -> CompileContext:
        """Context one level deeper, with the hint replaced (used when inlining a named schema)."""
        return replace(self, depth=self.depth + 1, name_hint=name_hint)


def apply_nullable(ts: str, node: dict[str, Any]) -> str:
    """Union ``ts`` with null if the node sets ``nullable: true``; null itself is never wrapped."""
    if node.get("nullable") is True and ts != TS_NULL:
        return f"({ts} | {TS_NULL})"
    return ts


def include_property(prop: Any, mode: SchemaMode) -> bool:
    """Whether a property survives the projection mode."""
    if not isinstance(prop, dict):
        return True
    if mode is SchemaMode.INPUT and prop.get("readOnly") is True:
        return False
    if mode is SchemaMode.OUTPUT and prop.get("writeOnly") is True:
        return False
    return True


def pattern_key_type(pattern: str) -> str:
    """
    Translate a ``patternProperties`` regex into a TypeScript key type.

    Examples:
        "^[0-9]+$" -> "`${number}`"
        "^x-.*" -> "`x-${string}`"
        "^id$" -> '"id"'
        "[a-z]+" -> "string"
    """
    if pattern in NUMERIC_KEY_PATTERNS:
        return "`${number}`"
    if not pattern.startswith("^"):
        return TS_STRING

    prefix = pattern[1:]
    exact = prefix.endswith("$")
    if exact:
        prefix = prefix[:-1]
    if prefix.endswith(".*") or prefix.endswith(".+"):
        prefix = prefix[:-2]

    if not prefix or "`" in prefix:
        return TS_STRING
    if any(ch in _PATTERN_METACHARACTERS for ch in prefix):
        return TS_STRING
    if exact:
        return quote(prefix)
    return f"`{prefix}${{string}}`"


def union_types(items: list[str]) -> str:
    """Deduplicated union of value types; any unknown member absorbs the rest."""
    out: list[str] = []
    for item in items:
        if not item:
            continue
        if item == TS_UNKNOWN:
            return TS_UNKNOWN
        if item not in out:
            out.append(item)
    if not out:
        return TS_UNKNOWN
    if len(out) == 1:
        return out[0]
    return paren_join(out, " | ")


def union_key_types(items: list[str]) -> str:
    """Deduplicated union of key types; a plain string key absorbs the rest."""
    out: list[str] = []
    for item in items:
        if item == TS_STRING:
            return TS_STRING
        if item and item not in out:
            out.append(item)
    if not out:
        return TS_STRING
    if len(out) == 1:
        return out[0]
    return paren_join(out, " | ")


@dataclass
class ExtraProperties:
    """Keys admitted beyond the declared properties."""

    pattern_keys: list[str] = field(default_factory=list)
    pattern_values: list[str] = field(default_factory=list)

    # None when additionalProperties admits nothing typed
    additional_value: str | None = None
    additional_false: bool = False

    def render(self) -> str:
        """Mapping type for the extra keys, or an empty string if there are none."""
        has_pattern = bool(self.pattern_values)
        if not has_pattern and self.additional_value is None:
            return ""

        pattern_ts = ""
        pattern_value = ""
        if has_pattern:
            pattern_value = union_types(self.pattern_values)
            keys = union_key_types(self.pattern_keys)
            if keys == TS_STRING:
                pattern_ts = f"Record<{TS_STRING}, {pattern_value}>"
            else:
                pattern_ts = f"{{ [K in {keys}]?: {pattern_value} }}"

        if self.additional_value is None:
            return pattern_ts

        if not has_pattern:
            return f"Record<{TS_STRING}, {self.additional_value}>"
        record = f"Record<{TS_STRING}, {union_types([self.additional_value, pattern_value])}>"
        return f"({pattern_ts} & {record})"


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _literals(prop: Any) -> list[str] | None:
    """Rendered literals a property schema is constrained to, or None if it has no const/enum."""
    if not isinstance(prop, dict):
        return None
    if "const" in prop:
        literal = literal_to_ts(prop["const"])
        return [literal] if literal is not None else []
    values = _list(prop.get("enum"))
    if values:
        return [lit for lit in (literal_to_ts(v) for v in values) if lit is not None]
    return None


def if_discriminant(node: Any) -> tuple[str, list[str]] | None:
    """
    Detect an ``if`` schema that pins exactly one property to literal values.

    Args:
        node: The ``if`` schema

    Returns:
        The property name and its rendered literals, or None
    """
    if not isinstance(node, dict):
        return None
    props = node.get("properties")
    if not isinstance(props, dict) or len(props) != 1:
        return None
    ((name, prop),) = props.items()
    literals = _literals(prop)
    if not literals:
        return None
    return name, literals


class SchemaCompiler:
    """Compiles schema nodes of one document to TypeScript type text."""

    def __init__(self, resolver: ReferenceResolver, enums: EnumRegistry, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize the compiler.

        Args:
            resolver: Resolver for the document being compiled
            enums: Enum registry for the document being compiled
            max_depth: Depth past which nodes compile to ``unknown``
        """
        self.resolver = resolver
        self.enums = enums
        self.max_depth = max_depth

    def compile(self, node: Any, ctx: CompileContext) -> str:
        """
        Compile a schema node.

        Args:
            node: The schema node (non-mappings compile to ``unknown``)
            ctx: Depth, projection mode and naming hint of the node

        Returns:
            TypeScript type text
        """
        if not isinstance(node, dict):
            return TS_UNKNOWN

        ref = node.get("$ref")
        if isinstance(ref, str) and ref:
            return self._compile_reference(ref, ctx)

        if ctx.depth > self.max_depth:
            return TS_UNKNOWN

        ts = self._compile_literal(node, ctx)
        if ts is None:
            ts = self._compile_combinator(node, ctx)
        if ts is None:
            ts = self._compile_typed(node, ctx)
        return ts

    def _compile_reference(self, ref: str, ctx: CompileContext) -> str:
        name = component_name(ref, "schemas")
        if name is None:
            return TS_UNKNOWN
        if ctx.mode is SchemaMode.DEFAULT:
            return component_lookup("schemas", name)
        # Alias chains never pass through the depth check in compile()
        if ctx.depth >= self.max_depth:
            return TS_UNKNOWN

        # Readonly/writeOnly filtering has to reach into the referenced schema
        target = self.resolver.schema(name)
        if target is None:
            return component_lookup("schemas", name)
        return self.compile(target, ctx.rebased(name))

    def _compile_literal(self, node: dict[str, Any], ctx: CompileContext) -> str | None:
        if "const" in node:
            value = node["const"]
            ts = self.enums.emit_enum(ctx.name_hint, [value], node)
            if ts:
                return ts
            literal = literal_to_ts(value)
            if literal is not None:
                return apply_nullable(literal, node)

        values = _list(node.get("enum"))
        if not values:
            return None
        ts = self.enums.emit_enum(ctx.name_hint, values, node)
        if ts:
            return ts
        parts = []
        for value in values:
            literal = literal_to_ts(value)
            if literal is None:
                return apply_nullable(TS_UNKNOWN, node)
            parts.append(literal)
        return apply_nullable(paren_join(parts, " | "), node)

    def _compile_combinator(self, node: dict[str, Any], ctx: CompileContext) -> str | None:
        for keyword, hint_prefix, joiner in COMBINATORS:
            branches = _list(node.get(keyword))
            if branches:
                parts = [
                    self.compile(branch, ctx.child(f"{hint_prefix}{i}")) for i, branch in enumerate(branches, start=1)
                ]
                return apply_nullable(paren_join(parts, joiner), node)
        return None

    def _compile_typed(self, node: dict[str, Any], ctx: CompileContext) -> str:
        schema_type = node.get("type")
        if isinstance(schema_type, list):
            return self._compile_type_list(node, schema_type, ctx)

        if schema_type == "string":
            return apply_nullable(TS_STRING, node)
        if schema_type in ("number", "integer"):
            return apply_nullable(TS_NUMBER, node)
        if schema_type == "boolean":
            return apply_nullable(TS_BOOLEAN, node)
        if schema_type == "null":
            return TS_NULL
        if schema_type == "array":
            return apply_nullable(self._compile_array(node, ctx), node)
        if schema_type == "object":
            return apply_nullable(self._compile_object(node, ctx), node)
        if schema_type is not None:
            return apply_nullable(TS_UNKNOWN, node)

        # Untyped: infer from the keywords present
        props = node.get("properties")
        if (isinstance(props, dict) and props) or _list(node.get("required")):
            return apply_nullable(self._compile_object(node, ctx), node)
        if node.get("items") is not None:
            return apply_nullable(self._compile_array(node, ctx), node)
        return apply_nullable(TS_UNKNOWN, node)

    def _compile_type_list(self, node: dict[str, Any], types: list[Any], ctx: CompileContext) -> str:
        """Compile ``type: [a, b]`` as the union of each listed type."""
        parts: list[str] = []
        for schema_type in types:
            if not isinstance(schema_type, str):
                continue
            ts = self._compile_typed({**node, "type": schema_type, "nullable": False}, ctx)
            if ts not in parts:
                parts.append(ts)
        if not parts:
            return apply_nullable(TS_UNKNOWN, node)
        ts = parts[0] if len(parts) == 1 else paren_join(parts, " | ")
        return apply_nullable(ts, node)

    def _compile_array(self, node: dict[str, Any], ctx: CompileContext) -> str:
        items = node.get("items")
        if items is None:
            return f"{TS_UNKNOWN}[]"
        return self.compile(items, ctx.child("Item")) + "[]"

    def _compile_object(self, node: dict[str, Any], ctx: CompileContext) -> str:
        props = node.get("properties")
        if not isinstance(props, dict):
            props = {}
        required = {name for name in _list(node.get("required")) if isinstance(name, str)}

        extra = self._extra_properties(node, ctx)
        extra_ts = extra.render()

        if not props:
            if required:
                # Required names without declared properties
                base = object_type([FieldSpec(name, TS_UNKNOWN) for name in required])
                return f"({base} & {extra_ts})" if extra_ts else base
            if extra_ts:
                return extra_ts
            if extra.additional_false:
                return TS_RECORD_NEVER
            return TS_RECORD_UNKNOWN

        fields = []
        for key in sorted(props):
            if not include_property(props[key], ctx.mode):
                continue
            ts = self.compile(props[key], ctx.child(key))
            fields.append(FieldSpec(key, ts, optional=key not in required))

        base = object_type(fields, sort=False)
        if extra_ts:
            base = f"({base} & {extra_ts})"

        constraints = self._dependent_required(node, props, required, ctx)
        if constraints:
            base = "(" + " & ".join([base, *constraints]) + ")"

        if any(keyword in node for keyword in ("if", "then", "else")):
            return self._compile_conditional(node, props, base, ctx)
        return base

    def _extra_properties(self, node: dict[str, Any], ctx: CompileContext) -> ExtraProperties:
        extra = ExtraProperties()

        patterns = node.get("patternProperties")
        if isinstance(patterns, dict):
            for i, pattern in enumerate(sorted(patterns), start=1):
                value = patterns[pattern]
                if isinstance(value, dict):
                    extra.pattern_values.append(self.compile(value, ctx.child(f"Pattern{i}")))
                    extra.pattern_keys.append(pattern_key_type(pattern))

        additional = node.get("additionalProperties")
        if additional is True:
            extra.additional_value = TS_UNKNOWN
        elif additional is False:
            extra.additional_false = True
        elif isinstance(additional, dict):
            extra.additional_value = self.compile(additional, ctx.child("AdditionalProperties"))

        return extra

    def _property_ts(self, props: dict[str, Any], name: str, ctx: CompileContext) -> str:
        if name not in props:
            return TS_UNKNOWN
        return self.compile(props[name], ctx.child(name))

    def _dependent_required(
        self, node: dict[str, Any], props: dict[str, Any], required: set[str], ctx: CompileContext
    ) -> list[str]:
        """
        Express ``dependentRequired`` as type constraints.

        A key that is always required simply requires its dependents. An
        optional key becomes a union of "key absent" and "key and all
        dependents present".
        """
        dependencies = node.get("dependentRequired")
        if not isinstance(dependencies, dict):
            return []

        constraints = []
        for key in sorted(dependencies):
            names = [name for name in _list(dependencies[key]) if isinstance(name, str)]
            if not names:
                continue
            present = [FieldSpec(key, self._property_ts(props, key, ctx))]
            present.extend(FieldSpec(name, self._property_ts(props, name, ctx)) for name in names)

            if key in required:
                constraints.append(object_type(present))
                continue
            absent = object_type([FieldSpec(key, TS_NEVER, optional=True)])
            constraints.append(paren_join([absent, object_type(present)], " | "))
        return constraints

    def _compile_conditional(self, node: dict[str, Any], props: dict[str, Any], base: str, ctx: CompileContext) -> str:
        has_then = "then" in node
        has_else = "else" in node

        discriminant = if_discriminant(node.get("if"))
        if discriminant is not None:
            prop, if_values = discriminant
            else_values = [v for v in (_literals(props.get(prop)) or []) if v not in if_values]

            parts = []
            if has_then:
                pinned = object_type([FieldSpec(prop, literal_union(if_values, TS_UNKNOWN))])
                then_ts = self.compile(node["then"], ctx.child("Then"))
                parts.append(f"(({base} & {pinned}) & {then_ts})")
            if has_else or else_values:
                part = base
                if else_values:
                    pinned = object_type([FieldSpec(prop, literal_union(else_values, TS_UNKNOWN))])
                    part = f"({part} & {pinned})"
                if has_else:
                    part = f"({part} & {self.compile(node['else'], ctx.child('Else'))})"
                parts.append(part)
            if parts:
                return parts[0] if len(parts) == 1 else paren_join(parts, " | ")

        # Approximation: intersect the base with whatever branches exist
        parts = []
        if has_then:
            parts.append(self.compile(node["then"], ctx.child("Then")))
        if has_else:
            parts.append(self.compile(node["else"], ctx.child("Else")))
        if not parts and "if" in node:
            parts.append(self.compile(node["if"], ctx.child("If")))
        if not parts:
            return base
        if len(parts) == 1:
            return f"({base} & {parts[0]})"
        return f"({base} & {paren_join(parts, ' | ')})"
