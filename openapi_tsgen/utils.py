"""
Utility functions for naming and TypeScript text assembly.
"""

from __future__ import annotations

import json
import re
from decimal import Decimal
from typing import Any, NamedTuple

from .constants import NOISE_TOKENS, TS_NULL

# Split on anything that is not an ASCII letter or digit
_SEPARATOR_PATTERN = re.compile(r"[^A-Za-z0-9]+")

# camelCase and letter/digit boundaries inside a single token
_CAMEL_BOUNDARY_PATTERN = re.compile(r"(?<=[a-z])(?=[A-Z])|(?<=[0-9])(?=[^0-9])|(?<=[^0-9])(?=[0-9])")

_IDENT_PATTERN = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*", re.ASCII)

_COMBINATOR_INDEX_PATTERN = re.compile(r"(allof|anyof|oneof|of)[0-9]+")


class FieldSpec(NamedTuple):
    """A single field of a rendered object type."""

    name: str
    ts: str
    optional: bool = False


def is_noise_token(token: str) -> bool:
    """Whether a hint token only describes schema structure (``allOf``, ``item``, ``OneOf2``...)."""
    if not token:
        return True
    lowered = token.lower()
    if lowered in NOISE_TOKENS:
        return True
    return _COMBINATOR_INDEX_PATTERN.fullmatch(lowered) is not None


def split_words(text: str) -> list[str]:
    """Split a naming hint into meaningful words.

    Examples:
        "Cat_AllOf2_petType" -> ["Cat", "pet", "Type"]
        "post_RequestBody_Media_application_json" -> ["post", "application", "json"]
    """
    words = []
    for token in _SEPARATOR_PATTERN.split(text):
        if is_noise_token(token):
            continue
        for word in _CAMEL_BOUNDARY_PATTERN.split(token):
            if not is_noise_token(word):
                words.append(word)
    return words


def camel_case_from_hint(hint: str) -> str:
    """Convert a naming hint to an identifier-safe PascalCase name.

    Examples:
        "User_role" -> "UserRole"
        "ORDER_state" -> "OrderState"
        "MixedAnyAllOne_AllOf2_OneOf1" -> "MixedAnyAllOne"
    """
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(hint))


def sanitize_ident(text: str) -> str:
    """Replace every character that cannot appear in an identifier with ``_``.

    A leading digit is kept but prefixed with ``_``.
    """
    out = []
    for i, ch in enumerate(text):
        if ch.isascii() and (ch.isalpha() or ch in "_$"):
            out.append(ch)
        elif ch.isascii() and ch.isdigit():
            if i == 0:
                out.append("_")
            out.append(ch)
        else:
            out.append("_")
    return "".join(out)


def is_ident(text: str) -> bool:
    return _IDENT_PATTERN.fullmatch(text) is not None


def is_status_code(code: str) -> bool:
    """Whether a response key is a plain run of ASCII digits (no sign, spaces or underscores)."""
    return code.isascii() and code.isdigit()


def quote(text: str) -> str:
    """Double-quoted string literal."""
    return json.dumps(text, ensure_ascii=False)


def safe_prop(key: str) -> str:
    """Property key as written in an object type: bare if it is an identifier, quoted otherwise."""
    if is_ident(key):
        return key
    return quote(key)


def format_number(value: int | float) -> str:
    """Format a number the way it is written in source: no exponent, integral floats without fraction."""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        text = repr(value)
        if "e" in text or "E" in text:
            text = format(Decimal(text), "f")
        return text
    return str(value)


def literal_to_ts(value: Any) -> str | None:
    """Render a JSON scalar as a TypeScript literal type, or None if it is not a scalar."""
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if value is None:
        return TS_NULL
    return None


def join_hint(base: str, part: str) -> str:
    if not part:
        return base
    if not base:
        return part
    return f"{base}_{part}"


def render_field(indent: str, key: str, value: str, optional: bool = False) -> str:
    """Render ``key: value;`` at the given indentation.

    Continuation lines of a multi-line value are re-indented under the key.
    """
    marker = "?" if optional else ""
    first, *rest = value.split("\n")
    lines = [f"{indent}{key}{marker}: {first}"]
    lines.extend(indent + line for line in rest)
    return "\n".join(lines) + ";\n"


def object_type(fields: list[FieldSpec], sort: bool = True) -> str:
    """Render an object type from its fields, sorted by name unless told otherwise."""
    if not fields:
        return "{}"
    if sort:
        fields = sorted(fields, key=lambda f: f.name)
    body = "".join(render_field("  ", safe_prop(f.name), f.ts, f.optional) for f in fields)
    return "{\n" + body + "}"


def paren_join(parts: list[str], joiner: str) -> str:
    """Join parts and always parenthesize the result."""
    return "(" + joiner.join(parts) + ")"


def literal_union(values: list[str], empty: str) -> str:
    """Union of already rendered literals; a single literal stays bare."""
    if not values:
        return empty
    if len(values) == 1:
        return values[0]
    return paren_join(values, " | ")
