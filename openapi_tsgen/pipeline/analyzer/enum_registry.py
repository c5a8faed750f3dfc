"""
Enum registry: the naming authority for enums extracted from literal schemas.

One registry lives exactly as long as one document compilation. It is
passed explicitly to every step that may create an enum and is never
shared between documents.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from ...constants import (
    ENUM_EMPTY_MEMBER,
    ENUM_NUMBER_PREFIX,
    ENUM_VALUE_PREFIX,
    RESERVED_TYPE_NAMES,
    TS_NULL,
)
from ...utils import camel_case_from_hint, format_number, is_ident, quote
from ..rendering import render_template
from .ir_nodes import EnumMember


class EnumKind(Enum):
    STRING = "string"
    NUMBER = "number"


def _literal_kind(value: Any) -> EnumKind | None:
    # bool is an int subclass and never an enum member
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return EnumKind.STRING
    if isinstance(value, (int, float)):
        return EnumKind.NUMBER
    return None


def member_name_from_string(value: str) -> str:
    """
    Derive a member name from a string literal.

    Examples:
        "admin" -> "ADMIN"
        "in-progress" -> "IN_PROGRESS"
        "2fa" -> "_2FA"
        "" -> "Empty"
    """
    if value == "":
        return ENUM_EMPTY_MEMBER
    out = []
    for i, ch in enumerate(value):
        if ch.isascii() and ch.isalpha():
            out.append(ch)
        elif ch.isascii() and ch.isdigit():
            if i == 0:
                out.append("_")
            out.append(ch)
        else:
            out.append("_")
    name = "".join(out).upper()
    if not is_ident(name):
        return ENUM_VALUE_PREFIX
    return name


def member_name_from_number(text: str) -> str:
    """
    Derive a member name from a rendered number literal.

    Examples:
        "2" -> "VALUE_2"
        "-1.5" -> "VALUE_NEG_1_5"
    """
    name = ENUM_NUMBER_PREFIX + text.replace("-", "NEG_").replace(".", "_")
    if not is_ident(name):
        return ENUM_VALUE_PREFIX
    return name


def enum_members(values: list[Any]) -> tuple[EnumKind, list[EnumMember]] | None:
    """
    Build enum members from literal values.

    Args:
        values: Literal values from ``const`` or ``enum``

    Returns:
        The enum kind and its members, or None if the values are empty,
        not all literals of one kind, or of mixed kinds
    """
    if not values:
        return None

    kind = None
    seen: dict[str, int] = {}
    members = []
    for value in values:
        value_kind = _literal_kind(value)
        if value_kind is None:
            return None
        if kind is None:
            kind = value_kind
        elif kind != value_kind:
            return None

        if value_kind is EnumKind.STRING:
            rendered = quote(value)
            name = member_name_from_string(value)
        else:
            rendered = format_number(value)
            name = member_name_from_number(rendered)

        count = seen.get(name, 0)
        seen[name] = count + 1
        if count:
            name = f"{name}_{count + 1}"
        members.append(EnumMember(name=name, value=rendered))

    return kind, members


def _value_suffix(values: list[Any]) -> str:
    """Disambiguating suffix derived from the literal of a single-valued enum."""
    if len(values) != 1:
        return ""
    value = values[0]
    if isinstance(value, str):
        return camel_case_from_hint(value)
    if _literal_kind(value) is EnumKind.NUMBER:
        text = format_number(value).replace("-", "Neg").replace(".", "_")
        return ENUM_VALUE_PREFIX + text
    return ""


def enum_base_name(name_hint: str, values: list[Any]) -> str:
    """
    Derive the base enum name from a naming hint.

    Examples:
        ("User_role", ["admin", "user"]) -> "UserRoleEnum"
        ("Cat_AllOf2_petType", ["cat"]) -> "CatPetTypeCatEnum"
    """
    base = camel_case_from_hint(name_hint) or "Enum"
    base += _value_suffix(values)
    if not base.endswith("Enum"):
        base += "Enum"
    return base


def render_enum(name: str, members: list[EnumMember]) -> str:
    return render_template("enum.ts.jinja2", name=name, members=members)


class EnumRegistry:
    """Registers enums for one document and guarantees unique names.

    Attributes:
        enums: Enum name -> declaration text (first registration wins)
        used: Names already taken, seeded with the reserved top-level names
    """

    def __init__(self, enums: dict[str, str] | None = None):
        """
        Initialize the registry.

        Args:
            enums: Mapping to fill with declarations, usually the IR's enum map
        """
        self.enums = enums if enums is not None else {}
        self.used: set[str] = set(RESERVED_TYPE_NAMES) | set(self.enums)
        self._members: dict[str, tuple[EnumMember, ...]] = {}

    def emit_enum(self, name_hint: str, values: list[Any], node: dict[str, Any] | None) -> str:
        """
        Register an enum for the given literals and return its usage text.

        Args:
            name_hint: Naming hint describing the schema position
            values: Literal values from ``const`` or ``enum``
            node: The schema node, consulted for ``nullable``

        Returns:
            The enum name (unioned with null if the node is nullable), or
            an empty string if the values cannot form an enum
        """
        extracted = enum_members(values)
        if extracted is None:
            return ""
        _, members = extracted

        name = self._claim(enum_base_name(name_hint, values), tuple(members))
        if node is not None and node.get("nullable") is True:
            return f"({name} | {TS_NULL})"
        return name

    def _claim(self, base: str, members: tuple[EnumMember, ...]) -> str:
        """Return the name registered for these members, registering the first free candidate."""
        name = base
        suffix = 2
        while True:
            if name in self._members:
                if self._members[name] == members:
                    return name
            elif name not in self.used:
                self.used.add(name)
                self._members[name] = members
                self.enums[name] = render_enum(name, list(members))
                return name
            name = f"{base}{suffix}"
            suffix += 1
