"""
Reference resolver for $ref resolution.

Resolves component pointers of the form ``#/components/<section>/<name>``
to the inline entity they name. Only one level of indirection is
allowed: a component that is itself a reference is rejected.
"""

from __future__ import annotations

from typing import Any, TypeVar

from ...constants import REFERENCE_SECTIONS
from ...utils import quote
from ..document.nodes import Document, Inline, Reference, RefOr, Schema
from ..errors import MissingComponentError, NestedReferenceError, UnsupportedReferenceError

T = TypeVar("T")

COMPONENT_PREFIX = "#/components/"


def component_name(ref: str, section: str) -> str | None:
    """
    Extract the component name from a pointer into the given section.

    Args:
        ref: The pointer string
        section: Section key, e.g. "schemas" or "requestBodies"

    Returns:
        The component name, or None if the pointer does not target the section
    """
    prefix = f"{COMPONENT_PREFIX}{section}/"
    if not ref.startswith(prefix):
        return None
    name = ref[len(prefix) :]
    if not name or "/" in name:
        return None
    return name


def component_lookup(section: str, name: str) -> str:
    """Lazy lookup expression into the compiled Components type."""
    return f"Components[{quote(section)}][{quote(name)}]"


class ReferenceResolver:
    """Resolves references to component entries of one document."""

    def __init__(self, document: Document):
        self.document = document

    def resolve(self, value: RefOr[T], section: str) -> T:
        """
        Resolve a reference-or-value to its inline value.

        Args:
            value: Either a Reference or an Inline value
            section: The component section the reference must point into

        Returns:
            The inline value

        Raises:
            UnsupportedReferenceError: If the pointer shape is not supported
            MissingComponentError: If the named entry does not exist
            NestedReferenceError: If the named entry is itself a reference
        """
        if isinstance(value, Inline):
            return value.value

        if section not in REFERENCE_SECTIONS:
            raise UnsupportedReferenceError(value.path)
        name = component_name(value.path, section)
        if name is None:
            raise UnsupportedReferenceError(value.path)

        entries = self._section(section)
        if name not in entries:
            raise MissingComponentError(section, name)

        target = entries[name]
        if isinstance(target, Reference):
            raise NestedReferenceError(section, target.path)
        return target.value

    def reference_name(self, value: RefOr[Any], section: str) -> str | None:
        """Component name of a reference into the section, or None for inline values."""
        if isinstance(value, Reference):
            return component_name(value.path, section)
        return None

    def schema(self, name: str) -> Schema | None:
        """Get a component schema by name."""
        return self._section("schemas").get(name)

    def _section(self, section: str) -> dict[str, Any]:
        if self.document.components is None:
            return {}
        return self.document.components.section(section)
