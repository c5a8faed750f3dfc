"""
IR (Intermediate Representation) node definitions.

These nodes hold the compiled document, ready for emission. All
references are resolved or turned into lazy lookups and every schema is
already compiled to TypeScript type text. Mapping keys are unique;
emission order is decided by the emitter, never by insertion order.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ...constants import TS_NEVER
from ..document.nodes import SecurityRequirement, Server


@dataclass(frozen=True)
class EnumMember:
    """A single member of a generated enum."""

    name: str = ""
    value: str = ""  # Rendered literal, e.g. '"admin"' or '2'


@dataclass
class ResolvedParam:
    """A compiled operation parameter."""

    location: str = ""
    ts: str = ""
    required: bool = False


@dataclass
class IROperation:
    """Compiled fields of a single operation."""

    path_params: dict[str, ResolvedParam] = field(default_factory=dict)
    query_params: dict[str, ResolvedParam] = field(default_factory=dict)
    header_params: dict[str, ResolvedParam] = field(default_factory=dict)
    cookie_params: dict[str, ResolvedParam] = field(default_factory=dict)

    # TS_NEVER when the operation declares no request body
    request_body: str = TS_NEVER

    # Status key -> compiled response type
    responses: dict[str, str] = field(default_factory=dict)

    # Effective (inherited) security requirements and servers
    security: list[SecurityRequirement] = field(default_factory=list)
    servers: list[Server] = field(default_factory=list)

    def param_groups(self) -> list[tuple[str, dict[str, ResolvedParam]]]:
        """Parameter groups with the labels they are emitted under."""
        return [
            ("params", self.path_params),
            ("query", self.query_params),
            ("headers", self.header_params),
            ("cookies", self.cookie_params),
        ]


@dataclass
class IRPathItem:
    """Operations of one path or webhook, keyed by lowercase method."""

    operations: dict[str, IROperation] = field(default_factory=dict)


@dataclass
class IR:
    """The complete Intermediate Representation."""

    # Component name -> compiled type text, per section
    schemas: dict[str, str] = field(default_factory=dict)
    responses: dict[str, str] = field(default_factory=dict)
    request_bodies: dict[str, str] = field(default_factory=dict)
    parameters: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    security_schemes: dict[str, str] = field(default_factory=dict)

    # Enum name -> declaration text
    enums: dict[str, str] = field(default_factory=dict)

    paths: dict[str, IRPathItem] = field(default_factory=dict)
    webhooks: dict[str, IRPathItem] = field(default_factory=dict)

    servers: list[Server] = field(default_factory=list)

    # Source document version, shown in the banner
    openapi_version: str = ""

    def component_sections(self) -> list[tuple[str, dict[str, str]]]:
        """Component sections in emission order, keyed by their document names."""
        return [
            ("schemas", self.schemas),
            ("responses", self.responses),
            ("requestBodies", self.request_bodies),
            ("parameters", self.parameters),
            ("headers", self.headers),
            ("securitySchemes", self.security_schemes),
        ]

    def has_components(self) -> bool:
        return any(values for _, values in self.component_sections())
