"""
Node definitions for a decoded API description document.

These nodes represent the structure of the document before any reference
resolution or schema compilation. Schemas stay raw mappings because the
compiler reads arbitrary JSON-Schema keywords from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

Schema = dict[str, Any]

# Scheme name -> required scopes
SecurityRequirement = dict[str, list[str]]


@dataclass(frozen=True)
class Reference:
    """A ``$ref`` pointer standing in for an entity."""

    path: str


@dataclass(frozen=True)
class Inline(Generic[T]):
    """An entity given in place."""

    value: T


RefOr = Union[Reference, Inline[T]]


@dataclass
class ServerVariable:
    default: str = ""
    description: str = ""
    enum: list[str] = field(default_factory=list)


@dataclass
class Server:
    url: str = ""
    description: str = ""
    variables: dict[str, ServerVariable] = field(default_factory=dict)


@dataclass
class Info:
    title: str = ""
    version: str = ""


@dataclass
class MediaType:
    schema: Schema | None = None


@dataclass
class Parameter:
    """A parameter; ``location`` is the ``in`` field (path, query, header, cookie)."""

    name: str = ""
    location: str = ""
    required: bool = False
    schema: Schema | None = None
    content: dict[str, MediaType] = field(default_factory=dict)


@dataclass
class Header:
    required: bool = False
    schema: Schema | None = None
    content: dict[str, MediaType] = field(default_factory=dict)


@dataclass
class RequestBody:
    required: bool = False
    content: dict[str, MediaType] = field(default_factory=dict)


@dataclass
class Response:
    description: str = ""
    headers: dict[str, RefOr[Header]] = field(default_factory=dict)
    content: dict[str, MediaType] = field(default_factory=dict)


@dataclass
class OAuthFlow:
    authorization_url: str = ""
    token_url: str = ""
    refresh_url: str = ""
    scopes: dict[str, str] = field(default_factory=dict)


@dataclass
class OAuthFlows:
    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = None
    authorization_code: OAuthFlow | None = None


@dataclass
class SecurityScheme:
    type: str = ""
    description: str = ""
    name: str = ""
    location: str = ""
    scheme: str = ""
    bearer_format: str = ""
    open_id_connect_url: str = ""
    flows: OAuthFlows | None = None


@dataclass
class Operation:
    parameters: list[RefOr[Parameter]] = field(default_factory=list)
    request_body: RefOr[RequestBody] | None = None
    responses: dict[str, RefOr[Response]] = field(default_factory=dict)
    security: list[SecurityRequirement] = field(default_factory=list)
    servers: list[Server] = field(default_factory=list)


@dataclass
class PathItem:
    """Operations available on a single path, keyed by lowercase HTTP method."""

    operations: dict[str, Operation] = field(default_factory=dict)
    parameters: list[RefOr[Parameter]] = field(default_factory=list)
    servers: list[Server] = field(default_factory=list)


@dataclass
class Components:
    """Reusable named entities, one mapping per component section."""

    schemas: dict[str, Schema] = field(default_factory=dict)
    responses: dict[str, RefOr[Response]] = field(default_factory=dict)
    request_bodies: dict[str, RefOr[RequestBody]] = field(default_factory=dict)
    parameters: dict[str, RefOr[Parameter]] = field(default_factory=dict)
    headers: dict[str, RefOr[Header]] = field(default_factory=dict)
    security_schemes: dict[str, RefOr[SecurityScheme]] = field(default_factory=dict)
    path_items: dict[str, RefOr[PathItem]] = field(default_factory=dict)

    def section(self, name: str) -> dict[str, Any]:
        """Look up a section by its document key (``requestBodies``, ``pathItems``...)."""
        return {
            "schemas": self.schemas,
            "responses": self.responses,
            "requestBodies": self.request_bodies,
            "parameters": self.parameters,
            "headers": self.headers,
            "securitySchemes": self.security_schemes,
            "pathItems": self.path_items,
        }[name]


@dataclass
class Document:
    """Root of a decoded API description."""

    openapi: str = ""
    info: Info = field(default_factory=Info)
    paths: dict[str, RefOr[PathItem]] = field(default_factory=dict)
    webhooks: dict[str, RefOr[PathItem]] = field(default_factory=dict)
    components: Components | None = None
    servers: list[Server] = field(default_factory=list)
    security: list[SecurityRequirement] = field(default_factory=list)
