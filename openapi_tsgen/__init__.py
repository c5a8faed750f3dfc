"""OpenAPI to TypeScript Generator

A Python package for generating TypeScript declarations from OpenAPI
documents: component types, enums, routes and webhooks, with
idempotent atomic output writing.
"""

__version__ = "0.4.0"

from .loader import InputFormat, load_document
from .pipeline import (
    AtomicWriter,
    GeneratorConfig,
    OpenApiTsGenError,
    OutputConfig,
    OutputMode,
    PipelineGenerator,
    SchemaMode,
    generate_types,
)

__all__ = [
    "PipelineGenerator",
    "generate_types",
    "load_document",
    "InputFormat",
    "GeneratorConfig",
    "OutputConfig",
    "OutputMode",
    "SchemaMode",
    "AtomicWriter",
    "OpenApiTsGenError",
]
