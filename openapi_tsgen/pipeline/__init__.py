"""
Pipeline - API description to TypeScript declarations generator.

This module provides a multi-phase architecture for generating
TypeScript types from an API description document:

1. Phase 1 (Parser): Parse the decoded tree into a typed Document
2. Phase 2 (Analyzer): Resolve references, extract enums and build IR
3. Phase 3 (Backend): Render TypeScript declarations from IR
4. Phase 4 (Merger): Write the output atomically, skipping unchanged files
"""

from __future__ import annotations

from .config import GeneratorConfig, OutputConfig, OutputMode, SchemaMode
from .errors import (
    DocumentError,
    DocumentLoadError,
    MissingComponentError,
    NestedReferenceError,
    NilDocumentError,
    OpenApiTsGenError,
    OutputExistsError,
    UnsupportedReferenceError,
)
from .generator import PipelineGenerator, generate_types
from .merger import AtomicWriter

__all__ = [
    "PipelineGenerator",
    "generate_types",
    "GeneratorConfig",
    "OutputConfig",
    "OutputMode",
    "SchemaMode",
    "AtomicWriter",
    "OpenApiTsGenError",
    "NilDocumentError",
    "DocumentError",
    "DocumentLoadError",
    "UnsupportedReferenceError",
    "MissingComponentError",
    "NestedReferenceError",
    "OutputExistsError",
]
