"""
Analyzer module.

Contains reference resolution, enum naming, schema compilation, and IR building.
"""

from __future__ import annotations

from .analyzer import IRBuilder
from .enum_registry import EnumRegistry
from .ir_nodes import IR, EnumMember, IROperation, IRPathItem, ResolvedParam
from .reference_resolver import ReferenceResolver
from .schema_compiler import CompileContext, SchemaCompiler

__all__ = [
    "IR",
    "IROperation",
    "IRPathItem",
    "ResolvedParam",
    "EnumMember",
    "EnumRegistry",
    "ReferenceResolver",
    "CompileContext",
    "SchemaCompiler",
    "IRBuilder",
]
