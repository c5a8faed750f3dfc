"""
Merger module.

Writes generated declarations to disk atomically, skipping writes that
would not change the declarations.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter, normalize_output, strip_generated_header

__all__ = [
    "AtomicWriter",
    "normalize_output",
    "strip_generated_header",
]
