"""
Typed model of a decoded API description document.
"""

from .nodes import Document, Inline, Reference, RefOr
from .parser import DocumentParser

__all__ = ["Document", "DocumentParser", "Inline", "Reference", "RefOr"]
