"""
Code generation backends.

Contains the TypeScript declaration renderer.
"""

from __future__ import annotations

from .typescript_backend import TypeScriptBackend

__all__ = [
    "TypeScriptBackend",
]
