"""
Error taxonomy for document compilation.

Every error is fatal to the current compilation. Errors collect location
labels while they propagate so the final message names the exact place
in the document that triggered it.
"""

from __future__ import annotations


class OpenApiTsGenError(Exception):
    """Base class for all generator errors.

    Attributes:
        message: The bare error message, without location labels
        context: Location labels, outermost first
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.context: list[str] = []

    def add_context(self, label: str) -> OpenApiTsGenError:
        """Prefix a location label (e.g. ``path "/pets"``) and return self for re-raising."""
        self.context.insert(0, label)
        return self

    def __str__(self) -> str:
        return ": ".join([*self.context, self.message])


class NilDocumentError(OpenApiTsGenError):
    """Raised when no document was supplied."""

    def __init__(self, message: str = "nil document"):
        super().__init__(message)


class DocumentError(OpenApiTsGenError):
    """Raised when the decoded tree does not have the shape of an API document."""


class DocumentLoadError(OpenApiTsGenError):
    """Raised when the document text cannot be read or decoded."""


class UnsupportedReferenceError(OpenApiTsGenError):
    """Raised when a pointer does not match ``#/components/<section>/<name>``."""

    def __init__(self, ref: str):
        super().__init__(f"unsupported $ref: {ref!r}")
        self.ref = ref


class MissingComponentError(OpenApiTsGenError):
    """Raised when a pointer names an entry absent from its component section."""

    def __init__(self, section: str, name: str):
        super().__init__(f"missing components.{section}: {name}")
        self.section = section
        self.name = name


class NestedReferenceError(OpenApiTsGenError):
    """Raised when a resolved component entry is itself a reference."""

    def __init__(self, section: str, ref: str):
        super().__init__(f"nested {section} $ref: {ref!r}")
        self.section = section
        self.ref = ref


class OutputExistsError(OpenApiTsGenError):
    """Raised when the output file exists and the output mode forbids overwriting it."""
