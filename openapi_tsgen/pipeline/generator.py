"""
Pipeline generator wiring the phases together.

1. Parse the decoded tree into a Document
2. Build the IR (references, enums, schema compilation)
3. Render TypeScript declarations
4. Optionally write them through the atomic writer
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from .analyzer import IR, IRBuilder
from .backends import TypeScriptBackend
from .config import GeneratorConfig
from .document import Document, DocumentParser
from .merger import AtomicWriter

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Generates TypeScript declarations from one decoded API document.

    Every call to ``build_ir`` starts from scratch with a fresh enum
    registry, so repeated calls yield identical results.
    """

    def __init__(self, document_tree: Any, config: GeneratorConfig | None = None):
        """
        Initialize the generator.

        Args:
            document_tree: The decoded document (nested dicts and lists)
            config: Generator configuration
        """
        self.document_tree = document_tree
        self.config = config or GeneratorConfig()

    def parse(self) -> Document:
        document = DocumentParser().parse(self.document_tree)
        logger.debug("Parsed document: openapi %s, %d paths", document.openapi or "?", len(document.paths))
        return document

    def build_ir(self) -> IR:
        """Parse the document and compile it to the IR."""
        return IRBuilder(max_depth=self.config.max_depth).build(self.parse())

    def generate(self, generated_at: datetime | None = None) -> str:
        """
        Generate the declaration file text.

        Args:
            generated_at: Banner timestamp, defaults to the current UTC time

        Returns:
            Rendered TypeScript declarations
        """
        ir = self.build_ir()
        return TypeScriptBackend(self.config).generate(ir, generated_at)

    def write(self, output: Path, generated_at: datetime | None = None) -> bool:
        """
        Generate and write the declaration file.

        Nothing is written if generation fails.

        Args:
            output: Target file path
            generated_at: Banner timestamp, defaults to the current UTC time

        Returns:
            True if the file was written, False if it was already up to date
        """
        content = self.generate(generated_at)
        writer = AtomicWriter(atomic=self.config.output.atomic_write)
        return writer.write(Path(output), content, self.config.output.mode)


def generate_types(
    document_tree: Any,
    config: GeneratorConfig | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Generate TypeScript declarations for a decoded document."""
    return PipelineGenerator(document_tree, config).generate(generated_at)
