"""
Atomic, idempotent file writer for generated declarations.

Ensures that file writes are atomic and that regenerating an unchanged
document leaves the output file untouched.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from ..config import OutputMode
from ..errors import OutputExistsError

logger = logging.getLogger(__name__)

HEADER_START = "/*\n"
HEADER_END = "*/\n\n"


def normalize_output(content: str) -> str:
    """Strip trailing whitespace from every line and end with exactly one newline."""
    lines = [line.rstrip(" \t") for line in content.split("\n")]
    return "\n".join(lines).rstrip("\n") + "\n"


def strip_generated_header(content: str) -> str:
    """Drop the leading banner comment, which carries the timestamp and version."""
    if not content.startswith(HEADER_START):
        return content
    end = content.find(HEADER_END)
    if end == -1:
        return content
    return content[end + len(HEADER_END) :]


class AtomicWriter:
    """Handles atomic file writes.

    Uses a two-phase approach:
    1. Write to a temporary file in the same directory
    2. Atomically replace the target file

    This ensures that an interrupted write operation never leaves
    the target file in an incomplete state.
    """

    def __init__(self, atomic: bool = True):
        """Initialize the atomic writer.

        Args:
            atomic: Write through a temporary file; plain writes otherwise
        """
        self.atomic = atomic

    def write(self, path: Path, content: str, mode: OutputMode = OutputMode.IF_CHANGED) -> bool:
        """Write generated content according to the output mode.

        Args:
            path: Target file path
            content: Generated content (normalized before writing)
            mode: How to treat an existing file

        Returns:
            True if the file was written, False if it was left untouched

        Raises:
            OutputExistsError: If the file exists and mode is ERROR_IF_EXISTS
            OSError: If file operations fail
        """
        path = Path(path)
        content = normalize_output(content)

        if path.exists():
            if mode is OutputMode.ERROR_IF_EXISTS:
                raise OutputExistsError(f"output file already exists: {path}")
            if mode is OutputMode.IF_CHANGED and self.is_unchanged(path, content):
                logger.debug("Output %s is up to date, skipping write", path)
                return False

        path.parent.mkdir(parents=True, exist_ok=True)
        if self.atomic:
            self._replace(path, content)
        else:
            path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s", path)
        return True

    def is_unchanged(self, path: Path, content: str) -> bool:
        """Whether the file at ``path`` holds the same declarations as ``content``, banner aside."""
        existing = normalize_output(path.read_text(encoding="utf-8"))
        return strip_generated_header(existing) == strip_generated_header(normalize_output(content))

    def _replace(self, path: Path, content: str) -> None:
        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
            temp_path.replace(path)
        except Exception:
            # Clean up temp file on any error
            if temp_path.exists():
                temp_path.unlink()
            raise
