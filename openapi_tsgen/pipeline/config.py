"""
Configuration for the type generator pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_MAX_DEPTH = 30


class SchemaMode(str, Enum):
    """Projection mode used while compiling a schema.

    Input mode drops readOnly properties (request bodies, parameters),
    output mode drops writeOnly properties (responses, headers), default
    mode keeps everything and leaves schema references lazy.
    """

    DEFAULT = "default"
    INPUT = "input"
    OUTPUT = "output"


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when the output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Raise error if file exists
    FORCE = "force"  # Overwrite unconditionally
    IF_CHANGED = "if-changed"  # Default: write only when the declarations changed


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        atomic_write: Whether to write through a temporary file
    """

    mode: OutputMode = OutputMode.IF_CHANGED
    atomic_write: bool = True


@dataclass
class GeneratorConfig:
    """Configuration options for type generation."""

    # Generator identity written in the banner
    generator_name: str = "openapi-tsgen"

    # Appended to the generator name as "name@version" when set
    generator_version: str = ""

    # Recursion cap for inlined schema references
    max_depth: int = DEFAULT_MAX_DEPTH

    # Add the generated-file banner at top of file
    add_generation_comment: bool = True

    output: OutputConfig = field(default_factory=OutputConfig)

    @property
    def generator(self) -> str:
        if self.generator_version:
            return f"{self.generator_name}@{self.generator_version}"
        return self.generator_name

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.IF_CHANGED)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k) and k != "generator":
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "generator_name": self.generator_name,
            "generator_version": self.generator_version,
            "max_depth": self.max_depth,
            "add_generation_comment": self.add_generation_comment,
            "output": {
                "mode": self.output.mode.value,
                "atomic_write": self.output.atomic_write,
            },
        }
