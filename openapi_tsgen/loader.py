"""Document loading from YAML or JSON files."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .pipeline.errors import DocumentLoadError


class InputFormat(str, Enum):
    YAML = "yaml"
    JSON = "json"


def normalize_keys(value: Any) -> Any:
    """Recursively turn mapping keys into strings.

    YAML decodes keys such as ``200:`` as integers where JSON always has
    strings; normalizing makes both encodings of a document identical.
    """
    if isinstance(value, dict):
        return {str(k): normalize_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [normalize_keys(v) for v in value]
    return value


def load_document(path: Path | str, input_format: InputFormat = InputFormat.YAML) -> Any:
    """Load a decoded document tree from a file.

    Args:
        path: Path to the document.
        input_format: Encoding of the file.

    Returns:
        The decoded tree with string keys throughout.

    Raises:
        DocumentLoadError: If the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DocumentLoadError(f"read schema {str(path)!r}: {e}") from e

    try:
        content = raw.decode("utf-8")
        if input_format is InputFormat.JSON:
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise DocumentLoadError(f"unmarshal schema {str(path)!r}: {e}") from e

    return normalize_keys(data)
