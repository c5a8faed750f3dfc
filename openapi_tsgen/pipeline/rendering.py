"""
Jinja2 template access for the fixed-shape parts of the output.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import jinja2

TEMPLATE_DIR = Path(__file__).parent.parent / "templates" / "typescript"


@lru_cache(maxsize=1)
def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        lstrip_blocks=True,
        trim_blocks=True,
        autoescape=False,
        undefined=jinja2.StrictUndefined,
    )


def render_template(template_name: str, **context) -> str:
    """
    Render a template from the typescript template directory.

    Args:
        template_name: Template file name, e.g. "enum.ts.jinja2"
        **context: Template variables

    Returns:
        Rendered text without a trailing newline
    """
    return _environment().get_template(template_name).render(**context)
