"""
Constant tables shared by the analyzer and the emitter.
"""

from __future__ import annotations

from typing import Final

TS_NEVER: Final = "never"
TS_UNKNOWN: Final = "unknown"
TS_NULL: Final = "null"
TS_STRING: Final = "string"
TS_NUMBER: Final = "number"
TS_BOOLEAN: Final = "boolean"
TS_RECORD_UNKNOWN: Final = "Record<string, unknown>"
TS_RECORD_NEVER: Final = "Record<string, never>"
TS_EMPTY_OBJECT: Final = "{}"

# Names emitted at top level that enum names must never shadow
RESERVED_TYPE_NAMES: Final[frozenset[str]] = frozenset({"Components", "Routes"})

# Placeholder member name for literals that yield no identifier
ENUM_VALUE_PREFIX: Final = "Value"
ENUM_NUMBER_PREFIX: Final = "VALUE_"
ENUM_EMPTY_MEMBER: Final = "Empty"

# Emission order of component sections inside the Components type
COMPONENT_SECTIONS: Final[tuple[str, ...]] = (
    "schemas",
    "responses",
    "requestBodies",
    "parameters",
    "headers",
    "securitySchemes",
)

# Sections a $ref may point into
REFERENCE_SECTIONS: Final[frozenset[str]] = frozenset({*COMPONENT_SECTIONS, "pathItems"})

HTTP_METHODS: Final[tuple[str, ...]] = ("get", "post", "put", "patch", "delete", "options", "head", "trace")

# Hint tokens that describe structure rather than meaning
NOISE_TOKENS: Final[frozenset[str]] = frozenset(
    {"allof", "anyof", "oneof", "of", "item", "media", "additional", "properties", "response", "requestbody"}
)
