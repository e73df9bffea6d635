"""
Response Value Kinds

Decoded response bodies are plain JSON-shaped Python values. ValueKind tags
them so the classifier and tagger branch on one exhaustive set of kinds.
"""

from enum import Enum
from typing import Any


class ValueKind(str, Enum):
    """Structural kind of a decoded JSON value"""
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def kind_of(value: Any) -> ValueKind:
    """
    Return the structural kind of a decoded value.

    bool is checked before number since bool subclasses int.
    Anything that is not JSON-shaped is treated as null.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    return ValueKind.NULL


def number_text(value: float) -> str:
    """
    Render a number the way it prints in JSON.

    Integral floats drop the trailing ".0" so 100 and 100.0 compare equal
    across agents.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
