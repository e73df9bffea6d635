"""
Field Classifier

Splits an extracted response value into numeric and text fields keyed by
dotted path.

The two walks differ on arrays: the numeric walk descends into nested
arrays (index segments such as "items.0.price"), the text walk skips them.
Both enumerate the root container whatever its kind.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator

from ..schemas.values import ValueKind, kind_of


@dataclass
class FieldClassification:
    """Flat numeric and text mappings of one value"""
    numeric: dict[str, float] = field(default_factory=dict)
    text: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.numeric and not self.text


def _entries(value: Any) -> Iterator[tuple[str, Any]]:
    """Key/value pairs of a container; arrays yield their indices as keys"""
    kind = kind_of(value)
    if kind is ValueKind.OBJECT:
        for key, item in value.items():
            yield str(key), item
    elif kind is ValueKind.ARRAY:
        for index, item in enumerate(value):
            yield str(index), item


def _join(prefix: str, key: str) -> str:
    return f"{prefix}.{key}" if prefix else key


def _walk(value: Any, descend: tuple[ValueKind, ...]) -> Iterator[tuple[str, Any, ValueKind]]:
    """
    Yield (path, leaf, kind) for every leaf in depth-first order.

    Iterative, so payload depth is not limited by the recursion limit.
    Only containers whose kind is in descend are entered; the root is
    always enumerated.
    """
    stack = [("", _entries(value))]
    while stack:
        prefix, entries = stack[-1]
        try:
            key, item = next(entries)
        except StopIteration:
            stack.pop()
            continue
        name = _join(prefix, key)
        kind = kind_of(item)
        if kind in descend:
            stack.append((name, _entries(item)))
        else:
            yield name, item, kind


def extract_numeric_fields(value: Any) -> dict[str, float]:
    """Collect every number leaf, descending into objects and arrays"""
    return {
        name: item
        for name, item, kind in _walk(value, (ValueKind.OBJECT, ValueKind.ARRAY))
        if kind is ValueKind.NUMBER
    }


def extract_text_fields(value: Any) -> dict[str, str]:
    """Collect every non-empty string leaf, descending into objects only"""
    return {
        name: item
        for name, item, kind in _walk(value, (ValueKind.OBJECT,))
        if kind is ValueKind.STRING and item
    }


def classify_fields(value: Any) -> FieldClassification:
    """
    Classify the leaves of value into numeric and text fields.

    Scalars have no fields and yield an empty classification.
    """
    return FieldClassification(
        numeric=extract_numeric_fields(value),
        text=extract_text_fields(value),
    )


def describe_structure(value: Any) -> dict[str, Any]:
    """Top-level shape of a value: kind, keys and array length"""
    kind = kind_of(value)
    return {
        "type": kind.value,
        "keys": [str(k) for k in value.keys()] if kind is ValueKind.OBJECT else [],
        "array_length": len(value) if kind is ValueKind.ARRAY else None,
    }
