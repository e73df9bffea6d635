"""
Semantic Metadata

Summarizes a tagged payload: per-field data types, structural patterns,
correlation hints and a short description for downstream consumers.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Any

from ..schemas.models import Entity
from ..schemas.values import ValueKind, kind_of

CORRELATION_HINTS = {
    "email": "User identity linkage via email from {agent}",
    "date": "Temporal correlation opportunity from {agent}",
    "location": "Geographic correlation from {agent}",
    "price": "Financial correlation from {agent}",
    "identifier": "Cross-reference potential via ID from {agent}",
}


def analyze_data_structure(data: Any) -> dict[str, str]:
    """Map each field of the first record (or the object) to its kind"""
    kind = kind_of(data)
    sample = None
    if kind is ValueKind.ARRAY and data:
        sample = data[0]
    elif kind is ValueKind.OBJECT:
        sample = data

    if kind_of(sample) is not ValueKind.OBJECT:
        return {}
    return {str(key): kind_of(value).value for key, value in sample.items()}


def find_patterns(data: Any) -> list[str]:
    """Describe structural patterns of an array payload"""
    if kind_of(data) is not ValueKind.ARRAY:
        return []

    patterns = [f"Array of {len(data)} items"]
    if not data or kind_of(data[0]) is not ValueKind.OBJECT:
        return patterns

    first = data[0]
    keys = [str(k) for k in first.keys()]
    patterns.append(f"Common fields: {', '.join(keys[:5])}")

    lowered = [k.lower() for k in keys]
    if any("time" in k or "date" in k for k in lowered):
        patterns.append("Time series data detected")
    if any("user" in k or "name" in k for k in lowered):
        patterns.append("User/identity data detected")

    numeric = [k for k in keys if kind_of(first[k]) is ValueKind.NUMBER]
    if numeric:
        patterns.append(f"Metrics available: {', '.join(numeric[:3])}")

    return patterns


def generate_correlation_hints(entities: list[Entity], agent_name: str) -> list[str]:
    """One hint per entity whose type supports cross-agent linkage"""
    return [
        CORRELATION_HINTS[entity.type].format(agent=agent_name)
        for entity in entities
        if entity.type in CORRELATION_HINTS
    ]


def generate_description(data: Any, entities: list[Entity], agent_name: str) -> str:
    """Plain-language summary of the payload and its entities"""
    counts = Counter(entity.type for entity in entities)
    size = len(data) if kind_of(data) is ValueKind.ARRAY else 1

    description = f"Data from {agent_name}: {size} record(s) containing "
    if counts:
        description += ", ".join(
            f"{count} {entity_type}{'s' if count > 1 else ''}"
            for entity_type, count in counts.items()
        )
    else:
        description += "structured data without specific entities detected"

    return description + ". This data can be cross-referenced with other sources for correlation analysis."


def build_semantic_metadata(data: Any, entities: list[Entity], agent_name: str) -> dict[str, Any]:
    """Full semantic summary stored alongside an execution record"""
    return {
        "data_types": analyze_data_structure(data),
        "patterns": find_patterns(data),
        "correlation_hints": generate_correlation_hints(entities, agent_name),
        "description": generate_description(data, entities, agent_name),
        "entity_count": len(entities),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
