"""
Semantic Tagger

Tags the leaves of a response payload with typed, confidence-scored
entities using fixed pattern matchers and field-name heuristics.

Each top-level object (or each element of a top-level array) is walked
once. Every matcher runs independently, so one leaf may yield several
entities. No deduplication is performed.
"""

import re
from typing import Any, Optional
from urllib.parse import urlsplit

import dateparser
import structlog

from ..schemas.models import Entity
from ..schemas.values import ValueKind, kind_of, number_text

logger = structlog.get_logger(__name__)

# Confidence per entity type
CONFIDENCE = {
    "email": 0.95,
    "url": 0.90,
    "date": 0.80,
    "person_name": 0.70,
    "location": 0.60,
    "price": 0.80,
    "identifier": 0.90,
}

# Field-name heuristics, matched as case-insensitive substrings of the key
NAME_FIELDS = ("name", "firstname", "lastname", "fullname", "author", "user")
LOCATION_FIELDS = ("city", "country", "location", "address", "region", "state")
PRICE_FIELDS = ("price", "cost", "amount", "value", "fee", "salary")
ID_FIELDS = ("id", "uid", "key", "index")

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PERSON_NAME_PATTERN = re.compile(r"[A-Za-z\s'-]+")
URL_SCHEME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")

# Schemes that are only valid with a host component
HOST_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})

MIN_DATE_LENGTH = 8
DATEPARSER_SETTINGS = {
    "STRICT_PARSING": False,
    "RETURN_AS_TIMEZONE_AWARE": False,
}


def _key_matches(key: str, fields: tuple[str, ...]) -> bool:
    key_lower = key.lower()
    return any(f in key_lower for f in fields)


# ============== Matchers ==============


def is_email(value: str) -> bool:
    return EMAIL_PATTERN.fullmatch(value) is not None


def is_url(value: str) -> bool:
    """True when value is an absolute URL with a scheme"""
    if not value or value != value.strip() or any(c.isspace() for c in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme or not URL_SCHEME_PATTERN.fullmatch(parts.scheme):
        return False
    if parts.scheme.lower() in HOST_SCHEMES:
        return bool(parts.hostname)
    return True


def is_date(value: str) -> bool:
    """
    True when value parses to a calendar date and is longer than 8 chars.

    Values without any digit are rejected up front so relative phrases
    such as "yesterday" do not count as dates.
    """
    if len(value) <= MIN_DATE_LENGTH or not any(c.isdigit() for c in value):
        return False
    try:
        parsed = dateparser.parse(value, languages=["en"], settings=DATEPARSER_SETTINGS)
    except (ValueError, OverflowError, TypeError):
        return False
    return parsed is not None


def is_person_name(key: str, value: str) -> bool:
    return (
        _key_matches(key, NAME_FIELDS)
        and 1 < len(value) < 50
        and PERSON_NAME_PATTERN.fullmatch(value) is not None
    )


def is_location(key: str, value: str) -> bool:
    return _key_matches(key, LOCATION_FIELDS)


def is_price(key: str, value: float) -> bool:
    return _key_matches(key, PRICE_FIELDS) and value > 0


def is_identifier(key: str) -> bool:
    return _key_matches(key, ID_FIELDS)


# ============== Tagging ==============


def _entity(
    entity_type: str,
    value: str,
    field_source: str,
    agent_id: Optional[str],
    execution_id: Optional[str],
) -> Entity:
    return Entity(
        type=entity_type,
        value=value,
        confidence=CONFIDENCE[entity_type],
        field_source=field_source,
        agent_id=agent_id,
        execution_id=execution_id,
    )


def _tag_string(key: str, value: str) -> list[str]:
    matched = []
    if is_email(value):
        matched.append("email")
    if is_url(value):
        matched.append("url")
    if is_date(value):
        matched.append("date")
    if is_person_name(key, value):
        matched.append("person_name")
    if is_location(key, value):
        matched.append("location")
    return matched


def _tag_number(key: str, value: float) -> list[str]:
    matched = []
    if is_price(key, value):
        matched.append("price")
    if is_identifier(key):
        matched.append("identifier")
    return matched


def extract_from_object(
    obj: dict[str, Any],
    prefix: str,
    agent_id: Optional[str] = None,
    execution_id: Optional[str] = None,
) -> list[Entity]:
    """Tag the top-level key/value pairs of one object"""
    entities: list[Entity] = []

    for key, value in obj.items():
        key = str(key)
        field_source = f"{prefix}.{key}"
        kind = kind_of(value)

        if kind is ValueKind.STRING:
            for entity_type in _tag_string(key, value):
                entities.append(_entity(entity_type, value, field_source, agent_id, execution_id))
        elif kind is ValueKind.NUMBER:
            text = number_text(value)
            for entity_type in _tag_number(key, value):
                entities.append(_entity(entity_type, text, field_source, agent_id, execution_id))

    return entities


def extract_entities(
    data: Any,
    agent_id: Optional[str] = None,
    execution_id: Optional[str] = None,
) -> list[Entity]:
    """
    Tag a payload with semantic entities.

    Args:
        data: Extracted response value
        agent_id: Agent the payload came from
        execution_id: Execution the payload came from

    Returns:
        Unordered list of entities
    """
    entities: list[Entity] = []
    kind = kind_of(data)

    if kind is ValueKind.ARRAY:
        for index, item in enumerate(data):
            if kind_of(item) is ValueKind.OBJECT:
                entities.extend(extract_from_object(item, f"item_{index}", agent_id, execution_id))
    elif kind is ValueKind.OBJECT:
        entities.extend(extract_from_object(data, "root", agent_id, execution_id))

    logger.debug("Entities extracted", agent_id=agent_id, entity_count=len(entities))
    return entities
