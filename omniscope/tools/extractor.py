"""
Response Extractor

Selects a sub-value from a decoded response body using a dotted path.
"$" or an empty path selects the whole body. Segments are object keys only.
"""

from typing import Any, Optional

import structlog

from ..schemas.values import ValueKind, kind_of

logger = structlog.get_logger(__name__)

ROOT_MARKER = "$"


def parse_path(path: Optional[str]) -> list[str]:
    """
    Split a path expression into key segments.

    "$", "" and None give no segments. A leading "$." is dropped and empty
    segments are ignored, so "$.data..items" addresses data -> items.
    """
    if not path:
        return []
    path = path.strip()
    if path == ROOT_MARKER:
        return []
    if path.startswith(ROOT_MARKER + "."):
        path = path[len(ROOT_MARKER) + 1:]
    return [segment for segment in path.split(".") if segment]


def extract_path(value: Any, path: Optional[str]) -> Any:
    """
    Return the sub-value addressed by path.

    If a segment is missing or the current value is not an object, the
    original value is returned unchanged. Never raises.

    Args:
        value: Decoded response body
        path: Dotted path expression

    Returns:
        Addressed sub-value, or value itself
    """
    segments = parse_path(path)
    current = value

    for segment in segments:
        if kind_of(current) is not ValueKind.OBJECT or segment not in current:
            logger.debug(
                "Extraction path not found, using full payload",
                path=path,
                missing_segment=segment,
            )
            return value
        current = current[segment]

    return current
