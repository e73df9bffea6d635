"""
Process Node

Runs the Response Extractor, Field Classifier, Semantic Tagger and semantic
metadata over a successful response.
"""

from datetime import datetime, timezone
from typing import Any

import structlog

from ..tools.extractor import extract_path
from ..tools.field_classifier import classify_fields, describe_structure
from ..tools.semantic_metadata import build_semantic_metadata
from ..tools.semantic_tagger import extract_entities
from .error_node import failed_step

logger = structlog.get_logger(__name__)


async def process_node(state: dict[str, Any]) -> dict[str, Any]:
    """
    Process Node - Extract, classify and tag the payload.

    Args:
        state: Current workflow state

    Returns:
        Updated state with extracted data, fields, entities and processed data,
        or an error outcome if the payload could not be processed
    """
    agent = state["agent"]
    execution_id = state["execution_id"]

    try:
        extracted = extract_path(state.get("response_data"), agent.data_path)
        fields = classify_fields(extracted)
        entities = extract_entities(extracted, agent_id=agent.id, execution_id=execution_id)

        processed: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "agent_name": agent.name,
            "data_types": list(agent.data_types),
            "response_structure": describe_structure(extracted),
            "semantic": build_semantic_metadata(extracted, entities, agent.name),
        }
        if fields.numeric:
            processed["metrics"] = fields.numeric
        if fields.text:
            processed["content"] = fields.text
    except Exception as e:
        logger.exception("Payload processing failed", agent_id=agent.id, execution_id=execution_id)
        return failed_step(state, "process", e)

    logger.info(
        "Payload processed",
        agent_id=agent.id,
        numeric_fields=len(fields.numeric),
        text_fields=len(fields.text),
        entity_count=len(entities),
    )

    return {
        "extracted_data": extracted,
        "numeric_fields": fields.numeric,
        "text_fields": fields.text,
        "processed_data": processed,
        "entities": entities,
        "current_node": "process",
        "nodes_executed": state.get("nodes_executed", []) + ["process"],
    }
