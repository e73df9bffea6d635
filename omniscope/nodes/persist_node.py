"""
Persist Node

Writes the success ExecutionRecord with its entities and correlations.
From the state machine: success -> persisted

The record is written last, so a failed write leaves no success record
and record_error writes the execution's only record.
"""

from typing import Any

import structlog
from langchain_core.runnables import RunnableConfig

from ..context import get_context
from ..schemas.models import EntitySet, ExecutionRecord
from .error_node import failed_step

logger = structlog.get_logger(__name__)


async def persist_node(state: dict[str, Any], config: RunnableConfig) -> dict[str, Any]:
    """
    Persist Node - Store the outcome of a successful execution.

    Args:
        state: Current workflow state
        config: Runnable config carrying the ExecutionContext

    Returns:
        Updated state with the written record, or an error outcome if a
        write failed
    """
    context = get_context(config)
    agent = state["agent"]
    execution_id = state["execution_id"]
    entities = state.get("entities", [])
    correlations = state.get("correlations", [])
    now = context.clock()

    try:
        record = ExecutionRecord(
            id=execution_id,
            agent_id=agent.id,
            executed_at=now,
            status="success",
            status_code=state.get("status_code"),
            response_time_ms=state.get("response_time_ms", 0),
            response_size_bytes=state.get("response_size_bytes", 0),
            response_data=state.get("extracted_data"),
            processed_data=state.get("processed_data"),
        )

        await context.results.append_entities(
            EntitySet(
                agent_id=agent.id,
                execution_id=execution_id,
                tagged_at=now,
                entities=entities,
            )
        )
        if correlations:
            await context.results.append_correlations(correlations)
        await context.results.append_execution(record)
    except Exception as e:
        logger.exception("Persisting execution failed", agent_id=agent.id, execution_id=execution_id)
        return failed_step(state, "persist", e)

    logger.info(
        "Execution persisted",
        agent_id=agent.id,
        execution_id=execution_id,
        status="success",
        entity_count=len(entities),
        correlation_count=len(correlations),
    )

    return {
        "phase": "persisted",
        "record": record,
        "current_node": "persist",
        "nodes_executed": state.get("nodes_executed", []) + ["persist"],
    }
