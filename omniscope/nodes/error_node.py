"""
Record Error Node

Writes the error ExecutionRecord. No payload, entities or correlations.
From the state machine: error -> persisted
"""

from typing import Any

import structlog
from langchain_core.runnables import RunnableConfig

from ..context import get_context
from ..schemas.models import ExecutionRecord

logger = structlog.get_logger(__name__)


def failed_step(state: dict[str, Any], node: str, error: Exception) -> dict[str, Any]:
    """
    State update for a step that raised after a successful request.

    The execution is then recorded by record_error like any other failure.
    """
    return {
        "phase": "error",
        "outcome": "error",
        "error": f"{node.capitalize()} failed: {type(error).__name__}: {error}",
        "entities": [],
        "correlations": [],
        "current_node": node,
        "nodes_executed": state.get("nodes_executed", []) + [node],
    }


async def record_error_node(state: dict[str, Any], config: RunnableConfig) -> dict[str, Any]:
    """Record Error Node - Store a failed execution"""
    context = get_context(config)
    agent = state["agent"]

    record = ExecutionRecord(
        id=state["execution_id"],
        agent_id=agent.id,
        executed_at=context.clock(),
        status="error",
        status_code=state.get("status_code"),
        response_time_ms=state.get("response_time_ms", 0),
        response_size_bytes=0,
        error_message=state.get("error") or "Unknown error",
    )
    await context.results.append_execution(record)

    logger.error(
        "Agent execution failed",
        agent_id=agent.id,
        execution_id=record.id,
        error=record.error_message,
    )

    return {
        "phase": "persisted",
        "record": record,
        "current_node": "record_error",
        "nodes_executed": state.get("nodes_executed", []) + ["record_error"],
    }
