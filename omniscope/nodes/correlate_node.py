"""
Correlate Node

Scores the fresh entities against the latest entity sets of other agents.
From the workflow: process -> correlate -> persist
"""

from typing import Any

import structlog
from langchain_core.runnables import RunnableConfig

from ..context import get_context
from ..schemas.models import EntitySet
from ..tools.correlator import EntityCorrelator
from .error_node import failed_step

logger = structlog.get_logger(__name__)


async def correlate_node(state: dict[str, Any], config: RunnableConfig) -> dict[str, Any]:
    """
    Correlate Node - Find shared entities with other agents.

    Args:
        state: Current workflow state
        config: Runnable config carrying the ExecutionContext

    Returns:
        Updated state with correlations above the significance threshold,
        or an error outcome if the entity store could not be read
    """
    context = get_context(config)
    agent = state["agent"]

    source = EntitySet(
        agent_id=agent.id,
        execution_id=state["execution_id"],
        tagged_at=context.clock(),
        entities=state.get("entities", []),
    )

    correlator = EntityCorrelator(
        context.results,
        sample_size=context.correlation_sample_size,
        threshold=context.correlation_threshold,
    )
    try:
        correlations = await correlator.correlate(source)
    except Exception as e:
        logger.exception("Correlation failed", agent_id=agent.id, execution_id=source.execution_id)
        return failed_step(state, "correlate", e)

    logger.debug(
        "Correlation complete",
        agent_id=agent.id,
        correlation_count=len(correlations),
    )

    return {
        "correlations": correlations,
        "current_node": "correlate",
        "nodes_executed": state.get("nodes_executed", []) + ["correlate"],
    }
