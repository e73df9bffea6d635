"""
Prepare Node

Builds the outbound request for the agent.
From the state machine: pending -> requesting
"""

from typing import Any

import structlog
from langchain_core.runnables import RunnableConfig

from ..context import get_context
from ..tools.request_builder import build_request

logger = structlog.get_logger(__name__)


async def prepare_node(state: dict[str, Any], config: RunnableConfig) -> dict[str, Any]:
    """
    Prepare Node - Build headers, query parameters and body.

    Args:
        state: Current workflow state
        config: Runnable config carrying the ExecutionContext

    Returns:
        Updated state with the request arguments
    """
    context = get_context(config)
    agent = state["agent"]

    request = build_request(agent, user_agent=context.user_agent)

    logger.debug(
        "Request prepared",
        agent_id=agent.id,
        method=request["method"],
        url=request["url"],
        header_names=sorted(request["headers"].keys()),
    )

    return {
        "phase": "pending",
        "request": request,
        "current_node": "prepare",
        "nodes_executed": state.get("nodes_executed", []) + ["prepare"],
    }
