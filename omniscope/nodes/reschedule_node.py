"""
Reschedule Node

Updates the agent's counters and next run time after every execution.
"""

from typing import Any

from langchain_core.runnables import RunnableConfig

from ..context import get_context
from ..tools.stats import StatsRescheduler


async def reschedule_node(state: dict[str, Any], config: RunnableConfig) -> dict[str, Any]:
    """Reschedule Node - Apply stats and compute next_run"""
    context = get_context(config)

    rescheduler = StatsRescheduler(context.agents, clock=context.clock)
    updated = await rescheduler.record(state["agent"], success=state.get("outcome") == "success")

    return {
        "updated_agent": updated,
        "current_node": "reschedule",
        "nodes_executed": state.get("nodes_executed", []) + ["reschedule"],
    }
