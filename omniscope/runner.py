"""
Execution Runner

Entry point for executing one agent, used by both the scheduler loop and
manual "run now" requests. Each invocation writes exactly one execution
record and one stats update for its own agent only.
"""

from typing import Optional

import structlog

from .context import ExecutionContext
from .errors import AgentNotFoundError
from .schemas.models import Agent, ExecutionResult
from .workflow import ExecutionWorkflow

logger = structlog.get_logger(__name__)


class ExecutionRunner:
    """
    Runs the execution workflow for one agent at a time.

    Concurrent runs of different agents are safe since every write is
    scoped by agent id. Concurrent runs of the same agent are not guarded.
    """

    def __init__(
        self,
        context: ExecutionContext,
        workflow: Optional[ExecutionWorkflow] = None,
    ):
        """
        Initialize runner.

        Args:
            context: Stores, HTTP client, clock and tuning values
            workflow: Execution workflow (compiled on first use)
        """
        self.context = context
        self.workflow = workflow or ExecutionWorkflow()

    async def execute(self, agent: Agent) -> ExecutionResult:
        """
        Execute agent once and record the outcome.

        Args:
            agent: Agent to execute

        Returns:
            ExecutionResult summarizing the outcome
        """
        state = await self.workflow.execute(agent, self.context)
        record = state["record"]

        result = ExecutionResult(
            agent_id=agent.id,
            execution_id=record.id,
            success=record.status == "success",
            response_time_ms=record.response_time_ms,
            response_size_bytes=record.response_size_bytes,
            error_message=record.error_message,
            entity_count=len(state.get("entities") or []) if record.status == "success" else 0,
            correlation_count=len(state.get("correlations") or []) if record.status == "success" else 0,
        )

        if result.success:
            logger.info(
                "Agent executed successfully",
                agent_id=agent.id,
                response_time_ms=result.response_time_ms,
                entity_count=result.entity_count,
            )

        return result

    async def execute_now(self, agent_id: str) -> ExecutionResult:
        """
        Execute an agent by id outside the schedule.

        Raises:
            AgentNotFoundError: If no agent has this id
        """
        agent = await self.context.agents.get_agent(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)

        logger.info("Manual execution requested", agent_id=agent_id)
        return await self.execute(agent)
