"""
Stats & Rescheduler

Records the outcome of an execution on its agent and computes when the
agent is next eligible to run.
"""

from datetime import datetime, timedelta

import structlog

from ..clock import Clock, utc_now
from ..schemas.models import Agent
from .store import AgentStore

logger = structlog.get_logger(__name__)


def compute_next_run(now: datetime, interval_minutes: int) -> datetime:
    """next_run = now + interval"""
    return now + timedelta(minutes=interval_minutes)


class StatsRescheduler:
    """
    Applies execution counters and run times to an agent.

    The four fields (execution count, success/failure count, last_run,
    next_run) go to the store in a single update_stats call.
    """

    def __init__(self, agents: AgentStore, clock: Clock = utc_now):
        self.agents = agents
        self.clock = clock

    async def record(self, agent: Agent, success: bool) -> Agent:
        """
        Record one execution outcome.

        Args:
            agent: Agent that was executed
            success: Whether the execution succeeded

        Returns:
            Agent as stored after the update
        """
        now = self.clock()
        next_run = compute_next_run(now, agent.interval_minutes)

        updated = await self.agents.update_stats(
            agent.id,
            success=success,
            last_run=now,
            next_run=next_run,
        )

        logger.info(
            "Agent rescheduled",
            agent_id=agent.id,
            success=success,
            execution_count=updated.execution_count,
            next_run=next_run.isoformat(),
        )

        return updated
