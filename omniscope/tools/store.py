"""
Engine Stores

AgentStore holds agent definitions and their run statistics.
ResultStore is append-only: executions, entity sets and correlations are
written once and never updated or deleted.

InMemoryStore implements both for tests and single-process deployments.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

import structlog

from ..errors import AgentNotFoundError
from ..schemas.models import Agent, Correlation, Entity, EntitySet, ExecutionRecord

logger = structlog.get_logger(__name__)


class AgentStore(ABC):
    """Persistence of agent definitions"""

    @abstractmethod
    async def list_due_agents(self, now: datetime) -> list[Agent]:
        """Enabled agents whose next_run is unset or not after now, in storage order"""

    @abstractmethod
    async def get_agent(self, agent_id: str) -> Optional[Agent]:
        """Agent by id, or None"""

    @abstractmethod
    async def list_agents(self) -> list[Agent]:
        """All agents in storage order"""

    @abstractmethod
    async def save_agent(self, agent: Agent) -> Agent:
        """Create or replace an agent definition"""

    @abstractmethod
    async def update_stats(
        self,
        agent_id: str,
        success: bool,
        last_run: datetime,
        next_run: datetime,
    ) -> Agent:
        """
        Apply one execution's counters and run times as a single update.

        Raises:
            AgentNotFoundError: If the agent does not exist
        """

    async def close(self) -> None:
        """Release backend connections"""


class ResultStore(ABC):
    """Append-only persistence of execution results"""

    @abstractmethod
    async def append_execution(self, record: ExecutionRecord) -> None:
        """Write one execution record"""

    @abstractmethod
    async def append_entities(self, entity_set: EntitySet) -> None:
        """Write the entities of one execution"""

    @abstractmethod
    async def append_correlations(self, correlations: list[Correlation]) -> None:
        """Write detected correlations"""

    @abstractmethod
    async def recent_entity_sets(self, exclude_agent_id: str, limit: int) -> list[EntitySet]:
        """Latest entity set of up to limit other agents, most recent first"""

    @abstractmethod
    async def list_executions(self, agent_id: str, limit: int = 20) -> list[ExecutionRecord]:
        """Executions of one agent, newest first"""

    @abstractmethod
    async def list_correlations(self, limit: int = 50) -> list[Correlation]:
        """Correlations, newest first"""


def apply_stats(agent: Agent, success: bool, last_run: datetime, next_run: datetime) -> Agent:
    """Return a copy of agent with one execution's stats applied"""
    updates = {
        "execution_count": agent.execution_count + 1,
        "last_run": last_run,
        "next_run": next_run,
    }
    if success:
        updates["success_count"] = agent.success_count + 1
    else:
        updates["failure_count"] = agent.failure_count + 1
    return agent.model_copy(update=updates)


class InMemoryStore(AgentStore, ResultStore):
    """
    Dict-backed store.

    Each agent update replaces the whole record in one assignment, so a
    reader on the same event loop never sees a partial update.
    """

    def __init__(self, agents: Optional[list[Agent]] = None):
        self._agents: dict[str, Agent] = {}
        self._executions: list[ExecutionRecord] = []
        self._entity_sets: list[EntitySet] = []
        self._correlations: list[Correlation] = []
        for agent in agents or []:
            self._agents[agent.id] = agent

    # ============== AgentStore ==============

    async def list_due_agents(self, now: datetime) -> list[Agent]:
        return [agent for agent in self._agents.values() if agent.is_due(now)]

    async def get_agent(self, agent_id: str) -> Optional[Agent]:
        return self._agents.get(agent_id)

    async def list_agents(self) -> list[Agent]:
        return list(self._agents.values())

    async def save_agent(self, agent: Agent) -> Agent:
        self._agents[agent.id] = agent
        logger.info("Saved agent", agent_id=agent.id, name=agent.name)
        return agent

    async def update_stats(
        self,
        agent_id: str,
        success: bool,
        last_run: datetime,
        next_run: datetime,
    ) -> Agent:
        agent = self._agents.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        updated = apply_stats(agent, success, last_run, next_run)
        self._agents[agent_id] = updated
        return updated

    # ============== ResultStore ==============

    async def append_execution(self, record: ExecutionRecord) -> None:
        self._executions.append(record)

    async def append_entities(self, entity_set: EntitySet) -> None:
        self._entity_sets.append(entity_set)

    async def append_correlations(self, correlations: list[Correlation]) -> None:
        self._correlations.extend(correlations)

    async def recent_entity_sets(self, exclude_agent_id: str, limit: int) -> list[EntitySet]:
        latest: dict[str, EntitySet] = {}
        for entity_set in reversed(self._entity_sets):
            if len(latest) >= limit:
                break
            if entity_set.agent_id == exclude_agent_id or entity_set.agent_id in latest:
                continue
            latest[entity_set.agent_id] = entity_set
        return list(latest.values())

    async def list_executions(self, agent_id: str, limit: int = 20) -> list[ExecutionRecord]:
        records = [r for r in reversed(self._executions) if r.agent_id == agent_id]
        return records[:limit]

    async def list_correlations(self, limit: int = 50) -> list[Correlation]:
        return list(reversed(self._correlations))[:limit]

    async def list_entities(self, agent_id: Optional[str] = None) -> list[Entity]:
        """Every stored entity, optionally filtered by agent"""
        return [
            entity
            for entity_set in self._entity_sets
            if agent_id is None or entity_set.agent_id == agent_id
            for entity in entity_set.entities
        ]
