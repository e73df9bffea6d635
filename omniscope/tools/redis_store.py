"""
Redis Store

Redis-backed AgentStore and ResultStore.

Key layout (under key_prefix):
- agent:{id}                  Agent JSON
- agents:index                zset of agent ids by registration time
- agents:schedule             zset of enabled agent ids by next_run (0 = never run)
- executions:{agent_id}       list of ExecutionRecord JSON, newest first
- entities:{execution_id}     EntitySet JSON
- entities:latest             zset of agent ids by last tagging time
- entities:latest:{agent_id}  execution id of the agent's latest entity set
- correlations                list of Correlation JSON, newest first
"""

import os
from datetime import datetime
from typing import Optional

import structlog
import redis.asyncio as redis
from pydantic import ValidationError

from ..clock import Clock, utc_now
from ..errors import AgentNotFoundError, StoreError
from ..schemas.models import Agent, Correlation, EntitySet, ExecutionRecord
from .store import AgentStore, ResultStore, apply_stats

logger = structlog.get_logger(__name__)


class RedisStore(AgentStore, ResultStore):
    """
    Store backed by redis.asyncio.

    Agent records and their schedule entry change together in one MULTI
    pipeline, so the scheduler never reads counters without next_run.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key_prefix: str = "omniscope:",
        client: Optional[redis.Redis] = None,
        clock: Clock = utc_now,
    ):
        """
        Initialize store.

        Args:
            redis_url: Redis connection URL
            key_prefix: Prefix for Redis keys
            client: Existing client to use instead of connecting
            clock: Source of registration times for the agent index
        """
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://redis:6379")
        self.key_prefix = key_prefix
        self._client: Optional[redis.Redis] = client
        self.clock = clock

    async def _get_client(self) -> redis.Redis:
        """Get or create Redis client"""
        if self._client is None:
            self._client = redis.from_url(self.redis_url, decode_responses=True)
        return self._client

    def _key(self, *parts: str) -> str:
        return self.key_prefix + ":".join(parts)

    def _parse_agent(self, raw: str, key: str) -> Agent:
        try:
            return Agent.model_validate_json(raw)
        except ValidationError as e:
            raise StoreError(f"Corrupt agent record: {e}", key=key) from e

    @staticmethod
    def _schedule_score(agent: Agent) -> float:
        return agent.next_run.timestamp() if agent.next_run else 0.0

    # ============== AgentStore ==============

    async def list_due_agents(self, now: datetime) -> list[Agent]:
        client = await self._get_client()
        agent_ids = await client.zrangebyscore(
            self._key("agents", "schedule"),
            "-inf",
            now.timestamp(),
        )
        if not agent_ids:
            return []

        keys = [self._key("agent", agent_id) for agent_id in agent_ids]
        raw_agents = await client.mget(keys)

        due = []
        for key, raw in zip(keys, raw_agents):
            if raw is None:
                logger.warning("Scheduled agent missing", key=key)
                continue
            agent = self._parse_agent(raw, key)
            if agent.is_due(now):
                due.append(agent)
        return due

    async def get_agent(self, agent_id: str) -> Optional[Agent]:
        client = await self._get_client()
        key = self._key("agent", agent_id)
        raw = await client.get(key)
        if raw is None:
            return None
        return self._parse_agent(raw, key)

    async def list_agents(self) -> list[Agent]:
        client = await self._get_client()
        agent_ids = await client.zrange(self._key("agents", "index"), 0, -1)
        if not agent_ids:
            return []
        keys = [self._key("agent", agent_id) for agent_id in agent_ids]
        raw_agents = await client.mget(keys)
        return [self._parse_agent(raw, key) for key, raw in zip(keys, raw_agents) if raw is not None]

    async def save_agent(self, agent: Agent) -> Agent:
        client = await self._get_client()
        async with client.pipeline(transaction=True) as pipe:
            self._queue_agent_write(pipe, agent)
            pipe.zadd(
                self._key("agents", "index"),
                {agent.id: self.clock().timestamp()},
                nx=True,
            )
            await pipe.execute()

        logger.info("Saved agent", agent_id=agent.id, name=agent.name)
        return agent

    def _queue_agent_write(self, pipe, agent: Agent) -> None:
        """Queue the agent record and its schedule entry on a pipeline"""
        pipe.set(self._key("agent", agent.id), agent.model_dump_json())
        if agent.enabled:
            pipe.zadd(self._key("agents", "schedule"), {agent.id: self._schedule_score(agent)})
        else:
            pipe.zrem(self._key("agents", "schedule"), agent.id)

    async def update_stats(
        self,
        agent_id: str,
        success: bool,
        last_run: datetime,
        next_run: datetime,
    ) -> Agent:
        agent = await self.get_agent(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)

        updated = apply_stats(agent, success, last_run, next_run)

        client = await self._get_client()
        async with client.pipeline(transaction=True) as pipe:
            self._queue_agent_write(pipe, updated)
            await pipe.execute()

        return updated

    # ============== ResultStore ==============

    async def append_execution(self, record: ExecutionRecord) -> None:
        client = await self._get_client()
        await client.lpush(self._key("executions", record.agent_id), record.model_dump_json())

    async def append_entities(self, entity_set: EntitySet) -> None:
        client = await self._get_client()
        async with client.pipeline(transaction=True) as pipe:
            pipe.set(self._key("entities", entity_set.execution_id), entity_set.model_dump_json())
            pipe.set(self._key("entities", "latest", entity_set.agent_id), entity_set.execution_id)
            pipe.zadd(
                self._key("entities", "latest"),
                {entity_set.agent_id: entity_set.tagged_at.timestamp()},
            )
            await pipe.execute()

    async def append_correlations(self, correlations: list[Correlation]) -> None:
        if not correlations:
            return
        client = await self._get_client()
        await client.lpush(
            self._key("correlations"),
            *[correlation.model_dump_json() for correlation in correlations],
        )

    async def recent_entity_sets(self, exclude_agent_id: str, limit: int) -> list[EntitySet]:
        client = await self._get_client()
        # One extra in case the excluded agent is among the most recent
        agent_ids = await client.zrevrange(self._key("entities", "latest"), 0, limit)
        agent_ids = [a for a in agent_ids if a != exclude_agent_id][:limit]

        entity_sets = []
        for agent_id in agent_ids:
            execution_id = await client.get(self._key("entities", "latest", agent_id))
            if execution_id is None:
                continue
            raw = await client.get(self._key("entities", execution_id))
            if raw is None:
                continue
            entity_sets.append(EntitySet.model_validate_json(raw))
        return entity_sets

    async def list_executions(self, agent_id: str, limit: int = 20) -> list[ExecutionRecord]:
        client = await self._get_client()
        raw_records = await client.lrange(self._key("executions", agent_id), 0, limit - 1)
        return [ExecutionRecord.model_validate_json(raw) for raw in raw_records]

    async def list_correlations(self, limit: int = 50) -> list[Correlation]:
        client = await self._get_client()
        raw_items = await client.lrange(self._key("correlations"), 0, limit - 1)
        return [Correlation.model_validate_json(raw) for raw in raw_items]

    async def close(self) -> None:
        """Close Redis connection"""
        if self._client:
            await self._client.aclose()
            self._client = None
