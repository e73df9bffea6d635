"""
Shared fixtures for engine tests
"""

from datetime import datetime, timezone
from typing import Any, Callable

import httpx
import pytest

from ..context import ExecutionContext
from ..schemas.models import Agent, Entity, EntitySet
from ..tools.store import InMemoryStore

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def make_agent() -> Callable[..., Agent]:
    """Factory for agents with sensible defaults"""

    def _make(**overrides: Any) -> Agent:
        fields = {
            "name": "Weather",
            "url": "https://api.example.com/weather",
        }
        fields.update(overrides)
        return Agent(**fields)

    return _make


def make_entity_set(agent_id: str, *entities: tuple[str, str, float], execution_id: str = None) -> EntitySet:
    """Build an EntitySet from (type, value, confidence) triples"""
    return EntitySet(
        agent_id=agent_id,
        execution_id=execution_id or f"exec-{agent_id}",
        entities=[
            Entity(type=t, value=v, confidence=c, field_source=f"root.{t}", agent_id=agent_id)
            for t, v, c in entities
        ],
    )


def make_context(
    store: InMemoryStore,
    handler: Callable[[httpx.Request], httpx.Response],
    clock: Callable[[], datetime],
    **overrides: Any,
) -> ExecutionContext:
    """ExecutionContext whose HTTP client answers through handler"""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ExecutionContext(
        agents=store,
        results=store,
        http_client=client,
        clock=clock,
        **overrides,
    )
