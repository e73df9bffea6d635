"""
Tests for engine wiring
"""

import pytest

from ..config_loader import Config
from ..main import EngineRunner, build_store
from ..tools.redis_store import RedisStore
from ..tools.store import InMemoryStore


class TestBuildStore:
    """Tests for store selection"""

    def test_memory_backend(self):
        assert isinstance(build_store(Config()), InMemoryStore)

    def test_redis_backend(self):
        config = Config(store={"backend": "redis", "redis": {"url": "redis://cache:6379", "key_prefix": "x:"}})

        store = build_store(config)

        assert isinstance(store, RedisStore)
        assert store.redis_url == "redis://cache:6379"
        assert store.key_prefix == "x:"


class TestEngineRunner:
    """Tests for EngineRunner"""

    def test_scheduler_follows_config(self):
        assert EngineRunner(config=Config()).scheduler is not None
        assert EngineRunner(config=Config(scheduler={"enabled": False})).scheduler is None

    def test_context_uses_config_values(self):
        config = Config(http={"timeout_seconds": 5, "user_agent": "probe/1"}, correlation={"threshold": 0.7})

        runner = EngineRunner(config=config)

        assert runner.context.timeout_seconds == 5
        assert runner.context.user_agent == "probe/1"
        assert runner.context.correlation_threshold == 0.7

    @pytest.mark.asyncio
    async def test_register_agents_and_shutdown(self):
        config = Config(agents=[{"name": "Weather", "url": "https://api.example.com/weather"}])
        runner = EngineRunner(config=config)

        assert await runner.register_agents() == 1
        agents = await runner.store.list_agents()
        assert [a.name for a in agents] == ["Weather"]

        await runner.shutdown()
        assert runner.http_client.is_closed

    @pytest.mark.asyncio
    async def test_register_agents_keeps_existing(self, fixed_now):
        config = Config(agents=[{"id": "weather", "name": "Weather", "url": "https://api.example.com/weather"}])
        runner = EngineRunner(config=config)
        await runner.register_agents()
        await runner.store.update_stats("weather", True, fixed_now, fixed_now)

        assert await runner.register_agents() == 0
        assert (await runner.store.get_agent("weather")).execution_count == 1
