"""
Tests for Stats & Rescheduler
"""

from datetime import timedelta

import pytest

from ..errors import AgentNotFoundError
from ..tools.stats import StatsRescheduler, compute_next_run
from ..tools.store import InMemoryStore


class TestStatsRescheduler:
    """Tests for StatsRescheduler"""

    def test_compute_next_run(self, fixed_now):
        assert compute_next_run(fixed_now, 15) == fixed_now + timedelta(minutes=15)

    @pytest.mark.asyncio
    async def test_success_updates_counters_and_times(self, make_agent, clock, fixed_now):
        agent = make_agent(interval_minutes=30)
        store = InMemoryStore([agent])

        updated = await StatsRescheduler(store, clock=clock).record(agent, success=True)

        assert updated.execution_count == 1
        assert updated.success_count == 1
        assert updated.failure_count == 0
        assert updated.last_run == fixed_now
        assert updated.next_run == fixed_now + timedelta(minutes=30)
        assert await store.get_agent(agent.id) == updated

    @pytest.mark.asyncio
    async def test_failure_increments_failure_count(self, make_agent, clock):
        agent = make_agent()
        store = InMemoryStore([agent])
        rescheduler = StatsRescheduler(store, clock=clock)

        await rescheduler.record(agent, success=True)
        updated = await rescheduler.record(agent, success=False)

        assert updated.execution_count == 2
        assert updated.success_count == 1
        assert updated.failure_count == 1

    @pytest.mark.asyncio
    async def test_rescheduled_agent_not_due_until_interval(self, make_agent, clock, fixed_now):
        agent = make_agent(interval_minutes=10)
        store = InMemoryStore([agent])

        await StatsRescheduler(store, clock=clock).record(agent, success=True)

        assert await store.list_due_agents(fixed_now) == []
        due = await store.list_due_agents(fixed_now + timedelta(minutes=10))
        assert [a.id for a in due] == [agent.id]

    @pytest.mark.asyncio
    async def test_unknown_agent(self, make_agent, clock):
        with pytest.raises(AgentNotFoundError):
            await StatsRescheduler(InMemoryStore(), clock=clock).record(make_agent(), success=True)
