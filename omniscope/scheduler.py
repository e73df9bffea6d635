"""
Agent Scheduler

A recurring tick that runs every due agent one after another.

The tick timer is independent of the work it starts: if a batch is still
draining when the next tick fires, that tick is skipped so scheduled
executions never overlap.
"""

import asyncio
from typing import Optional

import structlog

from .clock import Clock, utc_now
from .runner import ExecutionRunner
from .tools.store import AgentStore

logger = structlog.get_logger(__name__)

DEFAULT_TICK_SECONDS = 60.0


class AgentScheduler:
    """
    Scheduler loop with an injected store, runner and clock.

    Constructed once at process start; start() launches the tick timer and
    stop() shuts it down.
    """

    def __init__(
        self,
        agents: AgentStore,
        runner: ExecutionRunner,
        clock: Clock = utc_now,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
    ):
        """
        Initialize scheduler.

        Args:
            agents: Store queried for due agents
            runner: Execution runner handed each due agent
            clock: Source of the current time
            tick_seconds: Period of the tick timer
        """
        self.agents = agents
        self.runner = runner
        self.clock = clock
        self.tick_seconds = tick_seconds

        self._stopping = asyncio.Event()
        self._loop_task: Optional[asyncio.Task] = None
        self._batch_task: Optional[asyncio.Task] = None
        self.ticks_fired = 0
        self.ticks_skipped = 0

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def busy(self) -> bool:
        """True while a tick's batch is still draining"""
        return self._batch_task is not None and not self._batch_task.done()

    async def run_due_agents(self) -> int:
        """
        Run one tick's batch: every due agent, sequentially.

        A failing agent is logged and the batch moves on to the next one.

        Returns:
            Number of agents executed
        """
        now = self.clock()
        try:
            due = await self.agents.list_due_agents(now)
        except Exception:
            logger.exception("Failed to fetch scheduled agents")
            return 0

        if not due:
            return 0

        logger.info("Found agents to execute", count=len(due))

        executed = 0
        for agent in due:
            if self._stopping.is_set():
                logger.info("Scheduler stopping, leaving remaining agents", remaining=len(due) - executed)
                break
            try:
                await self.runner.execute(agent)
            except Exception:
                logger.exception("Agent execution aborted", agent_id=agent.id)
            executed += 1

        return executed

    def _tick(self) -> None:
        if self.busy:
            self.ticks_skipped += 1
            logger.warning("Previous batch still draining, skipping tick")
            return
        self.ticks_fired += 1
        self._batch_task = asyncio.create_task(self.run_due_agents())

    async def _run(self) -> None:
        logger.info("Agent scheduler started", tick_seconds=self.tick_seconds)
        while not self._stopping.is_set():
            self._tick()
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.tick_seconds)
            except asyncio.TimeoutError:
                pass
        logger.info("Agent scheduler stopped")

    def start(self) -> None:
        """Start the tick timer; the first tick fires immediately"""
        if self.running:
            return
        self._stopping.clear()
        self._loop_task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """
        Stop the tick timer.

        The agent currently executing finishes; no further agents start.
        """
        self._stopping.set()
        if self._loop_task is not None:
            await self._loop_task
            self._loop_task = None
        if self._batch_task is not None:
            await self._batch_task
            self._batch_task = None
