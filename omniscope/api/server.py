"""
Engine API Server

HTTP surface of the engine: health checks, manual "run now" for an agent,
and read-only views of agents, executions and correlations.
"""

from typing import Awaitable, Callable, Optional
from datetime import datetime, timezone
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from ..errors import AgentNotFoundError
from ..runner import ExecutionRunner
from ..scheduler import AgentScheduler
from ..schemas.models import Correlation, ExecutionRecord, ExecutionResult
from ..tools.store import AgentStore, ResultStore

logger = structlog.get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    version: str
    scheduler_running: bool
    timestamp: str


class EngineServer:
    """
    Engine API Server.

    Endpoints:
    - GET /health, GET /ready
    - GET /agents
    - POST /agents/{agent_id}/run
    - GET /agents/{agent_id}/executions
    - GET /correlations
    """

    def __init__(
        self,
        runner: ExecutionRunner,
        agents: AgentStore,
        results: ResultStore,
        scheduler: Optional[AgentScheduler] = None,
        service_name: str = "omniscope-engine",
        version: str = "1.0.0",
        on_startup: Optional[Callable[[], Awaitable[None]]] = None,
        on_shutdown: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        """
        Initialize server.

        Args:
            runner: Runner used for manual executions
            agents: Agent store
            results: Result store
            scheduler: Scheduler started and stopped with the app lifespan
            service_name: Name reported by /health
            version: Version string
            on_startup: Coroutine run before the scheduler starts
            on_shutdown: Coroutine releasing stores and clients after the scheduler stops
        """
        self.runner = runner
        self.agents = agents
        self.results = results
        self.scheduler = scheduler
        self.service_name = service_name
        self.version = version
        self.on_startup = on_startup
        self.on_shutdown = on_shutdown

        self._ready = False
        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with routes"""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            """Lifecycle management"""
            logger.info("Engine server starting", service=self.service_name, version=self.version)
            if self.on_startup is not None:
                await self.on_startup()
            if self.scheduler is not None:
                self.scheduler.start()
            self._ready = True
            yield
            logger.info("Engine server shutting down")
            self._ready = False
            if self.scheduler is not None:
                await self.scheduler.stop()
            if self.on_shutdown is not None:
                await self.on_shutdown()

        app = FastAPI(
            title=f"{self.service_name} API",
            version=self.version,
            lifespan=lifespan,
        )

        self._register_routes(app)
        return app

    def _register_routes(self, app: FastAPI) -> None:
        """Register all API routes"""

        # ============== Health Endpoints ==============

        @app.get("/health", response_model=HealthResponse)
        async def health_check():
            """Basic health check"""
            return HealthResponse(
                status="healthy",
                service=self.service_name,
                version=self.version,
                scheduler_running=bool(self.scheduler and self.scheduler.running),
                timestamp=datetime.now(timezone.utc).isoformat(),
            )

        @app.get("/ready")
        async def readiness_check():
            """Readiness check for orchestration"""
            if not self._ready:
                raise HTTPException(status_code=503, detail="Not ready")
            return {"status": "ready"}

        # ============== Agents ==============

        @app.get("/agents")
        async def list_agents():
            """List registered agents without their secrets"""
            agents = await self.agents.list_agents()
            return [agent.model_dump(mode="json", exclude={"auth_secret"}) for agent in agents]

        @app.post("/agents/{agent_id}/run", response_model=ExecutionResult)
        async def run_agent_now(agent_id: str):
            """
            Execute an agent immediately.

            Runs alongside the scheduler's own batch.
            """
            try:
                return await self.runner.execute_now(agent_id)
            except AgentNotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @app.get("/agents/{agent_id}/executions", response_model=list[ExecutionRecord])
        async def list_executions(agent_id: str, limit: int = Query(default=20, ge=1, le=500)):
            """Latest executions of one agent"""
            if await self.agents.get_agent(agent_id) is None:
                raise HTTPException(status_code=404, detail=f"Agent not found: {agent_id}")
            return await self.results.list_executions(agent_id, limit=limit)

        # ============== Correlations ==============

        @app.get("/correlations", response_model=list[Correlation])
        async def list_correlations(limit: int = Query(default=50, ge=1, le=500)):
            """Latest detected correlations"""
            return await self.results.list_correlations(limit=limit)
