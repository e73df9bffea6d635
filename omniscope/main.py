"""
Engine Main Entry Point

Wires configuration, stores, the HTTP client, the execution runner, the
scheduler and the API server, then serves with uvicorn.
"""

import argparse
import logging
from typing import Optional, Union

import httpx
import structlog
import uvicorn
from dotenv import load_dotenv

from .api.server import EngineServer
from .config_loader import Config, load_config
from .context import ExecutionContext
from .runner import ExecutionRunner
from .scheduler import AgentScheduler
from .schemas.models import Agent
from .tools.redis_store import RedisStore
from .tools.store import InMemoryStore

# Load environment variables
load_dotenv()

logger = structlog.get_logger(__name__)

Store = Union[InMemoryStore, RedisStore]


def configure_logging(level: str = "INFO", log_format: str = "json") -> None:
    """Configure structured logging"""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
            if log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_store(config: Config) -> Store:
    """Create the configured persistence backend"""
    if config.store.backend == "redis":
        return RedisStore(
            redis_url=config.store.redis.url,
            key_prefix=config.store.redis.key_prefix,
        )
    return InMemoryStore()


class EngineRunner:
    """
    Engine Runner

    Builds every component from configuration and runs the API server with
    the scheduler attached to its lifespan.
    """

    def __init__(self, config: Optional[Config] = None, config_path: Optional[str] = None):
        """
        Initialize engine runner.

        Args:
            config: Already loaded configuration
            config_path: Path to config.yaml, used when config is None
        """
        self.config = config or load_config(config_path)

        self.store = build_store(self.config)
        self.http_client = httpx.AsyncClient(
            verify=self.config.http.verify_ssl,
            follow_redirects=True,
        )
        self.context = ExecutionContext(
            agents=self.store,
            results=self.store,
            http_client=self.http_client,
            timeout_seconds=self.config.http.timeout_seconds,
            user_agent=self.config.http.user_agent,
            correlation_sample_size=self.config.correlation.sample_size,
            correlation_threshold=self.config.correlation.threshold,
        )
        self.runner = ExecutionRunner(self.context)

        self.scheduler: Optional[AgentScheduler] = None
        if self.config.scheduler.enabled:
            self.scheduler = AgentScheduler(
                agents=self.store,
                runner=self.runner,
                tick_seconds=self.config.scheduler.tick_seconds,
            )

        self.server = EngineServer(
            runner=self.runner,
            agents=self.store,
            results=self.store,
            scheduler=self.scheduler,
            service_name=self.config.service.name,
            version=self.config.service.version,
            on_startup=self.register_agents,
            on_shutdown=self.shutdown,
        )

    async def register_agents(self) -> int:
        """Save agents declared in configuration; already stored ids keep their stats"""
        count = 0
        for raw in self.config.agents:
            agent = Agent.model_validate(raw)
            if await self.store.get_agent(agent.id) is not None:
                continue
            await self.store.save_agent(agent)
            count += 1
        if count:
            logger.info("Registered configured agents", count=count)
        return count

    async def shutdown(self) -> None:
        """Release the HTTP client and store connections"""
        await self.http_client.aclose()
        await self.store.close()
        logger.info("Engine resources released")

    def run(self) -> None:
        """Run the engine server"""
        logger.info(
            "Starting engine server",
            host=self.config.api.host,
            port=self.config.api.port,
            store_backend=self.config.store.backend,
            scheduler_enabled=self.scheduler is not None,
        )

        uvicorn.run(
            self.server.app,
            host=self.config.api.host,
            port=self.config.api.port,
            log_level=self.config.observability.log_level.lower(),
        )


def main(argv: Optional[list[str]] = None) -> None:
    """Command line entry point"""
    parser = argparse.ArgumentParser(description="Agent execution and correlation engine")
    parser.add_argument("--config", dest="config_path", default=None, help="Path to config.yaml")
    args = parser.parse_args(argv)

    config = load_config(args.config_path)
    configure_logging(config.observability.log_level, config.observability.log_format)

    EngineRunner(config=config).run()


if __name__ == "__main__":
    main()
