"""
Omniscope Engine

Agent execution and correlation engine. Polls user-registered HTTP
endpoints on a schedule, tags the entities found in their responses and
links agents whose payloads share identical entities.

Example:
    from omniscope import EngineRunner, load_config

    if __name__ == "__main__":
        EngineRunner(load_config("config.yaml")).run()
"""

from .workflow import ExecutionWorkflow
from .runner import ExecutionRunner
from .scheduler import AgentScheduler
from .context import ExecutionContext
from .main import EngineRunner, configure_logging
from .config_loader import load_config, Config

__version__ = "1.0.0"

__all__ = [
    "ExecutionWorkflow",
    "ExecutionRunner",
    "AgentScheduler",
    "ExecutionContext",
    "EngineRunner",
    "configure_logging",
    "load_config",
    "Config",
]
