"""
Execution Context

Collaborators shared by every node of the execution workflow. Passed to the
graph through config["configurable"]["context"].
"""

from dataclasses import dataclass

import httpx
from langchain_core.runnables import RunnableConfig

from .clock import Clock, utc_now
from .tools.correlator import DEFAULT_SAMPLE_SIZE, SIGNIFICANCE_THRESHOLD
from .tools.request_builder import DEFAULT_USER_AGENT
from .tools.store import AgentStore, ResultStore

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass
class ExecutionContext:
    """Dependencies of one Execution Runner"""
    agents: AgentStore
    results: ResultStore
    http_client: httpx.AsyncClient
    clock: Clock = utc_now
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    correlation_sample_size: int = DEFAULT_SAMPLE_SIZE
    correlation_threshold: float = SIGNIFICANCE_THRESHOLD


def get_context(config: RunnableConfig) -> ExecutionContext:
    """Fetch the ExecutionContext a node was invoked with"""
    return config["configurable"]["context"]
