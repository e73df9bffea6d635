"""
Engine Exceptions
"""

from typing import Optional


class EngineError(Exception):
    """Base class for engine errors"""


class AgentNotFoundError(EngineError):
    """Raised when an agent id does not exist in the store"""

    def __init__(self, agent_id: str):
        super().__init__(f"Agent not found: {agent_id}")
        self.agent_id = agent_id


class StoreError(EngineError):
    """Raised when a store backend cannot read or write a record"""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key
