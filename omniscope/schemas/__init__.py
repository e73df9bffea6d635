"""
Pydantic schemas and workflow state for the execution engine.
"""

from .state import ExecutionState
from .models import (
    Agent,
    Entity,
    EntitySet,
    Correlation,
    ExecutionRecord,
    ExecutionResult,
)
from .values import ValueKind, kind_of

__all__ = [
    "ExecutionState",
    "Agent",
    "Entity",
    "EntitySet",
    "Correlation",
    "ExecutionRecord",
    "ExecutionResult",
    "ValueKind",
    "kind_of",
]
