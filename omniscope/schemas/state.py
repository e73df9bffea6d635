"""
Execution Workflow State Schema

The TypedDict that flows through every node of the execution workflow.
"""

from typing import Any, TypedDict, Optional, List

from .models import Agent, Entity, Correlation, ExecutionRecord


class ExecutionState(TypedDict, total=False):
    """
    State for one Execution Runner invocation.

    phase moves pending -> requesting -> success | error -> persisted.
    """

    # ============== Identification ==============
    agent: Agent
    execution_id: str
    phase: str

    # ============== Request ==============
    request: dict[str, Any]               # method, url, headers, params, content
    status_code: Optional[int]
    response_time_ms: int
    response_size_bytes: int
    response_data: Any                    # Decoded body (JSON value or text)

    # ============== Processing ==============
    extracted_data: Any
    numeric_fields: dict[str, float]
    text_fields: dict[str, str]
    processed_data: dict[str, Any]
    entities: List[Entity]
    correlations: List[Correlation]

    # ============== Outcome ==============
    outcome: str                          # "success" | "error"
    error: Optional[str]
    record: Optional[ExecutionRecord]
    updated_agent: Optional[Agent]

    # ============== Execution Tracking ==============
    current_node: str
    nodes_executed: List[str]
    started_at: str
