"""
Execution Workflow

LangGraph workflow implementing one Execution Runner invocation.
pending -> requesting -> success | error -> persisted, then reschedule.
"""

from typing import Any, Optional
from datetime import datetime, timezone
from uuid import uuid4

import structlog
from langgraph.graph import StateGraph, START, END

from .context import ExecutionContext
from .schemas.models import Agent
from .schemas.state import ExecutionState
from .nodes import (
    prepare_node,
    request_node,
    process_node,
    correlate_node,
    persist_node,
    record_error_node,
    reschedule_node,
    check_outcome,
    check_step,
)

logger = structlog.get_logger(__name__)


class ExecutionWorkflow:
    """
    Execution Workflow

    - PREPARE: Build headers, query parameters and body
    - REQUEST: One HTTP call with a hard timeout
    - PROCESS: Extract, classify and tag the payload
    - CORRELATE: Score entities against other agents
    - PERSIST: Write the success record, entities and correlations
    - RECORD_ERROR: Write the error record
    - RESCHEDULE: Update counters and next_run
    """

    def __init__(self):
        self._graph: Optional[StateGraph] = None
        self._compiled = None

    def get_state_class(self) -> type:
        """Return ExecutionState TypedDict"""
        return ExecutionState

    def get_initial_state(self, agent: Agent, execution_id: Optional[str] = None) -> dict[str, Any]:
        """Create initial state for one execution"""
        return {
            "agent": agent,
            "execution_id": execution_id or uuid4().hex,
            "phase": "pending",
            "entities": [],
            "correlations": [],
            "error": None,
            "record": None,
            "updated_agent": None,
            "current_node": "start",
            "nodes_executed": [],
            "started_at": datetime.now(timezone.utc).isoformat(),
        }

    def build_graph(self, graph: StateGraph) -> None:
        """
        Build execution workflow graph.

        PREPARE -> REQUEST -> PROCESS -> CORRELATE -> PERSIST -> RESCHEDULE
        REQUEST | PROCESS | CORRELATE | PERSIST -> RECORD_ERROR -> RESCHEDULE (on error)
        """
        graph.add_node("prepare", prepare_node)
        graph.add_node("request", request_node)
        graph.add_node("process", process_node)
        graph.add_node("correlate", correlate_node)
        graph.add_node("persist", persist_node)
        graph.add_node("record_error", record_error_node)
        graph.add_node("reschedule", reschedule_node)

        graph.add_edge(START, "prepare")
        graph.add_edge("prepare", "request")

        # REQUEST -> PROCESS | RECORD_ERROR (conditional)
        graph.add_conditional_edges(
            "request",
            check_outcome,
            {
                "process": "process",
                "record_error": "record_error",
            }
        )

        # PROCESS -> CORRELATE -> PERSIST, each falling back to RECORD_ERROR
        for node, next_node in (
            ("process", "correlate"),
            ("correlate", "persist"),
            ("persist", "reschedule"),
        ):
            graph.add_conditional_edges(
                node,
                check_step,
                {
                    "continue": next_node,
                    "record_error": "record_error",
                }
            )
        graph.add_edge("record_error", "reschedule")
        graph.add_edge("reschedule", END)

    def compile(self) -> Any:
        """
        Compile the workflow graph.

        Returns the compiled LangGraph application.
        """
        if self._compiled:
            return self._compiled

        self._graph = StateGraph(self.get_state_class())
        self.build_graph(self._graph)
        self._compiled = self._graph.compile()
        logger.info("Compiled execution workflow")
        return self._compiled

    async def execute(
        self,
        agent: Agent,
        context: ExecutionContext,
        execution_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Run one execution of agent.

        Args:
            agent: Agent to execute
            context: Stores, HTTP client and clock
            execution_id: Id for the execution record

        Returns:
            Final workflow state

        Raises:
            Exception: Store failures propagate after being logged
        """
        app = self.compile()
        initial_state = self.get_initial_state(agent, execution_id)

        try:
            final_state = await app.ainvoke(
                initial_state,
                config={"configurable": {"context": context}},
            )
        except Exception:
            logger.exception(
                "Execution workflow exception",
                agent_id=agent.id,
                execution_id=initial_state["execution_id"],
            )
            raise

        logger.debug(
            "Execution workflow completed",
            agent_id=agent.id,
            outcome=final_state.get("outcome"),
            nodes_executed=final_state.get("nodes_executed", []),
        )
        return final_state
