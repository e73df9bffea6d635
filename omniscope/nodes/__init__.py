"""
Execution Workflow Nodes

LangGraph nodes implementing one agent execution:
prepare -> request -> process -> correlate -> persist -> reschedule
request | process | correlate | persist -> record_error -> reschedule (on error)
"""

from .prepare_node import prepare_node
from .request_node import request_node
from .process_node import process_node
from .correlate_node import correlate_node
from .persist_node import persist_node
from .error_node import record_error_node
from .reschedule_node import reschedule_node

from .conditions import check_outcome, check_step

__all__ = [
    # Nodes
    "prepare_node",
    "request_node",
    "process_node",
    "correlate_node",
    "persist_node",
    "record_error_node",
    "reschedule_node",
    # Conditions
    "check_outcome",
    "check_step",
]
