"""
Conditional Edge Functions

Routing logic for the execution workflow.
"""

from typing import Any, Literal


def check_outcome(state: dict[str, Any]) -> Literal["process", "record_error"]:
    """
    Route on the request outcome.

    request -> process | record_error

    Args:
        state: Current workflow state

    Returns:
        Next node name
    """
    if state.get("outcome") == "success":
        return "process"
    return "record_error"


def check_step(state: dict[str, Any]) -> Literal["continue", "record_error"]:
    """
    Route after a post-request step.

    process | correlate | persist -> next step | record_error
    """
    if state.get("outcome") == "error":
        return "record_error"
    return "continue"
