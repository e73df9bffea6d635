"""
Request Node

Issues the agent's HTTP call with a hard timeout and decodes the body.
From the state machine: requesting -> success | error

Transport failures, timeouts, non-2xx statuses and malformed JSON bodies
all become an "error" outcome; nothing is raised past this node.
"""

import asyncio
import json
import time
from typing import Any

import httpx
import structlog
from langchain_core.runnables import RunnableConfig

from ..context import get_context

logger = structlog.get_logger(__name__)

DECODE_ERROR_MESSAGE = "Failed to decode response body as JSON"


def decode_body(response: httpx.Response) -> Any:
    """
    Decode a response body by its declared content type.

    Raises:
        ValueError: If a JSON content type carries a malformed or too deeply nested body
    """
    content_type = response.headers.get("content-type", "")
    if "json" not in content_type.lower():
        return response.text
    try:
        return json.loads(response.text)
    except RecursionError as e:
        raise ValueError("JSON body nested too deeply") from e


def _error(state: dict[str, Any], message: str, **fields: Any) -> dict[str, Any]:
    return {
        "phase": "error",
        "outcome": "error",
        "error": message,
        "response_data": None,
        "response_size_bytes": 0,
        "current_node": "request",
        "nodes_executed": state.get("nodes_executed", []) + ["request"],
        **fields,
    }


async def request_node(state: dict[str, Any], config: RunnableConfig) -> dict[str, Any]:
    """
    Request Node - Perform one HTTP call.

    Args:
        state: Current workflow state
        config: Runnable config carrying the ExecutionContext

    Returns:
        Updated state with status, latency, size and decoded body
    """
    context = get_context(config)
    agent = state["agent"]
    request = state["request"]

    logger.info("Executing agent", agent_id=agent.id, name=agent.name, url=request["url"])

    started = time.monotonic()
    try:
        # httpx timeouts apply per read; wait_for bounds the whole call
        response = await asyncio.wait_for(
            context.http_client.request(timeout=context.timeout_seconds, **request),
            timeout=context.timeout_seconds,
        )
    except asyncio.TimeoutError:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        message = f"Request timed out after {context.timeout_seconds:g}s"
        logger.warning("Agent request timed out", agent_id=agent.id, error=message)
        return _error(state, message, response_time_ms=elapsed_ms, status_code=None)
    except httpx.TimeoutException as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        message = str(e) or f"Request timed out after {context.timeout_seconds:g}s"
        logger.warning("Agent request timed out", agent_id=agent.id, error=message)
        return _error(state, message, response_time_ms=elapsed_ms, status_code=None)
    except httpx.HTTPError as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        message = str(e) or type(e).__name__
        logger.warning("Agent request failed", agent_id=agent.id, error=message)
        return _error(state, message, response_time_ms=elapsed_ms, status_code=None)

    elapsed_ms = int((time.monotonic() - started) * 1000)

    if not response.is_success:
        message = f"HTTP {response.status_code}: {response.reason_phrase}"
        logger.warning("Agent returned error status", agent_id=agent.id, status_code=response.status_code)
        return _error(state, message, response_time_ms=elapsed_ms, status_code=response.status_code)

    try:
        data = decode_body(response)
    except ValueError as e:
        logger.warning("Agent response not decodable", agent_id=agent.id, error=str(e))
        return _error(state, DECODE_ERROR_MESSAGE, response_time_ms=elapsed_ms, status_code=response.status_code)

    logger.info(
        "Agent request succeeded",
        agent_id=agent.id,
        status_code=response.status_code,
        response_time_ms=elapsed_ms,
    )

    return {
        "phase": "success",
        "outcome": "success",
        "error": None,
        "status_code": response.status_code,
        "response_time_ms": elapsed_ms,
        "response_size_bytes": len(response.content),
        "response_data": data,
        "current_node": "request",
        "nodes_executed": state.get("nodes_executed", []) + ["request"],
    }
