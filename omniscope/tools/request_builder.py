"""
Request Builder

Turns an Agent definition into the arguments of one outbound HTTP call.
"""

import base64
from typing import Any, Optional

from ..schemas.models import Agent

DEFAULT_USER_AGENT = "Omniscope-Agent-Runner/1.0"

CONTENT_TYPES = {
    "json": "application/json",
    "xml": "application/xml",
    "form_data": "application/x-www-form-urlencoded",
    "custom": "text/plain",
}

BEARER_AUTH_METHODS = ("api_key", "bearer_token")
BODY_METHODS = ("POST", "PUT", "PATCH")


def _authorization(agent: Agent) -> Optional[str]:
    if not agent.auth_secret:
        return None
    if agent.auth_method in BEARER_AUTH_METHODS:
        return f"Bearer {agent.auth_secret}"
    if agent.auth_method == "basic_auth":
        token = base64.b64encode(agent.auth_secret.encode("utf-8")).decode("ascii")
        return f"Basic {token}"
    return None


def merge_headers(base: dict[str, str], custom: dict[str, Any]) -> dict[str, str]:
    """Overlay custom headers on base; names compare case-insensitively"""
    headers = dict(base)
    for name, value in custom.items():
        for existing in [k for k in headers if k.lower() == name.lower()]:
            del headers[existing]
        headers[name] = str(value)
    return headers


def build_headers(agent: Agent, user_agent: str = DEFAULT_USER_AGENT) -> dict[str, str]:
    """
    Build request headers for an agent.

    Content-Type and User-Agent are always present. Authorization is added
    for bearer-style and basic credentials. Custom headers win on collision.
    """
    headers = {
        "Content-Type": CONTENT_TYPES.get(agent.payload_format, CONTENT_TYPES["json"]),
        "User-Agent": user_agent,
    }

    authorization = _authorization(agent)
    if authorization:
        headers["Authorization"] = authorization

    return merge_headers(headers, agent.headers)


def build_request(agent: Agent, user_agent: str = DEFAULT_USER_AGENT) -> dict[str, Any]:
    """
    Build keyword arguments for httpx.AsyncClient.request().

    The body template is attached verbatim for POST, PUT and PATCH.
    """
    request: dict[str, Any] = {
        "method": agent.method,
        "url": agent.url,
        "headers": build_headers(agent, user_agent),
        "params": dict(agent.query_params),
    }
    if agent.method in BODY_METHODS and agent.body_template:
        request["content"] = agent.body_template
    return request
