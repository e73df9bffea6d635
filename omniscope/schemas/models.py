"""
Domain Models for the Agent Execution & Correlation Engine

These Pydantic models represent the records the engine reads and writes.
"""

from typing import Any, Optional, Literal
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field


EntityType = Literal[
    "email",
    "url",
    "date",
    "person_name",
    "location",
    "price",
    "identifier",
]

CorrelationType = Literal[
    "user_identity",
    "temporal",
    "geographic",
    "reference",
    "data_overlap",
]

AuthMethod = Literal["none", "api_key", "bearer_token", "basic_auth", "oauth", "custom"]
PayloadFormat = Literal["json", "xml", "form_data", "custom"]
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
ExecutionStatus = Literal["success", "error"]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


class Agent(BaseModel):
    """
    A user-registered HTTP endpoint polled on a schedule.

    Counters and run timestamps are written only by the Stats & Rescheduler.
    """
    id: str = Field(default_factory=_new_id)
    name: str
    description: Optional[str] = None
    user_id: Optional[str] = None

    # Request target
    url: str
    method: HttpMethod = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    query_params: dict[str, str] = Field(default_factory=dict)
    body_template: Optional[str] = None
    payload_format: PayloadFormat = "json"

    # Response handling
    data_path: str = "$"
    data_types: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    # Scheduling
    interval_minutes: int = Field(default=60, ge=1)
    enabled: bool = True

    # Authentication
    auth_method: AuthMethod = "none"
    auth_secret: Optional[str] = None

    # Lifecycle counters
    execution_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Berlin Weather",
                "url": "https://api.example.com/weather",
                "method": "GET",
                "query_params": {"q": "Berlin"},
                "data_path": "$.current",
                "interval_minutes": 15,
                "auth_method": "api_key",
                "auth_secret": "sk-demo",
            }
        }

    def is_due(self, now: datetime) -> bool:
        """True when the agent is enabled and its next run has elapsed"""
        return self.enabled and (self.next_run is None or self.next_run <= now)


class Entity(BaseModel):
    """A typed, confidence-scored fact found in a response payload"""
    type: EntityType
    value: str
    confidence: float = Field(ge=0.0, le=1.0)
    field_source: str
    agent_id: Optional[str] = None
    execution_id: Optional[str] = None

    class Config:
        frozen = True

    @property
    def key(self) -> str:
        """Shared-entity key used in correlations"""
        return f"{self.type}:{self.value}"


class EntitySet(BaseModel):
    """Entities produced by one execution of one agent"""
    agent_id: str
    execution_id: str
    tagged_at: datetime = Field(default_factory=_utc_now)
    entities: list[Entity] = Field(default_factory=list)

    class Config:
        frozen = True


class Correlation(BaseModel):
    """A detected overlap of identical entities between two agents"""
    id: str = Field(default_factory=_new_id)
    source_agent_id: str
    target_agent_id: str
    correlation_type: CorrelationType
    strength: float = Field(ge=0.0, le=1.0)
    shared_entities: list[str] = Field(default_factory=list)
    execution_id: Optional[str] = None
    discovered_at: datetime = Field(default_factory=_utc_now)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "source_agent_id": "crm-users",
                "target_agent_id": "billing-accounts",
                "correlation_type": "user_identity",
                "strength": 0.95,
                "shared_entities": ["email:a@b.com"],
            }
        }


class ExecutionRecord(BaseModel):
    """
    One HTTP call attempt for one agent.

    Written exactly once per execution and never updated.
    """
    id: str = Field(default_factory=_new_id)
    agent_id: str
    executed_at: datetime = Field(default_factory=_utc_now)
    status: ExecutionStatus
    response_time_ms: int = 0
    response_size_bytes: int = 0
    status_code: Optional[int] = None
    response_data: Any = None
    processed_data: Optional[dict[str, Any]] = None
    error_message: Optional[str] = None

    class Config:
        frozen = True


class ExecutionResult(BaseModel):
    """Summary of one execution returned to the caller"""
    agent_id: str
    execution_id: str
    success: bool
    response_time_ms: int = 0
    response_size_bytes: int = 0
    error_message: Optional[str] = None
    entity_count: int = 0
    correlation_count: int = 0
