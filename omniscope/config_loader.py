"""
Configuration Loader

Loads engine configuration from YAML file with environment variable substitution.
"""

import os
import re
from typing import Any, Literal, Optional
from pathlib import Path

import yaml
import structlog
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)


def _substitute_env_vars(value: Any) -> Any:
    """
    Recursively substitute environment variables in configuration.

    Supports format: ${VAR_NAME:-default_value}
    """
    if isinstance(value, str):
        # Pattern: ${VAR:-default} or ${VAR}
        pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

        def replace(match):
            var_name = match.group(1)
            default = match.group(2) if match.group(2) is not None else ""
            return os.getenv(var_name, default)

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]

    return value


class EnvSettings(BaseSettings):
    """Process-level overrides read from the environment"""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    config_path: str = "config.yaml"
    log_level: Optional[str] = None
    log_format: Optional[str] = None
    redis_url: Optional[str] = None


class ServiceConfig(BaseModel):
    """Service identification"""
    name: str = "omniscope-engine"
    version: str = "1.0.0"
    description: str = "Agent execution and correlation engine"


class SchedulerConfig(BaseModel):
    """Scheduler loop configuration"""
    enabled: bool = True
    tick_seconds: float = Field(default=60.0, gt=0)


class HttpConfig(BaseModel):
    """Outbound HTTP configuration"""
    timeout_seconds: float = Field(default=30.0, gt=0)
    user_agent: str = "Omniscope-Agent-Runner/1.0"
    verify_ssl: bool = True


class CorrelationConfig(BaseModel):
    """Correlation scan configuration"""
    sample_size: int = Field(default=10, ge=1)
    threshold: float = Field(default=0.5, ge=0.0, le=1.0)


class RedisConfig(BaseModel):
    """Redis configuration"""
    url: str = "redis://redis:6379"
    key_prefix: str = "omniscope:"


class StoreConfig(BaseModel):
    """Persistence backend"""
    backend: Literal["memory", "redis"] = "memory"
    redis: RedisConfig = Field(default_factory=lambda: RedisConfig())


class ApiConfig(BaseModel):
    """HTTP API server configuration"""
    host: str = "0.0.0.0"
    port: int = 8080


class ObservabilityConfig(BaseModel):
    """Observability configuration"""
    log_level: str = "INFO"
    log_format: str = "json"


class Config(BaseModel):
    """Complete engine configuration"""
    service: ServiceConfig = Field(default_factory=lambda: ServiceConfig())
    scheduler: SchedulerConfig = Field(default_factory=lambda: SchedulerConfig())
    http: HttpConfig = Field(default_factory=lambda: HttpConfig())
    correlation: CorrelationConfig = Field(default_factory=lambda: CorrelationConfig())
    store: StoreConfig = Field(default_factory=lambda: StoreConfig())
    api: ApiConfig = Field(default_factory=lambda: ApiConfig())
    observability: ObservabilityConfig = Field(default_factory=lambda: ObservabilityConfig())
    agents: list[dict[str, Any]] = Field(default_factory=list, description="Agents registered at startup")


def _apply_env_overrides(config: Config, env: EnvSettings) -> Config:
    """Environment settings take precedence over the file"""
    if env.log_level:
        config.observability.log_level = env.log_level
    if env.log_format:
        config.observability.log_format = env.log_format
    if env.redis_url:
        config.store.redis.url = env.redis_url
    return config


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses CONFIG_PATH or config.yaml.

    Returns:
        Parsed Config object
    """
    env = EnvSettings()
    if config_path is None:
        config_path = env.config_path

    path = Path(config_path)
    if not path.exists():
        logger.warning(
            "Config file not found, using defaults",
            path=str(path),
        )
        return _apply_env_overrides(Config(), env)

    logger.info("Loading configuration", path=str(path))

    with open(path, "r") as f:
        raw_config = yaml.safe_load(f) or {}

    # Substitute environment variables
    config_data = _substitute_env_vars(raw_config)

    config = _apply_env_overrides(Config(**config_data), env)

    logger.info(
        "Configuration loaded",
        service=config.service.name,
        store_backend=config.store.backend,
        tick_seconds=config.scheduler.tick_seconds,
    )

    return config
