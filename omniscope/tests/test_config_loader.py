"""
Tests for Configuration Loader
"""

import pytest

from ..config_loader import Config, _substitute_env_vars, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CONFIG_PATH", "LOG_LEVEL", "LOG_FORMAT", "REDIS_URL", "ENGINE_PORT"):
        monkeypatch.delenv(name, raising=False)


class TestSubstituteEnvVars:
    """Tests for ${VAR:-default} substitution"""

    def test_default_used_when_unset(self):
        assert _substitute_env_vars("${ENGINE_PORT:-8080}") == "8080"

    def test_environment_wins(self, monkeypatch):
        monkeypatch.setenv("ENGINE_PORT", "9090")
        assert _substitute_env_vars({"port": "${ENGINE_PORT:-8080}"}) == {"port": "9090"}

    def test_nested_lists(self):
        assert _substitute_env_vars(["${MISSING_VAR}", 3]) == ["", 3]


class TestLoadConfig:
    """Tests for load_config"""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "absent.yaml"))

        assert config == Config()
        assert config.http.timeout_seconds == 30.0
        assert config.correlation.threshold == 0.5
        assert config.correlation.sample_size == 10
        assert config.scheduler.tick_seconds == 60.0
        assert config.store.backend == "memory"

    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ENGINE_PORT", "9191")
        path = tmp_path / "config.yaml"
        path.write_text(
            "service:\n"
            "  name: test-engine\n"
            "scheduler:\n"
            "  tick_seconds: 5\n"
            "api:\n"
            "  port: ${ENGINE_PORT:-8080}\n"
            "store:\n"
            "  backend: redis\n"
            "agents:\n"
            "  - name: Weather\n"
            "    url: https://api.example.com/weather\n"
        )

        config = load_config(str(path))

        assert config.service.name == "test-engine"
        assert config.scheduler.tick_seconds == 5
        assert config.api.port == 9191
        assert config.store.backend == "redis"
        assert config.agents[0]["name"] == "Weather"

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")

        config = load_config(str(tmp_path / "absent.yaml"))

        assert config.observability.log_level == "DEBUG"
        assert config.store.redis.url == "redis://cache:6379/1"

    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "engine.yaml"
        path.write_text("http:\n  timeout_seconds: 12\n")
        monkeypatch.setenv("CONFIG_PATH", str(path))

        assert load_config().http.timeout_seconds == 12

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(str(path)) == Config()
