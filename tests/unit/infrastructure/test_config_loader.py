"""Tests for TOML config loader."""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from coachflow.domain.ports.config import WorkflowConfig
from coachflow.infrastructure.config.toml_loader import _apply_env_overrides, load_config


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_config(self):
        """Repository default.toml loads with workflow defaults."""
        config = load_config()

        assert config.workflow.cache_ttl_seconds == 3600
        assert config.workflow.default_temperature == 0.7
        assert config.workflow.default_max_tokens == 1000
        assert config.cache.backend in ("memory", "redis")
        assert config.models.balanced

    def test_loads_from_custom_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "default.toml").write_text(
                """
[cache]
backend = "redis"
redis_url = "redis://cache:6379/2"

[workflow]
cache_ttl_seconds = 120

[logging]
level = "DEBUG"
file = "logs/app.log"
"""
            )
            config = load_config(Path(tmpdir))

        assert config.cache.backend == "redis"
        assert config.cache.redis_url == "redis://cache:6379/2"
        assert config.workflow.cache_ttl_seconds == 120
        assert config.log_level == "DEBUG"
        assert config.log_file == "logs/app.log"

    def test_merges_development_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "default.toml").write_text(
                """
[models]
balanced = "base-model"
cost_optimized = "small-model"
"""
            )
            (Path(tmpdir) / "development.toml").write_text(
                """
[models]
balanced = "dev-model"
"""
            )
            config = load_config(Path(tmpdir))

        assert config.models.balanced == "dev-model"
        assert config.models.cost_optimized == "small-model"

    def test_handles_missing_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_config(Path(tmpdir))

        assert config.cache.backend == "memory"
        assert config.workflow.cache_ttl_seconds == 3600
        assert config.log_level == "INFO"


class TestApplyEnvOverrides:
    """Tests for _apply_env_overrides function."""

    def test_cache_overrides(self):
        env = {"CACHE_BACKEND": "Redis", "REDIS_URL": "redis://r:6379/1", "WORKFLOW_CACHE_TTL": "90"}
        with patch.dict(os.environ, env):
            config = _apply_env_overrides({})

        assert config["cache"] == {"backend": "redis", "redis_url": "redis://r:6379/1"}
        assert config["workflow"] == {"cache_ttl_seconds": 90}

    def test_invalid_int_is_ignored(self):
        with patch.dict(os.environ, {"WORKFLOW_CACHE_TTL": "soon", "PORT": "http"}):
            config = _apply_env_overrides({"workflow": {"cache_ttl_seconds": 10}})

        assert config["workflow"]["cache_ttl_seconds"] == 10
        assert "server" not in config

    def test_log_and_cors_overrides(self):
        env = {"LOG_LEVEL": "debug", "CORS_ORIGINS": "http://a.test, http://b.test"}
        with patch.dict(os.environ, env):
            config = _apply_env_overrides({})

        assert config["logging"]["level"] == "DEBUG"
        assert config["security"]["cors_origins"] == ["http://a.test", "http://b.test"]

    def test_ollama_host_override(self):
        with patch.dict(os.environ, {"OLLAMA_HOST": "http://gpu-box:11434"}):
            config = _apply_env_overrides({})

        assert config["ollama"]["host"] == "http://gpu-box:11434"

    def test_non_positive_cache_ttl_is_ignored(self):
        with patch.dict(os.environ, {"WORKFLOW_CACHE_TTL": "0"}):
            config = _apply_env_overrides({"workflow": {"cache_ttl_seconds": 600}})

        assert config["workflow"]["cache_ttl_seconds"] == 600


class TestWorkflowConfig:
    def test_zero_cache_ttl_is_rejected(self):
        with pytest.raises(ValidationError):
            WorkflowConfig(cache_ttl_seconds=0)
