"""TOML configuration loader with env overrides."""

import logging
import os
import tomllib
from pathlib import Path

from coachflow.domain.ports.config import (
    AppConfig,
    CacheConfig,
    EmbeddingsConfig,
    ModelTierConfig,
    OllamaConfig,
    RAGConfig,
    SecurityConfig,
    ServerConfig,
    WorkflowConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"


def _load_toml(path: Path) -> dict:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _merge(base: dict, override: dict) -> dict:
    """Shallow-merge TOML tables: override tables update base tables key by key."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def _set_int(config: dict, section: str, key: str, env_name: str, minimum: int | None = None) -> None:
    raw = os.getenv(env_name)
    if not raw:
        return
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s env value: %r, ignoring", env_name, raw)
        return
    if minimum is not None and value < minimum:
        logger.warning("%s must be >= %d, got %d, ignoring", env_name, minimum, value)
        return
    config.setdefault(section, {})[key] = value


def _apply_env_overrides(config: dict) -> dict:
    """Apply environment variable overrides."""
    if host := os.getenv("OLLAMA_HOST"):
        config.setdefault("ollama", {})["host"] = host
    _set_int(config, "server", "port", "PORT")
    if level := os.getenv("LOG_LEVEL"):
        config.setdefault("logging", {})["level"] = level.upper()
    if path := os.getenv("LOG_FILE"):
        config.setdefault("logging", {})["file"] = path.strip()
    if backend := os.getenv("CACHE_BACKEND"):
        config.setdefault("cache", {})["backend"] = backend.strip().lower()
    if url := os.getenv("REDIS_URL"):
        config.setdefault("cache", {})["redis_url"] = url.strip()
    _set_int(config, "workflow", "cache_ttl_seconds", "WORKFLOW_CACHE_TTL", minimum=1)
    if origins := os.getenv("CORS_ORIGINS"):
        config.setdefault("security", {})["cors_origins"] = [o.strip() for o in origins.split(",")]
    if model := os.getenv("EMBEDDINGS_MODEL"):
        config.setdefault("embeddings", {})["model"] = model
    return config


def load_config(config_dir: Path | None = None) -> AppConfig:
    """Load configuration from TOML files with env overrides.

    Loads default.toml, then development.toml over it if present.
    """
    config_dir = config_dir or DEFAULT_CONFIG_DIR

    config: dict = {}
    for name in ("default.toml", "development.toml"):
        path = config_dir / name
        if path.exists():
            config = _merge(config, _load_toml(path))

    config = _apply_env_overrides(config)

    logging_raw = config.get("logging") or {}
    return AppConfig(
        server=ServerConfig(**(config.get("server") or {})),
        ollama=OllamaConfig(**(config.get("ollama") or {})),
        models=ModelTierConfig(**(config.get("models") or {})),
        embeddings=EmbeddingsConfig(**(config.get("embeddings") or {})),
        rag=RAGConfig(**(config.get("rag") or {})),
        cache=CacheConfig(**(config.get("cache") or {})),
        workflow=WorkflowConfig(**(config.get("workflow") or {})),
        security=SecurityConfig(**(config.get("security") or {})),
        log_level=logging_raw.get("level", "INFO"),
        log_file=(logging_raw.get("file") or "").strip(),
        log_rotation_max_mb=int(logging_raw.get("rotation_max_mb", 5)),
        log_rotation_backups=int(logging_raw.get("rotation_backups", 3)),
    )
