"""Config Port - interface for configuration access."""

from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field


class ModelTierConfig(BaseModel):
    """Model name per tier. The tier (scenario tag) picks the model for llm-call steps."""

    cost_optimized: str = "qwen2.5:3b"
    balanced: str = "qwen2.5:7b"
    quality_optimized: str = "qwen2.5:14b"

    model_config = ConfigDict(extra="ignore")

    def model_for_scenario(self, scenario: str) -> str:
        """Resolve a scenario tag to a model name. Unknown tags use the balanced model."""
        return {
            "cost-optimized": self.cost_optimized,
            "balanced": self.balanced,
            "quality-optimized": self.quality_optimized,
        }.get(scenario, self.balanced)


class OllamaConfig(BaseModel):
    """Ollama connection configuration."""

    host: str = "http://localhost:11434"
    timeout: int = 120
    num_ctx: int | None = None  # Context window. None = model default.


class EmbeddingsConfig(BaseModel):
    """Embeddings for retrieval."""

    model: str = "nomic-embed-text"


class RAGConfig(BaseModel):
    """Retrieval (ChromaDB) settings."""

    chromadb_path: str = "output/chromadb"
    collection_name: str = "coaching_knowledge"
    top_k: int = 5


class CacheConfig(BaseModel):
    """Key/value store backing the intermediate result cache."""

    backend: str = "memory"  # "memory" | "redis"
    redis_url: str = "redis://localhost:6379/0"
    max_size: int = 10_000  # memory backend only


class WorkflowConfig(BaseModel):
    """Workflow engine defaults."""

    cache_ttl_seconds: int = Field(3600, gt=0)
    default_temperature: float = 0.7
    default_max_tokens: int = 1000
    default_compression_tokens: int = 500


class SecurityConfig(BaseModel):
    """Security settings."""

    rate_limit_requests_per_minute: int = 100
    cors_origins: list[str] = ["http://localhost:5173"]


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Full application configuration."""

    server: ServerConfig = ServerConfig()
    ollama: OllamaConfig = OllamaConfig()
    models: ModelTierConfig = ModelTierConfig()
    embeddings: EmbeddingsConfig = EmbeddingsConfig()
    rag: RAGConfig = RAGConfig()
    cache: CacheConfig = CacheConfig()
    workflow: WorkflowConfig = WorkflowConfig()
    security: SecurityConfig = SecurityConfig()
    log_level: str = "INFO"
    # Log file: path relative to cwd or absolute. Empty = only stdout.
    log_file: str = ""
    log_rotation_max_mb: int = 5
    log_rotation_backups: int = 3


class ConfigPort(Protocol):
    """Interface for configuration providers."""

    def get_config(self) -> AppConfig:
        """Get the full application configuration."""
        ...
