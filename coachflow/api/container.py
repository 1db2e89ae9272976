"""Dependency Injection Container - centralized service management."""

from functools import cached_property
from typing import TYPE_CHECKING

from coachflow.application.workflow.executors import StepExecutorRegistry, create_default_registry
from coachflow.application.workflow.intermediate_cache import IntermediateResultCache
from coachflow.application.workflow.orchestrator import WorkflowOrchestrator
from coachflow.domain.ports.cache import CacheStorePort
from coachflow.domain.ports.compression import CompressionPort
from coachflow.domain.ports.config import AppConfig
from coachflow.domain.ports.tools import ToolRegistryPort
from coachflow.infrastructure.config import load_config

if TYPE_CHECKING:
    from coachflow.application.workflow.use_case import WorkflowUseCase
    from coachflow.infrastructure.llm.ollama import OllamaModelAdapter
    from coachflow.infrastructure.rag.chromadb_adapter import ChromaRetrievalAdapter


class Container:
    """Lazily builds and caches the workflow engine and its collaborators.

    Tests replace a collaborator by assigning the attribute before first use:
        container = Container(config)
        container.model = fake_model
    """

    def __init__(self, config: AppConfig | None = None):
        self._config_override = config

    @cached_property
    def config(self) -> AppConfig:
        if self._config_override:
            return self._config_override
        return load_config()

    @cached_property
    def model(self) -> "OllamaModelAdapter":
        """Model invocation backend."""
        from coachflow.infrastructure.llm.ollama import OllamaModelAdapter

        return OllamaModelAdapter(self.config.ollama, self.config.models)

    @cached_property
    def cache_store(self) -> CacheStorePort:
        """Key/value store selected by ``cache.backend``."""
        cache = self.config.cache
        ttl = self.config.workflow.cache_ttl_seconds
        if cache.backend == "redis":
            from coachflow.infrastructure.cache.redis_store import RedisCacheStore

            return RedisCacheStore(cache.redis_url, default_ttl_seconds=ttl)

        from coachflow.infrastructure.cache.memory import InMemoryCacheStore

        return InMemoryCacheStore(max_size=cache.max_size, default_ttl_seconds=ttl)

    @cached_property
    def intermediate_cache(self) -> IntermediateResultCache:
        return IntermediateResultCache(self.cache_store, ttl_seconds=self.config.workflow.cache_ttl_seconds)

    @cached_property
    def tools(self) -> ToolRegistryPort:
        from coachflow.infrastructure.tools import create_default_tool_registry

        return create_default_tool_registry()

    @cached_property
    def retrieval(self) -> "ChromaRetrievalAdapter":
        """Retrieval over the coaching knowledge base (ChromaDB + Ollama embeddings)."""
        from coachflow.infrastructure.embeddings.ollama import OllamaEmbeddingsAdapter
        from coachflow.infrastructure.rag.chromadb_adapter import ChromaRetrievalAdapter

        embeddings = OllamaEmbeddingsAdapter(self.config.ollama, self.config.embeddings)
        return ChromaRetrievalAdapter(self.config.rag, embeddings)

    @cached_property
    def compressor(self) -> CompressionPort:
        from coachflow.infrastructure.compression import TruncatingCompressor

        return TruncatingCompressor()

    @cached_property
    def executors(self) -> StepExecutorRegistry:
        return create_default_registry(
            model=self.model,
            tools=self.tools,
            retrieval=self.retrieval,
            compressor=self.compressor,
            config=self.config.workflow,
        )

    @cached_property
    def orchestrator(self) -> WorkflowOrchestrator:
        return WorkflowOrchestrator(self.executors, self.intermediate_cache)

    @cached_property
    def workflow_use_case(self) -> "WorkflowUseCase":
        from coachflow.application.workflow.use_case import WorkflowUseCase

        return WorkflowUseCase(self.orchestrator, self.intermediate_cache)

    def reset(self) -> None:
        """Drop every cached instance."""
        for attr in list(self.__dict__.keys()):
            if not attr.startswith("_"):
                delattr(self, attr)


_container: Container | None = None


def get_container() -> Container:
    """Get or create global container instance."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def set_container(container: Container) -> None:
    """Install a pre-built container (tests)."""
    global _container
    _container = container


def reset_container() -> None:
    """Reset global container (for testing)."""
    global _container
    if _container:
        _container.reset()
    _container = None
