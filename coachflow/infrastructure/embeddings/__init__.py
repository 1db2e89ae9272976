"""Embedding adapters."""

from coachflow.infrastructure.embeddings.ollama import OllamaEmbeddingsAdapter

__all__ = ["OllamaEmbeddingsAdapter"]
