"""Ollama embeddings adapter - POST /api/embed."""

import logging

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from coachflow.domain.ports.config import EmbeddingsConfig, OllamaConfig

logger = logging.getLogger(__name__)


class OllamaEmbeddingsAdapter:
    """Embeds retrieval queries with an Ollama embedding model."""

    def __init__(self, config: OllamaConfig, embeddings_config: EmbeddingsConfig) -> None:
        self._host = config.host.rstrip("/")
        self._model = embeddings_config.model
        self._timeout = config.timeout

    async def embed(self, text: str) -> list[float]:
        result = await self.embed_batch([text])
        return result[0] if result else []

    @retry(
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed texts; retries network errors with exponential backoff.

        Raises:
            ValueError: The server returned a different number of vectors.
        """
        if not texts:
            return []

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                f"{self._host}/api/embed",
                json={"model": self._model, "input": texts},
            )
            if resp.is_error:
                logger.error("Ollama embedding error %s: %s", resp.status_code, resp.text[:200])
            resp.raise_for_status()
            data = resp.json()

        embeddings = data.get("embeddings", [])
        if len(embeddings) != len(texts):
            raise ValueError(f"Embedding count mismatch: got {len(embeddings)}, expected {len(texts)}")
        return embeddings
