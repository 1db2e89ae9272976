"""ChromaDB retrieval adapter - implements RetrievalPort.

Queries a persistent collection (interview questions, coaching notes, job
description snippets) with an embedding of the query text. Embedding and
query failures propagate so the workflow step degrades to its fallback.
"""

import asyncio
import hashlib
import logging
from pathlib import Path

import chromadb
from chromadb.config import Settings

from coachflow.domain.ports.config import RAGConfig
from coachflow.domain.ports.embeddings import EmbeddingsPort
from coachflow.domain.ports.rag import Document, RetrievalResult

logger = logging.getLogger(__name__)


class ChromaRetrievalAdapter:
    """ChromaDB implementation of RetrievalPort."""

    def __init__(self, config: RAGConfig, embeddings: EmbeddingsPort) -> None:
        self._config = config
        self._embeddings = embeddings
        chromadb_path = Path(config.chromadb_path).resolve()
        chromadb_path.mkdir(parents=True, exist_ok=True)
        self._client = chromadb.PersistentClient(
            path=str(chromadb_path),
            settings=Settings(anonymized_telemetry=False),
        )
        self._collection = self._client.get_or_create_collection(
            name=config.collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    async def query(self, query: str) -> RetrievalResult:
        """Top-k documents for ``query``; no model tokens are billed."""
        text = query.strip()
        if not text:
            return RetrievalResult()

        count = await asyncio.to_thread(self._collection.count)
        if count == 0:
            logger.debug("Retrieval skipped: collection '%s' is empty", self._config.collection_name)
            return RetrievalResult()

        query_embedding = await self._embeddings.embed(text)
        if not query_embedding:
            raise ValueError("Empty query embedding returned")

        result = await asyncio.to_thread(
            self._collection.query,
            query_embeddings=[query_embedding],
            n_results=min(self._config.top_k, count),
            include=["documents", "metadatas", "distances"],
        )

        documents = (result.get("documents") or [[]])[0] or []
        metadatas = (result.get("metadatas") or [[]])[0] or []
        distances = (result.get("distances") or [[]])[0] or []

        docs: list[Document] = []
        for i, content in enumerate(documents):
            if not content:
                continue
            distance = distances[i] if i < len(distances) else 0.0
            docs.append(
                Document(
                    content=content,
                    metadata=dict(metadatas[i] or {}) if i < len(metadatas) else {},
                    score=round(1.0 - float(distance), 4),
                )
            )
        return RetrievalResult(documents=docs, token_usage=0)

    async def add_documents(self, documents: list[Document]) -> int:
        """Upsert documents into the collection. Returns the number written.

        Ids are content hashes, so re-seeding the same text is idempotent.
        """
        docs = [d for d in documents if d.content.strip()]
        if not docs:
            return 0
        vectors = await self._embeddings.embed_batch([d.content for d in docs])
        ids = [hashlib.sha256(d.content.encode("utf-8")).hexdigest()[:32] for d in docs]
        await asyncio.to_thread(
            self._collection.upsert,
            ids=ids,
            documents=[d.content for d in docs],
            embeddings=vectors,
            metadatas=[d.metadata or None for d in docs],
        )
        logger.info("Upserted %d documents into '%s'", len(docs), self._config.collection_name)
        return len(docs)
