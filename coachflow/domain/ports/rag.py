"""Retrieval port - interface for document retrieval."""

from typing import Protocol

from pydantic import BaseModel


class Document(BaseModel):
    """A retrieved document chunk."""

    content: str
    metadata: dict = {}
    score: float = 1.0


class RetrievalResult(BaseModel):
    """Documents returned for one query."""

    documents: list[Document] = []
    token_usage: int = 0


class RetrievalPort(Protocol):
    """Interface for retrieval providers (ChromaDB, etc.)."""

    async def query(self, query: str) -> RetrievalResult:
        """Return documents relevant to ``query``."""
        ...
