"""Compression port - shrink content to a token budget."""

from typing import Protocol

from pydantic import BaseModel


class CompressionResult(BaseModel):
    """Compressed content with size accounting."""

    compressed: str
    token_usage: int = 0
    original_tokens: int = 0
    compressed_tokens: int = 0


class CompressionPort(Protocol):
    """Interface for content compressors."""

    async def compress(self, content: str, max_tokens: int) -> CompressionResult:
        """Compress ``content`` to roughly ``max_tokens`` tokens."""
        ...
