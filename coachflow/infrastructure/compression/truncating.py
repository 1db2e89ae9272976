"""Truncating compressor - keeps the most recent content within a token budget."""

import math

from coachflow.domain.ports.compression import CompressionResult

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Rough token estimate: one token per four characters."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class TruncatingCompressor:
    """Drops the oldest text until the remainder fits ``max_tokens``.

    Conversation transcripts put the newest turns last, so the tail is kept.
    No model is called; token usage is always 0.
    """

    async def compress(self, content: str, max_tokens: int) -> CompressionResult:
        if max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")

        original_tokens = estimate_tokens(content)
        if original_tokens <= max_tokens:
            return CompressionResult(
                compressed=content,
                token_usage=0,
                original_tokens=original_tokens,
                compressed_tokens=original_tokens,
            )

        budget = max_tokens * CHARS_PER_TOKEN
        tail = content[-budget:]
        # Start on a word boundary when the cut landed mid-word
        cut = tail.find(" ")
        if 0 <= cut < len(tail) - 1 and not content[-budget - 1].isspace():
            tail = tail[cut + 1 :]
        compressed = tail.strip()
        return CompressionResult(
            compressed=compressed,
            token_usage=0,
            original_tokens=original_tokens,
            compressed_tokens=estimate_tokens(compressed),
        )
