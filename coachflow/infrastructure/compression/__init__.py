"""Content compressors."""

from coachflow.infrastructure.compression.truncating import TruncatingCompressor, estimate_tokens

__all__ = ["TruncatingCompressor", "estimate_tokens"]
