"""Model invocation port - interface for the LLM backend."""

from typing import Protocol

from pydantic import BaseModel


class ModelRequest(BaseModel):
    """Single-prompt completion request.

    An empty ``model`` lets the backend pick one from the scenario tag.
    """

    model: str = ""
    prompt: str
    temperature: float = 0.7
    max_tokens: int = 1000


class ModelUsage(BaseModel):
    """Token usage reported by the backend."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class ModelResponse(BaseModel):
    """Completion returned by the backend."""

    content: str
    model: str = ""
    usage: ModelUsage = ModelUsage()


class ModelInvocationPort(Protocol):
    """Interface for model backends (Ollama, hosted APIs, etc.)."""

    async def call(
        self,
        request: ModelRequest,
        user_id: str,
        scenario: str,
    ) -> ModelResponse:
        """Run a completion. ``scenario`` is the tier-derived routing tag."""
        ...
