"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from coachflow.api.container import Container, reset_container, set_container
from coachflow.api.dependencies import limiter
from coachflow.domain.ports.config import AppConfig
from coachflow.domain.ports.llm import ModelResponse, ModelUsage
from coachflow.domain.ports.rag import Document, RetrievalResult
from coachflow.main import app


@pytest.fixture
def fake_model():
    """Model backend that answers every prompt with a fixed completion."""
    model = MagicMock()
    model.call = AsyncMock(
        return_value=ModelResponse(
            content="Tell me about a time you led a team.",
            model="qwen2.5:7b",
            usage=ModelUsage(input_tokens=20, output_tokens=22, total_tokens=42),
        )
    )
    model.is_available = AsyncMock(return_value=True)
    return model


@pytest.fixture
def fake_retrieval():
    retrieval = MagicMock()
    retrieval.query = AsyncMock(
        return_value=RetrievalResult(
            documents=[Document(content="Use the STAR method", metadata={"topic": "behavioral"}, score=0.92)]
        )
    )
    return retrieval


@pytest.fixture
def container(fake_model, fake_retrieval):
    """Container on default config with the network-bound adapters replaced."""
    c = Container(AppConfig())
    c.model = fake_model
    c.retrieval = fake_retrieval
    set_container(c)
    limiter.reset()
    yield c
    reset_container()


@pytest.fixture
async def client(container):
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
