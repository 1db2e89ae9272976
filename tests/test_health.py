"""Health endpoint integration test."""

import pytest


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint returns status and model backend availability."""
    resp = await client.get("/health")

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["service"] == "coachflow"
    assert data["cache_backend"] == "memory"
    assert data["llm_available"] is True


@pytest.mark.asyncio
async def test_health_reports_unavailable_model(client, fake_model):
    fake_model.is_available.return_value = False

    resp = await client.get("/health")

    assert resp.json()["llm_available"] is False
