"""Tests for health check endpoints."""

import json

import pytest
from httpx import ASGITransport, AsyncClient

from sekaideck.main import app
from sekaideck.services.data_provider import JsonDataProvider, get_data_provider


@pytest.fixture
def data_dir(tmp_path):
    """A master data directory holding only the cards table."""
    (tmp_path / "cards.json").write_text(json.dumps([{"id": 1}]), encoding="utf-8")
    return tmp_path


async def _client_for(provider):
    app.dependency_overrides[get_data_provider] = lambda: provider
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
async def client(data_dir):
    """Provide an async test client over a populated data directory."""
    async with await _client_for(JsonDataProvider(data_dir)) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def empty_client(tmp_path):
    """Provide an async test client over an empty data directory."""
    async with await _client_for(JsonDataProvider(tmp_path / "missing")) as client:
        yield client
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        """Liveness probe returns healthy."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"

    async def test_health_no_data_check(self, empty_client: AsyncClient) -> None:
        """Health endpoint does not read master data."""
        response = await empty_client.get("/health")

        assert response.status_code == 200
        assert response.json()["master_data"] is None


class TestReadyEndpoint:
    async def test_ready_with_master_data(self, client: AsyncClient) -> None:
        """Readiness probe succeeds when the cards table is readable."""
        response = await client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["master_data"] == "available"

    async def test_not_ready_without_master_data(self, empty_client: AsyncClient) -> None:
        """Readiness probe returns 503 when master data is missing."""
        response = await empty_client.get("/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not ready"
        assert data["master_data"] == "unavailable"
