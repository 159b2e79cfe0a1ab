"""Unit tests for health endpoints."""

import pytest


@pytest.mark.asyncio
async def test_health_check(test_client):
    """Test the health check endpoint."""
    response = await test_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "tour-content-api"
    assert "version" in data


@pytest.mark.asyncio
async def test_ready_reports_injected_handles(test_client):
    """Readiness lists the service handles the app was built with."""
    response = await test_client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {
        "database": "ok",
        "object_storage": "InMemoryObjectStorage",
        "mailer": "RecordingMailer",
        "token_signer": "TokenSigner",
    }


@pytest.mark.asyncio
async def test_info_endpoint(test_client):
    """Test the service info endpoint."""
    response = await test_client.get("/info")
    assert response.status_code == 200
    data = response.json()
    assert data["endpoints"]["save_tour"] == "/api/saveTour"
    assert data["features"]["upload_max_files"] == 10


@pytest.mark.asyncio
async def test_unknown_route_uses_error_shape(test_client):
    response = await test_client.get("/api/doesNotExist")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


@pytest.mark.asyncio
async def test_ready_reports_unavailable_database(monkeypatch, test_client):
    async def database_down():
        return False

    monkeypatch.setattr("tourdesk.main.ping_db", database_down)

    response = await test_client.get("/ready")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "not_ready"
    assert data["checks"]["database"] == "unavailable"
