"""Health check endpoints tests."""

import pytest
from fastapi import status
from httpx import AsyncClient
from unittest.mock import patch

from src.modules.health.service import HealthCheckResult


@pytest.mark.asyncio
async def test_health_check_comprehensive(public_client: AsyncClient, test_api_key):
    """Health check reports database and key table status."""
    response = await public_client.get("/health/")

    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["status"] == "healthy"
    assert data["services"]["database"]["connected"] is True
    assert data["services"]["api_keys"]["details"] == {"active_keys": 1}
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_health_check_database_unhealthy(public_client: AsyncClient):
    """Test health check when database is unhealthy."""
    unhealthy = HealthCheckResult(
        service="database",
        status="unhealthy",
        connected=False,
        details={},
        error="OperationalError",
    )
    with patch(
        "src.modules.health.service.HealthService.check_database_health",
        return_value=unhealthy,
    ):
        response = await public_client.get("/health/")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["services"]["database"]["error"] == "OperationalError"


@pytest.mark.asyncio
async def test_liveness_check(public_client: AsyncClient):
    """Test liveness endpoint."""
    response = await public_client.get("/health/liveness")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "alive", "service": "keygate-api"}


@pytest.mark.asyncio
async def test_responses_carry_version_and_request_id(public_client: AsyncClient):
    response = await public_client.get("/v1/auth/session")

    assert response.headers["X-KeyGate-Version"]
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(public_client: AsyncClient):
    response = await public_client.get("/v1/nothing-here")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message_code"] == "NOT_FOUND"
