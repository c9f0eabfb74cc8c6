"""Integration tests for root, health and metrics endpoints."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_root(async_client: AsyncClient) -> None:
    response = await async_client.get("/")

    assert response.status_code == 200
    assert response.json()["service"] == "MSSP Client Manager"


@pytest.mark.asyncio
async def test_liveness(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_readiness(async_client: AsyncClient) -> None:
    """Test readiness reports the database as connected."""
    response = await async_client.get("/health/ready")

    assert response.status_code == 200
    assert response.json()["checks"] == {"database": "connected"}


@pytest.mark.asyncio
async def test_metrics_use_route_templates(async_client: AsyncClient) -> None:
    """Test request metrics are labelled by route template rather than raw path."""
    await async_client.get("/v1/clients/12345")

    response = await async_client.get("/metrics/")

    assert response.status_code == 200
    assert 'path="/v1/clients/{client_id}"' in response.text
    assert 'path="/v1/clients/12345"' not in response.text
