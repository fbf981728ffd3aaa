"""Tests for the health check endpoint."""
from httpx import AsyncClient


async def test__health__reports_healthy_database(client: AsyncClient) -> None:
    """Test that a reachable database reports healthy."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "healthy"}
