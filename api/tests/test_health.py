"""
Health check endpoint tests.

Validates basic test infrastructure and the error envelope middleware.
"""

from httpx import AsyncClient


class TestHealthCheck:
    """Tests for GET /api/v1/health."""

    async def test_health_returns_200(self, async_client: AsyncClient):
        """Health check endpoint returns 200 OK."""
        response = await async_client.get("/api/v1/health")
        assert response.status_code == 200

    async def test_health_returns_healthy_status(self, async_client: AsyncClient):
        """Health check returns status: healthy."""
        response = await async_client.get("/api/v1/health")
        data = response.json()
        assert data["status"] == "healthy"
        assert isinstance(data["connections"], int)

    async def test_response_carries_request_id(self, async_client: AsyncClient):
        """Every response has an X-Request-ID header."""
        response = await async_client.get("/api/v1/health")
        assert response.headers.get("X-Request-ID")


class TestErrorEnvelope:
    """Errors use the {"error": {"code", "message"}} shape."""

    async def test_missing_api_key_returns_401(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/users/me")
        assert response.status_code == 401
        assert response.json()["detail"]["error"]["code"] == "UNAUTHORIZED"

    async def test_malformed_api_key_returns_401(self, async_client: AsyncClient):
        response = await async_client.get(
            "/api/v1/users/me", headers={"X-API-Key": "not-a-key"}
        )
        assert response.status_code == 401

    async def test_validation_error_returns_422(
        self, async_client: AsyncClient, test_user: dict, auth_headers
    ):
        """Invalid bodies are reported as VALIDATION_ERROR."""
        response = await async_client.post(
            "/api/v1/posts",
            json={"content": "   "},
            headers=auth_headers(test_user["api_key"]),
        )
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert "request_id" in error
