"""
Integration tests for health, metrics and transport-level behavior.
"""

API = "/api/v1"


class TestServiceAPI:
    """Integration tests for non-domain endpoints."""

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "ok"
        assert body["data"]["api"] == "1"
        assert body["data"]["components"] == {"database": "healthy"}

    async def test_health_degraded_without_database(self, client, database):
        await database.disconnect()

        response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["data"]["components"]["database"] == "unhealthy"

    async def test_metrics_exposed(self, client):
        await client.get("/health")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "glaneur_http_requests_total" in response.text

    async def test_unknown_route(self, client):
        response = await client.get(f"{API}/nope")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND"

    async def test_generated_request_id(self, client):
        response = await client.get("/health")

        request_id = response.headers["X-Request-ID"]
        assert request_id
        assert response.json()["requestId"] == request_id

    async def test_oversized_request_id_replaced(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "x" * 500})

        assert response.headers["X-Request-ID"] != "x" * 500
