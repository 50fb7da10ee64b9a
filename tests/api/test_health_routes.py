"""Tests for the health endpoints and request middleware."""


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert "uptime_seconds" in body["database"]

    async def test_root_health(self, client):
        response = await client.get("/health")
        assert response.json()["status"] == "healthy"

    async def test_request_id_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
        assert response.headers["X-Response-Time"].endswith("ms")

    async def test_request_id_generated(self, client):
        response = await client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8
