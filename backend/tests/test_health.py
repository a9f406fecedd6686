"""
Tests for health check endpoints.
"""


class TestHealthEndpoints:
    """Test health check API endpoints."""

    def test_health_check(self, client):
        """Basic health check should return healthy status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "rest-api"

    def test_detailed_health_check(self, client):
        """Detailed check covers the database and the WebSocket gateway."""
        response = client.get("/api/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["dependencies"]["database"]["status"] == "healthy"
        assert data["dependencies"]["websocket"]["totalConnections"] == 0

    def test_security_headers_on_api(self, client):
        response = client.get("/api/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Request-ID" in response.headers
