"""
Tests for middleware and infrastructure components.
"""

import pytest
from unittest.mock import MagicMock, patch
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rest_api.core.cors import configure_cors, get_cors_origins
from rest_api.core.middlewares import (
    SecurityHeadersMiddleware,
    ContentTypeValidationMiddleware,
    register_middlewares,
)
from shared.infrastructure.correlation import (
    CorrelationIdMiddleware,
    CorrelationIdFilter,
    get_request_id,
    request_id_var,
)
from shared.infrastructure.db import transaction


# =============================================================================
# SecurityHeadersMiddleware Tests
# =============================================================================

class TestSecurityHeadersMiddleware:
    """Tests for security headers middleware."""

    @pytest.fixture
    def app_with_security_headers(self):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware)

        @app.get("/test")
        def test_endpoint():
            return {"message": "ok"}

        return app

    def test_adds_basic_headers(self, app_with_security_headers):
        """Should add nosniff, frame and referrer headers."""
        client = TestClient(app_with_security_headers)
        response = client.get("/test")

        assert response.headers.get("X-Content-Type-Options") == "nosniff"
        assert response.headers.get("X-Frame-Options") == "DENY"
        assert response.headers.get("Referrer-Policy") == "strict-origin-when-cross-origin"

    def test_adds_content_security_policy(self, app_with_security_headers):
        client = TestClient(app_with_security_headers)
        response = client.get("/test")

        assert "default-src 'none'" in response.headers.get("Content-Security-Policy", "")

    def test_adds_hsts_in_production(self, app_with_security_headers):
        """Should add HSTS header only in production."""
        with patch("rest_api.core.middlewares.settings") as mock_settings:
            mock_settings.environment = "production"
            response = TestClient(app_with_security_headers).get("/test")

        assert "max-age=31536000" in response.headers.get("Strict-Transport-Security", "")

    def test_no_hsts_outside_production(self, app_with_security_headers):
        with patch("rest_api.core.middlewares.settings") as mock_settings:
            mock_settings.environment = "development"
            response = TestClient(app_with_security_headers).get("/test")

        assert "Strict-Transport-Security" not in response.headers


# =============================================================================
# ContentTypeValidationMiddleware Tests
# =============================================================================

class TestContentTypeValidationMiddleware:
    """Tests for content-type validation middleware."""

    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(ContentTypeValidationMiddleware)

        @app.post("/test")
        def post_endpoint():
            return {"message": "ok"}

        @app.get("/test")
        def get_endpoint():
            return {"message": "ok"}

        return TestClient(app)

    def test_allows_json_content_type(self, client):
        response = client.post("/test", json={"key": "value"})
        assert response.status_code == 200

    def test_allows_bodyless_post(self, client):
        """Toggles like POST /like carry no body and no content type."""
        response = client.post("/test")
        assert response.status_code == 200

    def test_rejects_form_data(self, client):
        response = client.post(
            "/test",
            data={"key": "value"},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        assert response.status_code == 415

    def test_rejects_unsupported_content_type(self, client):
        """Should reject unsupported content types with 415."""
        response = client.post(
            "/test",
            content="some data",
            headers={"Content-Type": "text/plain"},
        )

        assert response.status_code == 415
        assert "Unsupported Media Type" in response.json()["detail"]

    def test_allows_get_without_content_type(self, client):
        assert client.get("/test").status_code == 200


# =============================================================================
# CorrelationIdMiddleware Tests
# =============================================================================

class TestCorrelationIdMiddleware:
    """Tests for correlation ID middleware."""

    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(CorrelationIdMiddleware)

        @app.get("/test")
        def test_endpoint():
            return {"request_id": get_request_id()}

        return TestClient(app)

    def test_generates_request_id_when_not_provided(self, client):
        response = client.get("/test")

        request_id = response.headers.get("X-Request-ID")
        assert request_id is not None
        assert len(request_id) == 36  # UUID v4 length

    def test_uses_provided_request_id(self, client):
        custom_id = "my-custom-request-id-12345"
        response = client.get("/test", headers={"X-Request-ID": custom_id})

        assert response.headers.get("X-Request-ID") == custom_id


# =============================================================================
# CorrelationIdFilter Tests
# =============================================================================

class TestCorrelationIdFilter:
    """Tests for correlation ID logging filter."""

    def test_adds_request_id_to_log_record(self):
        filter_obj = CorrelationIdFilter()
        token = request_id_var.set("test-request-123")

        try:
            record = MagicMock()
            assert filter_obj.filter(record) is True
            assert record.request_id == "test-request-123"
        finally:
            request_id_var.reset(token)

    def test_uses_dash_when_no_request_id(self):
        filter_obj = CorrelationIdFilter()
        token = request_id_var.set("")

        try:
            record = MagicMock()
            assert filter_obj.filter(record) is True
            assert record.request_id == "-"
        finally:
            request_id_var.reset(token)


# =============================================================================
# transaction Tests
# =============================================================================

class TestTransaction:
    """Tests for the unit-of-work helper."""

    def test_commits_on_success(self):
        mock_db = MagicMock()

        with transaction(mock_db):
            mock_db.add("row")

        mock_db.commit.assert_called_once()
        mock_db.rollback.assert_not_called()

    def test_rolls_back_and_reraises(self):
        """A failure inside the block leaves no partial writes."""
        mock_db = MagicMock()

        class CustomDBError(Exception):
            pass

        with pytest.raises(CustomDBError):
            with transaction(mock_db):
                raise CustomDBError("boom")

        mock_db.rollback.assert_called_once()
        mock_db.commit.assert_not_called()

    def test_rolls_back_when_commit_fails(self):
        mock_db = MagicMock()
        mock_db.commit.side_effect = Exception("Database error")

        with pytest.raises(Exception, match="Database error"):
            with transaction(mock_db):
                pass

        mock_db.rollback.assert_called_once()


# =============================================================================
# register_middlewares Tests
# =============================================================================

class TestRegisterMiddlewares:

    def test_registers_all_middlewares(self):
        app = FastAPI()

        register_middlewares(app)

        middleware_classes = [m.cls for m in app.user_middleware]
        assert SecurityHeadersMiddleware in middleware_classes
        assert ContentTypeValidationMiddleware in middleware_classes


# =============================================================================
# CORS Tests
# =============================================================================

class TestCors:

    def test_dev_origins_by_default(self):
        with patch("rest_api.core.cors.settings") as mock_settings:
            mock_settings.allowed_origins = ""
            assert get_cors_origins() == ["http://localhost:3000", "http://localhost:5173"]

    def test_configured_origins(self):
        with patch("rest_api.core.cors.settings") as mock_settings:
            mock_settings.allowed_origins = "https://app.example.com/, https://admin.example.com,"
            assert get_cors_origins() == ["https://app.example.com", "https://admin.example.com"]

    def test_preflight_exposes_api_methods(self):
        app = FastAPI()
        configure_cors(app)

        @app.patch("/thing")
        def thing():
            return {}

        response = TestClient(app).options(
            "/thing",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "PATCH",
                "Access-Control-Request-Headers": "Authorization",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert "PATCH" in response.headers["access-control-allow-methods"]
