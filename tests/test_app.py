# =============================================================================
# tests/test_app.py - Endpoint Tests
# =============================================================================
# Tests for the root, health and API status endpoints and the mounted
# route groups.
# =============================================================================

import logging
from datetime import datetime

from fastapi import APIRouter
from fastapi.testclient import TestClient

from app.main import create_app
from tests.conftest import make_settings


# =============================================================================
# Root Endpoint Tests
# =============================================================================

class TestRootEndpoint:
    """Tests for GET /."""

    def test_returns_greeting(self, client):
        """Root returns the literal greeting text."""
        response = client.get("/")

        assert response.status_code == 200
        assert response.text == "Hello from Acquisitions!"
        assert response.headers["content-type"].startswith("text/plain")

    def test_logs_greeting(self, client, caplog):
        """Root logs the greeting through the application logger."""
        caplog.set_level(logging.INFO, logger="acquisitions")

        client.get("/")

        messages = [r.getMessage() for r in caplog.records if r.name == "acquisitions"]
        assert "Hello from Acquisitions!" in messages


# =============================================================================
# Health Endpoint Tests
# =============================================================================

class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_ok(self, client):
        """Health returns OK with timestamp and uptime."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "OK"
        assert set(data) == {"status", "timestamp", "uptime"}

    def test_timestamp_is_iso8601(self, client):
        """Timestamp is UTC ISO-8601 with milliseconds and a Z suffix."""
        timestamp = client.get("/health").json()["timestamp"]

        assert timestamp.endswith("Z")
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        assert parsed.utcoffset().total_seconds() == 0
        assert len(timestamp.split(".")[1]) == 4  # "123Z"

    def test_uptime_non_negative_and_non_decreasing(self, client):
        """Sequential calls report independent, non-decreasing uptimes."""
        first = client.get("/health").json()
        second = client.get("/health").json()

        assert isinstance(first["uptime"], float)
        assert first["uptime"] >= 0
        assert second["uptime"] >= first["uptime"]


# =============================================================================
# API Status Endpoint Tests
# =============================================================================

class TestApiEndpoint:
    """Tests for GET /api."""

    def test_exact_body(self, client):
        """Body matches exactly, including the trailing space."""
        response = client.get("/api")

        assert response.status_code == 200
        assert response.text == '{"message":"Acquisitions API is running! "}'


# =============================================================================
# Route Group Tests
# =============================================================================

class TestRouteGroups:
    """Tests for the /api/auth and /api/users groups."""

    def test_auth_sign_up(self, client):
        """Auth group is mounted under /api/auth."""
        response = client.post("/api/auth/sign-up", json={"email": "ann@example.com"})

        assert response.status_code == 200
        assert response.json() == {"message": "POST /api/auth/sign-up response"}

    def test_auth_sign_in(self, client):
        response = client.post("/api/auth/sign-in")

        assert response.status_code == 200
        assert response.json()["message"] == "POST /api/auth/sign-in response"

    def test_auth_sign_out_clears_token(self, client):
        """Sign-out expires the token cookie."""
        response = client.post("/api/auth/sign-out", headers={"Cookie": "token=abc"})

        assert response.status_code == 200
        assert "token=" in response.headers["set-cookie"]
        assert "Max-Age=0" in response.headers["set-cookie"]

    def test_users_list(self, client):
        """Users group answers on the bare prefix."""
        response = client.get("/api/users")

        assert response.status_code == 200
        assert response.json() == {"message": "GET /api/users response"}

    def test_users_by_id(self, client):
        for method in ("get", "put", "delete"):
            response = client.request(method.upper(), "/api/users/7")
            assert response.status_code == 200
            assert response.json() == {"message": f"{method.upper()} /api/users/7 response"}

    def test_users_invalid_id(self, client):
        """Non-numeric ids fail validation."""
        response = client.get("/api/users/abc")

        assert response.status_code == 422

    def test_unknown_path(self, client):
        response = client.get("/api/unknown")

        assert response.status_code == 404

    def test_injected_routers(self):
        """Route groups can be replaced when building the app."""
        auth = APIRouter()

        @auth.get("/whoami")
        async def whoami():
            return {"user": None}

        client = TestClient(create_app(make_settings(), auth_router=auth))

        assert client.get("/api/auth/whoami").json() == {"user": None}
        assert client.post("/api/auth/sign-up").status_code == 404
