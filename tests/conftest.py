# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up test environment variables before any imports
# - Builds isolated apps per test (fresh context, fresh rate limiter)
# - Provides an echo route group that exposes what the pipeline parsed
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("SECURITY_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "")

import pytest
from fastapi import APIRouter, Request
from fastapi.testclient import TestClient

from app.config import Settings
from app.context import AppContext
from app.main import create_app


# =============================================================================
# Fixtures
# =============================================================================

def make_settings(**overrides) -> Settings:
    """Settings for tests; security is off unless a test turns it on."""
    values = {"ENVIRONMENT": "development", "SECURITY_ENABLED": False, "LOG_DIR": ""}
    values.update(overrides)
    return Settings(**values)


def make_echo_router() -> APIRouter:
    """Route group that returns what the pipeline attached to the request."""
    router = APIRouter()

    @router.api_route("/echo", methods=["GET", "POST", "PUT"])
    async def echo(request: Request):
        return {
            "body": request.state.body,
            "cookies": request.state.cookies,
            "signed_cookies": request.state.signed_cookies,
        }

    return router


@pytest.fixture
def settings():
    """Default test settings."""
    return make_settings()


@pytest.fixture
def context(settings):
    """Application context built from test settings."""
    return AppContext.initialize(settings)


@pytest.fixture
def app(settings):
    """Application with the default pipeline and route groups."""
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client for the default application."""
    return TestClient(app)


@pytest.fixture
def echo_client(settings):
    """Test client whose /api/users group is the echo router."""
    return TestClient(create_app(settings, users_router=make_echo_router()))
