# =============================================================================
# tests/test_config.py - Settings and Context Tests
# =============================================================================

import logging

import pytest
from pydantic import ValidationError

from app.config import Settings
from app.context import PROCESS_STARTED, AppContext
from app.logging_config import configure_logging
from tests.conftest import make_settings


class TestSettings:
    """Tests for Settings defaults and computed properties."""

    def test_defaults(self):
        settings = make_settings()

        assert settings.API_PORT == 3000
        assert settings.CORS_ORIGINS == "*"
        assert Settings.model_fields["SECURITY_ENABLED"].default is True
        assert settings.TRUST_PROXY_HEADERS is False
        assert settings.body_limit_bytes == 100 * 1024
        assert settings.rate_limits == {"guest": 5, "user": 10, "admin": 20}

    def test_cors_origins_list(self):
        settings = make_settings(CORS_ORIGINS="http://localhost:3000, https://myapp.com,")

        assert settings.cors_origins_list == ["http://localhost:3000", "https://myapp.com"]

    def test_rate_limit_exempt_paths(self):
        assert make_settings().rate_limit_exempt_paths == {"/", "/health", "/api"}
        assert make_settings(RATE_LIMIT_EXEMPT_PATHS=" /health, ").rate_limit_exempt_paths == {"/health"}

    def test_blocked_user_agents_list(self):
        settings = make_settings(BLOCKED_USER_AGENTS="Curl, Wget ")

        assert settings.blocked_user_agents_list == ["curl", "wget"]

    def test_invalid_port(self):
        with pytest.raises(ValidationError):
            Settings(API_PORT=70000)

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_GUEST", "9")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings()

        assert settings.RATE_LIMIT_GUEST == 9
        assert settings.ENVIRONMENT == "production"


class TestContext:
    """Tests for AppContext and logging setup."""

    def test_uptime_non_decreasing(self, context):
        first = context.uptime()
        second = context.uptime()

        assert 0 <= first <= second

    def test_uptime_counts_from_process_start(self):
        """Contexts built later in the process report at least the same uptime."""
        first = AppContext.initialize(make_settings())
        second = AppContext.initialize(make_settings())

        assert first.started_monotonic == second.started_monotonic == PROCESS_STARTED
        assert second.uptime() >= first.uptime()

    def test_logger_name(self, context):
        assert context.logger.name == "acquisitions"

    def test_debug_lowers_level(self):
        context = AppContext.initialize(make_settings(DEBUG=True))

        assert context.logger.level == logging.DEBUG

    def test_file_logs(self, tmp_path):
        logger = configure_logging(make_settings(LOG_DIR=str(tmp_path)))

        logger.error("disk is full")
        logger.info("request served")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "disk is full" in (tmp_path / "error.log").read_text()
        assert "request served" not in (tmp_path / "error.log").read_text()
        assert "request served" in (tmp_path / "combined.log").read_text()

        configure_logging(make_settings())
