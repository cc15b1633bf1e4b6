# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.API_PORT)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Every setting has a default, so the server starts with no .env at all.
# =============================================================================

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance, or passed
    explicitly to `create_app()`.
    """

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level for the application logger"
    )

    # Empty string means console only
    LOG_DIR: str = Field(
        default="",
        description="Directory for error.log and combined.log (empty disables file logs)"
    )

    # -------------------------------------------------------------------------
    # Request Parsing
    # -------------------------------------------------------------------------

    BODY_LIMIT_KB: int = Field(
        default=100,
        ge=1,
        le=10240,
        description="Maximum JSON / urlencoded request body size in KB"
    )

    URLENCODED_PARAMETER_LIMIT: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of parameters read from a urlencoded body"
    )

    COOKIE_SECRET: Optional[str] = Field(
        default=None,
        description="Secret used to verify signed cookies (s:<value>.<signature>)"
    )

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------

    # Comma-separated string that gets parsed; "*" allows every origin
    CORS_ORIGINS: str = Field(
        default="*",
        description="Allowed CORS origins (comma-separated, or *)"
    )

    # -------------------------------------------------------------------------
    # Application Security
    # -------------------------------------------------------------------------

    SECURITY_ENABLED: bool = Field(
        default=True,
        description="Enable bot blocking and rate limiting"
    )

    RATE_LIMIT_EXEMPT_PATHS: str = Field(
        default="/,/health,/api",
        description="Paths never rate limited (comma-separated, exact match)"
    )

    # Only enable behind a proxy that overwrites X-Forwarded-For
    TRUST_PROXY_HEADERS: bool = Field(
        default=False,
        description="Take the client IP from X-Forwarded-For instead of the socket peer"
    )

    RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=60,
        ge=1,
        description="Sliding window length for rate limiting"
    )

    RATE_LIMIT_GUEST: int = Field(
        default=5,
        ge=1,
        description="Requests per window for anonymous clients"
    )

    RATE_LIMIT_USER: int = Field(
        default=10,
        ge=1,
        description="Requests per window for authenticated users"
    )

    RATE_LIMIT_ADMIN: int = Field(
        default=20,
        ge=1,
        description="Requests per window for admins"
    )

    BLOCKED_USER_AGENTS: str = Field(
        default="",
        description="User-Agent substrings to reject (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Treat empty env vars as unset so defaults apply
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Handles comma-separated values and strips whitespace.
        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def rate_limit_exempt_paths(self) -> set[str]:
        """Paths the rate limiter skips."""
        return {path.strip() for path in self.RATE_LIMIT_EXEMPT_PATHS.split(",") if path.strip()}

    @property
    def blocked_user_agents_list(self) -> list[str]:
        """Lower-cased User-Agent substrings to reject."""
        return [ua.strip().lower() for ua in self.BLOCKED_USER_AGENTS.split(",") if ua.strip()]

    @property
    def body_limit_bytes(self) -> int:
        """
        Convert KB to bytes for body size validation.
        """
        return self.BODY_LIMIT_KB * 1024

    @property
    def rate_limits(self) -> dict[str, int]:
        """Requests allowed per window, keyed by role."""
        return {
            "guest": self.RATE_LIMIT_GUEST,
            "user": self.RATE_LIMIT_USER,
            "admin": self.RATE_LIMIT_ADMIN,
        }

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
