# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Acquisitions API.
# It assembles the request pipeline, exception handlers and routers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python scripts/start_server.py
# =============================================================================

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import PlainTextResponse

from app.auth import router as default_auth_router
from app.config import Settings, get_settings
from app.context import AppContext
from app.dependencies import ContextDep
from app.exceptions import (
    AcquisitionsException,
    acquisitions_exception_handler,
    internal_error_response,
)
from app.middleware import build_default_stages
from app.pipeline import RequestPipeline, Stage
from app.routers import health, users

logger = logging.getLogger(__name__)

ROOT_MESSAGE = "Hello from Acquisitions!"
API_MESSAGE = "Acquisitions API is running! "


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs startup and shutdown; the context itself is built in create_app().
    """
    context: AppContext = app.state.context
    context.logger.info(f"Starting Acquisitions API in {context.settings.ENVIRONMENT} mode")
    context.logger.info(f"CORS origins: {context.settings.cors_origins_list}")

    yield

    context.logger.info("Shutting down Acquisitions API")


def create_app(
    settings: Optional[Settings] = None,
    auth_router: Optional[APIRouter] = None,
    users_router: Optional[APIRouter] = None,
    stages: Optional[list[Stage]] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        auth_router: Route group mounted at /api/auth
        users_router: Route group mounted at /api/users
        stages: Pipeline stages (defaults to build_default_stages)

    Returns:
        FastAPI: The configured application
    """
    settings = settings or get_settings()
    context = AppContext.initialize(settings)

    app = FastAPI(
        title="Acquisitions API",
        description="Acquisitions service: auth and user route groups behind a fixed request pipeline.",
        version="1.0.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "Auth",
                "description": "Sign-up, sign-in and sign-out",
            },
            {
                "name": "Users",
                "description": "User management",
            },
            {
                "name": "Health",
                "description": "API health checks",
            },
        ],
    )
    app.state.context = context

    # =========================================================================
    # Request Pipeline
    # =========================================================================

    app.add_middleware(
        RequestPipeline,
        stages=stages if stages is not None else build_default_stages(context),
        context=context,
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(AcquisitionsException)
    async def handle_acquisitions_exception(request: Request, exc: AcquisitionsException):
        """Handle custom Acquisitions exceptions."""
        return await acquisitions_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def handle_general_exception(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception(f"Unexpected error: {exc}")
        return internal_error_response()

    # =========================================================================
    # Root Endpoints
    # =========================================================================

    @app.get("/", response_class=PlainTextResponse, tags=["Root"])
    async def root(context: ContextDep):
        """Greeting endpoint."""
        context.logger.info(ROOT_MESSAGE)
        return ROOT_MESSAGE

    @app.get("/api", tags=["Root"])
    async def api_status():
        """Confirms the API is up."""
        return {"message": API_MESSAGE}

    # =========================================================================
    # Routers
    # =========================================================================

    app.include_router(health.router, tags=["Health"])

    app.include_router(
        auth_router or default_auth_router,
        prefix="/api/auth",
        tags=["Auth"]
    )

    app.include_router(
        users_router or users.router,
        prefix="/api/users",
        tags=["Users"]
    )

    return app


app = create_app()
