# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Route group mounted at /api/auth.
#
# Usage:
#   from app.auth import router as auth_router
#   app.include_router(auth_router, prefix="/api/auth")
# =============================================================================

from app.auth.routes import router

__all__ = [
    "router",
]
