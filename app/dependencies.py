# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated, Any

from fastapi import Depends, Request

from app.context import AppContext, get_context


def get_parsed_body(request: Request) -> Any:
    """
    Body parsed by the request pipeline.

    Returns {} when the request had no JSON or urlencoded body.
    """
    return getattr(request.state, "body", {})


def get_cookies(request: Request) -> dict[str, Any]:
    """Cookies parsed by the request pipeline."""
    return getattr(request.state, "cookies", {})


# Type aliases for dependency injection
ContextDep = Annotated[AppContext, Depends(get_context)]
BodyDep = Annotated[Any, Depends(get_parsed_body)]
CookiesDep = Annotated[dict[str, Any], Depends(get_cookies)]
