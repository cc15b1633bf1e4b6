# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Placeholder authentication endpoints mounted at /api/auth.
#
# Note: Credential checks and token issuing are not handled here.
# These routes fix the URL layout; sign-out clears the session cookie.
# =============================================================================

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.dependencies import BodyDep, CookiesDep

logger = logging.getLogger(__name__)

router = APIRouter()

TOKEN_COOKIE = "token"


def _placeholder(request: Request) -> dict:
    return {"message": f"{request.method} {request.url.path} response"}


@router.post("/sign-up")
async def sign_up(request: Request, body: BodyDep) -> dict:
    """
    Register a new account.

    The body may be JSON or a urlencoded form; both arrive already parsed.
    """
    if isinstance(body, dict):
        logger.debug(f"Sign-up request with fields: {sorted(body)}")
    return _placeholder(request)


@router.post("/sign-in")
async def sign_in(request: Request) -> dict:
    """Sign in with existing credentials."""
    return _placeholder(request)


@router.post("/sign-out")
async def sign_out(request: Request, cookies: CookiesDep) -> JSONResponse:
    """
    Sign out the current client.

    Clears the token cookie whether or not one was sent.
    """
    if TOKEN_COOKIE in cookies:
        logger.info("Clearing session cookie on sign-out")

    response = JSONResponse(content=_placeholder(request))
    response.delete_cookie(TOKEN_COOKIE)
    return response
