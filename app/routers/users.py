# =============================================================================
# app/routers/users.py - Users Routes
# =============================================================================
# Placeholder user endpoints mounted at /api/users.
#
# User storage is not part of this service; each endpoint answers with the
# route it matched so clients can integrate against the final URL layout.
# =============================================================================

from fastapi import APIRouter, Request

router = APIRouter()


def _placeholder(request: Request) -> dict:
    return {"message": f"{request.method} {request.url.path} response"}


@router.get("")
async def list_users(request: Request) -> dict:
    """List users."""
    return _placeholder(request)


@router.get("/{user_id}")
async def get_user(user_id: int, request: Request) -> dict:
    """Get a user by id."""
    return _placeholder(request)


@router.put("/{user_id}")
async def update_user(user_id: int, request: Request) -> dict:
    """
    Update a user by id.

    The parsed body is available on request.state.body.
    """
    return _placeholder(request)


@router.delete("/{user_id}")
async def delete_user(user_id: int, request: Request) -> dict:
    """Delete a user by id."""
    return _placeholder(request)
