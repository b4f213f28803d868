"""
auth/dependencies.py -- FastAPI Depends() helper for request authorization.

get_current_user() is the per-request gate: it reads the
"Authorization: Bearer <token>" header, verifies the token as an access
token, loads the user it names, and stores that user on
request.state.current_user for downstream handlers.

Nothing is cached between requests. Every call verifies the signature and
expiry and re-reads the user, so a deleted user is locked out on their next
request.

Layer rule: no imports from api/ or users/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import User
from auth.service import AuthService
from core.errors import UnauthorizedError

_BEARER_PREFIX = "Bearer "


def get_bearer_token(request: Request) -> str | None:
    """Return the token from the Authorization header, or None if absent."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith(_BEARER_PREFIX):
        return None
    token = auth_header[len(_BEARER_PREFIX) :].strip()
    return token or None


def get_current_user(request: Request) -> User:
    """Require a valid access token. Raises UnauthorizedError otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: User = Depends(get_current_user)): ...
    """
    token = get_bearer_token(request)
    if token is None:
        raise UnauthorizedError()

    auth_service: AuthService = request.app.state.auth_service
    user = auth_service.resolve_access_token(token)
    request.state.current_user = user
    return user
