"""
api/routes/auth.py -- Session endpoints.

Routes (relative to BASE_API_URL):
  POST /login    -- exchange a login token for an access/refresh pair
  POST /refresh  -- exchange a refresh token for a new pair

Both are public: the token in the body is the credential. Logout has no
server side; the frontend discards its tokens.

Responses carry Cache-Control: no-store so intermediaries never keep a
token pair.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from api.dependencies import get_auth_service
from api.models import LoginRequest, RefreshRequest, SessionResponse
from auth.service import AuthService

router = APIRouter()


@router.post("/login", response_model=SessionResponse)
def login(
    body: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    """Authenticate with a login token.

    Fails with INVALID_TOKEN when the token does not verify and with
    UNAUTHORIZED when its email matches no user.
    """
    pair = auth_service.authenticate(body.token)
    response.headers["Cache-Control"] = "no-store"
    return SessionResponse(
        message="Login successful.",
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
    )


@router.post("/refresh", response_model=SessionResponse)
def refresh(
    body: RefreshRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    """Rotate a session. Any failure is INVALID_TOKEN."""
    pair = auth_service.refresh(body.refresh_token)
    response.headers["Cache-Control"] = "no-store"
    return SessionResponse(
        message="Session refreshed.",
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
    )
