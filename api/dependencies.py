"""
api/dependencies.py -- FastAPI Depends() accessors for app-scoped services.

The services are built once in api/main.lifespan and stored on app.state.
These accessors hand them to route handlers so no route reaches for a module
global, and tests can swap the collaborators by patching the lifespan.
"""

from __future__ import annotations

from fastapi import Request

from auth.service import AuthService
from auth.store import UserStore
from users.service import UserService


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service
