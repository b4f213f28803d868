"""
api/routes/users.py -- User management REST endpoints.

Routes (relative to BASE_API_URL, all require a Bearer access token):
  GET    /users            -- list users
  GET    /users/me         -- the caller
  GET    /users/{user_id}  -- one user
  POST   /users            -- create user
  PUT    /users/{user_id}  -- partial update
  DELETE /users/{user_id}  -- delete (not self, not referenced by tickets)

Route registration order matters: GET /users/me must be registered before
GET /users/{user_id} or FastAPI tries to parse "me" as an integer id and
answers with a validation error.

Handlers stay thin: UserService enforces the rules and raises domain errors;
api/main.py maps those to the error envelope.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_user_service
from api.models import MessageResponse, UserCreate, UserResponse, UserUpdate
from auth.dependencies import get_current_user
from auth.models import User
from users.service import UserService

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/users", response_model=list[UserResponse])
def list_users(user_service: UserService = Depends(get_user_service)) -> list[UserResponse]:
    return [UserResponse.from_user(u) for u in user_service.list_users()]


@router.get("/users/me", response_model=UserResponse)
def get_current(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Return the user the access token belongs to."""
    return UserResponse.from_user(user_service.get_current(current_user))


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, user_service: UserService = Depends(get_user_service)) -> UserResponse:
    return UserResponse.from_user(user_service.get_user(user_id))


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(body: UserCreate, user_service: UserService = Depends(get_user_service)) -> UserResponse:
    user = user_service.create_user(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        password=body.password,
        role_id=body.role_id,
    )
    return UserResponse.from_user(user)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdate,
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Partial update. Only fields present in the body are changed."""
    user = user_service.update_user(user_id, **body.model_dump(exclude_none=True))
    return UserResponse.from_user(user)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    user_service.delete_user(user_id, current_user)
    return MessageResponse(message="User deleted.")
