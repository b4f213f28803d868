"""
API request and response models for TicketDesk REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

The frontend speaks camelCase JSON. Every model here uses a camelCase alias
generator; FastAPI serializes response models by alias, and populate_by_name
lets Python code construct them with snake_case keyword arguments.

Separation of concerns: auth/ models = domain truth; api/ models = API contract.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.models import Role, User

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# bcrypt ignores everything past 72 bytes.
_PASSWORD_MAX = 72


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class LoginRequest(_RequestModel):
    """Request body for POST /login. token is a login token (email claim)."""

    token: str = Field(min_length=1)


class RefreshRequest(_RequestModel):
    """Request body for POST /refresh."""

    refresh_token: str = Field(min_length=1)


class SessionResponse(_ApiModel):
    """Response for POST /login and POST /refresh."""

    model_config = ConfigDict(frozen=True)

    message: str
    access_token: str
    refresh_token: str


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------


class RoleResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str

    @classmethod
    def from_role(cls, role: Role) -> "RoleResponse":
        return cls(id=role.id, name=role.name)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserCreate(_RequestModel):
    """Request body for POST /users."""

    email: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=6, max_length=_PASSWORD_MAX)
    role_id: int = Field(gt=0)


class UserUpdate(_RequestModel):
    """Request body for PUT /users/{user_id}. Every field is optional."""

    email: Optional[str] = Field(default=None, min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    password: Optional[str] = Field(default=None, min_length=6, max_length=_PASSWORD_MAX)
    role_id: Optional[int] = Field(default=None, gt=0)


class UserResponse(_ApiModel):
    """A user as the API exposes it.

    Carries no password field. full_name is derived, never stored.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    role_id: int
    role: Optional[RoleResponse] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            role_id=user.role_id,
            role=RoleResponse.from_role(user.role) if user.role is not None else None,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class MessageResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    status: int
    data: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
