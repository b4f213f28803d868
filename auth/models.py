"""
auth/models.py -- Domain dataclasses for identity entities.

Pattern: Data class (pure data container, almost zero logic). Stores build
these from rows; services and routes do the work.

Layer rule: no imports from api/, users/, or core/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Role:
    """Named permission grouping. A user references exactly one role."""

    name: str
    id: int | None = None


@dataclass
class User:
    """An identity that can log in and manage other users.

    email is unique and matched case-sensitively. password holds the bcrypt
    hash and must never reach a response body -- api/models.UserResponse has
    no field for it.

    role is filled in by the store when the row is read (users JOIN roles);
    it is None on instances that have not been persisted yet.
    """

    email: str
    first_name: str
    last_name: str
    role_id: int
    password: str = ""  # bcrypt hash
    id: int | None = None
    role: Role | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class Ticket:
    """A work item. Only its user references matter to this service:
    a user named as assignee or supervisor cannot be deleted.
    """

    title: str
    assignee_id: int | None = None
    supervisor_id: int | None = None
    id: int | None = None
    created_at: str | None = None
