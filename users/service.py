"""
users/service.py -- CRUD over users with uniqueness and referential checks.

Rules enforced here (not in the store):
  - the target user must exist for get/update/delete (EntityNotFoundError)
  - the referenced role must exist for create/update (EntityNotFoundError)
  - email must not belong to a different user, re-checked right before the
    write (ValidationError); a write that loses a race to the UNIQUE index
    on users.email is reported the same way
  - a caller cannot delete their own account (ValidationError, checked
    before the store is touched)
  - a user named on any ticket as assignee or supervisor cannot be deleted
    (ValidationError); a ticket assigned between the count and the delete
    trips the foreign key and is reported the same way

Input shape is validated by the Pydantic request models in api/models.py
before any of these methods run.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.store import UserStore
from auth.tokens import hash_password
from core.errors import EntityNotFoundError, ValidationError

logger = logging.getLogger("ticketdesk.users")


class UserService:
    def __init__(self, store: UserStore) -> None:
        self._store = store

    def list_users(self) -> list[User]:
        return self._store.list_users()

    def get_user(self, user_id: int) -> User:
        return self._require_user(user_id)

    def get_current(self, current_user: User) -> User:
        """Return the caller resolved by the authorization dependency."""
        return current_user

    def create_user(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        role_id: int,
    ) -> User:
        self._require_role(role_id)
        self._require_unused_email(email)

        try:
            user_id = self._store.create_user(
                User(
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                    password=hash_password(password),
                    role_id=role_id,
                )
            )
        except IntegrityError:
            raise ValidationError("Email address is already in use.", {"email": email}) from None
        logger.info("Created user %s", user_id)
        return self._require_user(user_id)

    def update_user(self, user_id: int, **fields) -> User:
        """Apply a partial update.

        Accepted keyword fields: email, first_name, last_name, password,
        role_id. Omitted fields are left unchanged. A plaintext password is
        hashed before it is stored.
        """
        self._require_user(user_id)
        if fields.get("role_id") is not None:
            self._require_role(fields["role_id"])
        if fields.get("email") is not None:
            self._require_unused_email(fields["email"], user_id)

        updates = {k: v for k, v in fields.items() if v is not None}
        if "password" in updates:
            updates["password"] = hash_password(updates["password"])

        try:
            self._store.update_user(user_id, **updates)
        except IntegrityError:
            raise ValidationError("Email address is already in use.", {"email": updates.get("email")}) from None
        logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(updates)) or "no fields")
        return self._require_user(user_id)

    def delete_user(self, user_id: int, current_user: User) -> None:
        if user_id == current_user.id:
            raise ValidationError("The current account cannot be deleted.")
        self._require_user(user_id)

        try:
            references = self._store.delete_user_unless_referenced(user_id)
        except IntegrityError:
            raise ValidationError("The user has associated tickets.", {"id": user_id}) from None
        if references:
            raise ValidationError("The user has associated tickets.", {"id": user_id, "tickets": references})
        logger.info("Deleted user %s", user_id)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _require_user(self, user_id: int) -> User:
        user = self._store.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User", {"id": user_id})
        return user

    def _require_role(self, role_id: int) -> None:
        if self._store.get_role(role_id) is None:
            raise EntityNotFoundError("Role", {"id": role_id})

    def _require_unused_email(self, email: str, user_id: int | None = None) -> None:
        existing = self._store.get_by_email(email)
        if existing is None:
            return
        if user_id is not None and existing.id == user_id:
            return
        raise ValidationError("Email address is already in use.", {"email": email})
