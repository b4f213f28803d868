"""Unit tests for auth/store.py -- UserStore queries.

Covers:
- users come back joined with their role
- email lookup is exact and case-sensitive; UNIQUE index on email
- update_user() changes only whitelisted fields and reports missing rows
- delete_user_unless_referenced() refuses users named on tickets
- roles are listed by name
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import Role, Ticket, User
from auth.store import UserStore


class TestUserQueries:
    def test_get_by_id_includes_role(self, store: UserStore, make_user, roles) -> None:
        user = make_user("ana@x.com", first_name="Ana", last_name="Diaz", role="admin")
        fetched = store.get_by_id(user.id)
        assert fetched.email == "ana@x.com"
        assert fetched.role == Role(id=roles["admin"], name="admin")
        assert fetched.created_at and fetched.updated_at

    def test_get_by_id_missing_returns_none(self, store: UserStore) -> None:
        assert store.get_by_id(404) is None

    def test_get_by_email_is_case_sensitive(self, store: UserStore, make_user) -> None:
        make_user("Ana@x.com")
        assert store.get_by_email("Ana@x.com") is not None
        assert store.get_by_email("ana@x.com") is None

    def test_duplicate_email_violates_unique_index(self, store: UserStore, make_user, roles) -> None:
        make_user("dup@x.com")
        with pytest.raises(IntegrityError):
            store.create_user(
                User(email="dup@x.com", first_name="B", last_name="C", role_id=roles["agent"], password="x")
            )

    def test_list_users_ordered_by_id(self, store: UserStore, make_user) -> None:
        ids = [make_user(f"u{i}@x.com").id for i in range(3)]
        assert [u.id for u in store.list_users()] == ids


class TestUpdateUser:
    def test_update_changes_fields(self, store: UserStore, make_user) -> None:
        user = make_user("old@x.com", first_name="Old")
        assert store.update_user(user.id, email="new@x.com", first_name="New") is True
        fetched = store.get_by_id(user.id)
        assert fetched.email == "new@x.com"
        assert fetched.first_name == "New"
        assert fetched.last_name == user.last_name

    def test_update_missing_user_returns_false(self, store: UserStore) -> None:
        assert store.update_user(404, first_name="Ghost") is False

    def test_update_rejects_unknown_field(self, store: UserStore, make_user) -> None:
        user = make_user("a@x.com")
        with pytest.raises(ValueError):
            store.update_user(user.id, id=99)


class TestDeleteUnlessReferenced:
    def test_unreferenced_user_is_deleted(self, store: UserStore, make_user) -> None:
        user = make_user("gone@x.com")
        assert store.delete_user_unless_referenced(user.id) == 0
        assert store.get_by_id(user.id) is None

    def test_assignee_is_kept(self, store: UserStore, make_user) -> None:
        user = make_user("assignee@x.com")
        store.create_ticket(Ticket(title="Printer on fire", assignee_id=user.id))
        assert store.delete_user_unless_referenced(user.id) == 1
        assert store.get_by_id(user.id) is not None

    def test_supervisor_is_kept(self, store: UserStore, make_user) -> None:
        boss = make_user("boss@x.com")
        worker = make_user("worker@x.com")
        store.create_ticket(Ticket(title="A", assignee_id=worker.id, supervisor_id=boss.id))
        store.create_ticket(Ticket(title="B", supervisor_id=boss.id))
        assert store.delete_user_unless_referenced(boss.id) == 2
        assert store.get_by_id(boss.id) is not None

    def test_foreign_key_blocks_ticket_for_missing_user(self, store: UserStore) -> None:
        with pytest.raises(IntegrityError):
            store.create_ticket(Ticket(title="Orphan", assignee_id=404))


class TestRoles:
    def test_list_roles_by_name(self, store: UserStore) -> None:
        store.create_role(Role(name="supervisor"))
        store.create_role(Role(name="agent"))
        assert [r.name for r in store.list_roles()] == ["agent", "supervisor"]

    def test_get_role(self, store: UserStore, roles) -> None:
        assert store.get_role(roles["agent"]).name == "agent"
        assert store.get_role(404) is None

    def test_ping(self, store: UserStore) -> None:
        assert store.ping() is True
