"""
auth/store.py -- SQLAlchemy Core persistence layer for identity entities.

Pattern: Repository + Data Mapper. UserStore is the repository for users,
roles, and the ticket references that guard user deletion; _row_to_user
and _row_to_role are the mappers. Services never touch SQL.

Security:
  All queries use bound parameters. No f-strings in SQL.

Integrity:
  users.email carries a UNIQUE index. The user service still checks for an
  existing email before every write so it can answer with a structured
  validation error instead of an IntegrityError.

  tickets.assignee_id / tickets.supervisor_id are foreign keys to users.id.
  SQLite only enforces them with PRAGMA foreign_keys=ON, which is set on
  every new connection below. delete_user_unless_referenced() counts ticket
  references and then deletes. The pysqlite driver does not open a
  transaction before the count, so the foreign keys are what reject a delete
  that races a concurrent ticket assignment (IntegrityError).

Layer rule: no imports from api/ or users/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    func,
    or_,
    select,
    text,
)
from sqlalchemy.engine import Connection, Engine

from auth.models import Role, Ticket, User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_roles = Table(
    "roles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False, unique=True),
)

_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("password", Text, nullable=False),  # bcrypt hash
    Column("role_id", Integer, ForeignKey("roles.id"), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_tickets = Table(
    "tickets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("assignee_id", Integer, ForeignKey("users.id")),
    Column("supervisor_id", Integer, ForeignKey("users.id")),
    Column("created_at", String(32), nullable=False),
)

# Columns a caller may change through update_user(). Anything else is a
# programming error, not user input -- the API layer never forwards raw keys.
_USER_MUTABLE_FIELDS = frozenset({"email", "first_name", "last_name", "password", "role_id"})

# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journaling and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User, Role and Ticket entities.

    Usage:
        store = UserStore("sqlite:///ticketdesk.db")
        role_id = store.create_role(Role(name="admin"))
        user_id = store.create_user(User(email="a@x.com", first_name="Ana",
                                         last_name="Diaz", role_id=role_id,
                                         password=hash_password("secret")))
        user = store.get_by_email("a@x.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    def create_role(self, role: Role) -> int:
        """Insert a role and return its id. Raises IntegrityError on a duplicate name."""
        with self.engine.connect() as conn:
            result = conn.execute(_roles.insert().values(name=role.name))
            conn.commit()
            return result.inserted_primary_key[0]

    def get_role(self, role_id: int) -> Role | None:
        with self.engine.connect() as conn:
            row = conn.execute(_roles.select().where(_roles.c.id == role_id)).fetchone()
        return _row_to_role(row) if row is not None else None

    def list_roles(self) -> list[Role]:
        with self.engine.connect() as conn:
            rows = conn.execute(_roles.select().order_by(_roles.c.name)).fetchall()
        return [_row_to_role(r) for r in rows]

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists. The
        user service pre-checks, so this only fires on a concurrent insert.
        """
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    email=user.email,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    password=user.password,
                    role_id=user.role_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_select_users().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_select_users().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users ordered by id."""
        with self.engine.connect() as conn:
            rows = conn.execute(_select_users().order_by(_users.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]

    def update_user(self, user_id: int, **fields) -> bool:
        """Update mutable fields on an existing user.

        Accepted fields: email, first_name, last_name, password, role_id.
        updated_at is stamped on every call.

        Returns True if a row was updated, False if user_id was not found.
        """
        unknown = set(fields) - _USER_MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {unknown!r}")
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update().where(_users.c.id == user_id).values(updated_at=_now_iso(), **fields)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_user_unless_referenced(self, user_id: int) -> int:
        """Delete a user only if no ticket names them as assignee or supervisor.

        Returns the number of referencing tickets. Zero means the row was
        deleted (or did not exist); anything else means nothing was touched.
        Raises IntegrityError if a ticket referencing the user lands between
        the count and the delete.
        """
        with self.engine.begin() as conn:
            references = _count_ticket_references(conn, user_id)
            if references:
                return references
            conn.execute(_users.delete().where(_users.c.id == user_id))
        return 0

    # ------------------------------------------------------------------
    # Tickets
    # ------------------------------------------------------------------

    def create_ticket(self, ticket: Ticket) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(
                _tickets.insert().values(
                    title=ticket.title,
                    assignee_id=ticket.assignee_id,
                    supervisor_id=ticket.supervisor_id,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Query helpers
# ---------------------------------------------------------------------------


def _select_users():
    """users LEFT JOIN roles, with the role name exposed as role_name."""
    return select(_users, _roles.c.name.label("role_name")).select_from(
        _users.outerjoin(_roles, _users.c.role_id == _roles.c.id)
    )


def _count_ticket_references(conn: Connection, user_id: int) -> int:
    result = conn.execute(
        select(func.count())
        .select_from(_tickets)
        .where(or_(_tickets.c.assignee_id == user_id, _tickets.c.supervisor_id == user_id))
    ).scalar()
    return result or 0


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_role(row) -> Role:
    return Role(id=row.id, name=row.name)


def _row_to_user(row) -> User:
    role = Role(id=row.role_id, name=row.role_name) if row.role_name is not None else None
    return User(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        password=row.password,
        role_id=row.role_id,
        role=role,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
