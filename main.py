#!/usr/bin/env python3
"""
TicketDesk admin CLI -- bootstrap roles and users, mint login tokens.

Usage:
  python main.py create-role admin
  python main.py create-user --email a@x.com --first-name Ana --last-name Diaz \\
      --password s3cret --role-id 1
  python main.py login-token a@x.com

The login token printed by login-token is what the frontend posts to
/login. Delivering it (e-mail link, chat message) is outside this tool.

Environment variables (see core/config.py):
  SECRET_KEY    Signing key shared with the API server. Tokens minted with a
                different key are rejected by the server.
  DATABASE_URL  SQLAlchemy URL of the user database.
"""

import argparse
import sys
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError

from api.models import UserCreate
from auth.models import Role
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.config import get_settings
from core.errors import AppError
from users.service import UserService


def _create_role(store: UserStore, args: argparse.Namespace) -> int:
    try:
        role_id = store.create_role(Role(name=args.name))
    except IntegrityError:
        print(f"  [!] Role '{args.name}' already exists.")
        return 1
    print(f"Created role '{args.name}' (id={role_id}).")
    return 0


def _create_user(store: UserStore, args: argparse.Namespace) -> int:
    try:
        body = UserCreate(
            email=args.email,
            first_name=args.first_name,
            last_name=args.last_name,
            password=args.password,
            role_id=args.role_id,
        )
    except PydanticValidationError as exc:
        for err in exc.errors():
            field = ".".join(str(p) for p in err["loc"])
            print(f"  [!] {field}: {err['msg']}")
        return 1

    user = UserService(store).create_user(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        password=body.password,
        role_id=body.role_id,
    )
    print(f"Created user {user.full_name} <{user.email}> (id={user.id}).")
    return 0


def _login_token(store: UserStore, args: argparse.Namespace) -> int:
    if store.get_by_email(args.email) is None:
        print(f"  [!] No user with email '{args.email}'.")
        return 1
    settings = get_settings()
    codec = TokenCodec(
        settings.secret_key,
        access_ttl=settings.access_token_expire_seconds,
        refresh_ttl=settings.refresh_token_expire_seconds,
        login_ttl=settings.login_token_expire_seconds,
    )
    print(codec.issue_login_token(args.email))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="ticketdesk",
        description="TicketDesk administration: roles, users and login tokens.",
    )
    parser.add_argument(
        "--database-url",
        metavar="URL",
        default=None,
        help="SQLAlchemy database URL (default: DATABASE_URL from the environment)",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    role_parser = subparsers.add_parser("create-role", help="Create a role")
    role_parser.add_argument("name", help="Role name, e.g. admin")
    role_parser.set_defaults(handler=_create_role)

    user_parser = subparsers.add_parser("create-user", help="Create a user")
    user_parser.add_argument("--email", required=True)
    user_parser.add_argument("--first-name", required=True)
    user_parser.add_argument("--last-name", required=True)
    user_parser.add_argument("--password", required=True)
    user_parser.add_argument("--role-id", type=int, required=True)
    user_parser.set_defaults(handler=_create_user)

    token_parser = subparsers.add_parser("login-token", help="Print a login token for an existing user")
    token_parser.add_argument("email")
    token_parser.set_defaults(handler=_login_token)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    store = UserStore(args.database_url or get_settings().database_url)
    try:
        return args.handler(store, args)
    except AppError as exc:
        print(f"  [!] {exc.message} {exc.data or ''}".rstrip())
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
