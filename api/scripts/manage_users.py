"""Create accounts, issue API keys and change roles from the command line."""

from __future__ import annotations

import argparse
import asyncio
import sys

from church_social.config import USER_ROLES, settings
from church_social.database import AsyncSessionLocal, engine
from church_social.logging_config import configure_logging
from church_social.services.accounts import (
    AccountError,
    create_user,
    get_user_by_email,
    issue_api_key,
    set_role,
)


async def _create(args: argparse.Namespace) -> int:
    async with AsyncSessionLocal() as db:
        user = await create_user(
            db,
            email=args.email,
            first_name=args.first_name,
            last_name=args.last_name,
            role=args.role,
        )
        print(f"Created user {user.id} ({user.email}, {user.role})")
        if args.with_key:
            key = await issue_api_key(db, user.id, name="CLI")
            print(f"API key (shown once): {key}")
    return 0


async def _issue_key(args: argparse.Namespace) -> int:
    async with AsyncSessionLocal() as db:
        user = await get_user_by_email(db, args.email)
        if user is None:
            print(f"No user with email {args.email}", file=sys.stderr)
            return 1
        key = await issue_api_key(db, user.id, name=args.name)
        print(f"API key (shown once): {key}")
    return 0


async def _set_role(args: argparse.Namespace) -> int:
    async with AsyncSessionLocal() as db:
        user = await get_user_by_email(db, args.email)
        if user is None:
            print(f"No user with email {args.email}", file=sys.stderr)
            return 1
        await set_role(db, user, args.role)
        print(f"{user.email} is now {user.role}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage Church Social accounts")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Create a user")
    create.add_argument("email")
    create.add_argument("first_name")
    create.add_argument("last_name", nargs="?", default="")
    create.add_argument("--role", choices=USER_ROLES, default="member")
    create.add_argument(
        "--with-key",
        action="store_true",
        help="Also issue an API key and print it",
    )
    create.set_defaults(handler=_create)

    issue = subparsers.add_parser("issue-key", help="Issue an API key for a user")
    issue.add_argument("email")
    issue.add_argument("--name", default=None, help="Label shown in key listings")
    issue.set_defaults(handler=_issue_key)

    role = subparsers.add_parser("set-role", help="Change a user's role")
    role.add_argument("email")
    role.add_argument("role", choices=USER_ROLES)
    role.set_defaults(handler=_set_role)

    return parser


async def _run(args: argparse.Namespace) -> int:
    try:
        return await args.handler(args)
    except AccountError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        await engine.dispose()


def main() -> int:
    args = build_parser().parse_args()
    configure_logging(settings.log_level)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
