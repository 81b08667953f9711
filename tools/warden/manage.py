#!/usr/bin/env python3
"""CLI management tool for the warden record store.

Provides commands to:
- Add, update and remove user records
- List all stored records
- Check a credential pair the same way the login flow does
- Create the default record on a fresh store
"""

import argparse
import asyncio
import dataclasses
import getpass
import logging
import sys
from typing import Optional

from warden.config import load_config
from warden.context import AppContext
from warden.errors import ConfigError, DuplicateKey, NotFound, StorageFailure, ValidationError
from warden.handle import process_handle
from warden.schema import UserRecord

logger = logging.getLogger("warden.manage")


def _read_password(args, prompt: str) -> Optional[str]:
    if args.password:
        return args.password
    password = getpass.getpass(prompt)
    if not password:
        print("Error: Password cannot be empty", file=sys.stderr)
        return None
    return password


def add_user(args, ctx: AppContext) -> int:
    """Add a new record with optional password prompt."""
    password = _read_password(args, f"Password for {args.login_id}: ")
    if password is None:
        return 1

    record = UserRecord(
        login_id=args.login_id,
        secret=password,
        full_name=args.full_name,
        contact=args.contact,
    )
    try:
        ctx.runner.submit(ctx.store.insert, record).result()
    except DuplicateKey:
        print(f"Error: Login ID '{args.login_id}' already exists", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"✓ User created: {args.login_id}")
    return 0


def update_user(args, ctx: AppContext) -> int:
    """Replace fields of an existing record; omitted fields are kept."""
    current = ctx.runner.submit(ctx.store.get_by_login_id, args.login_id).result()
    if current is None:
        print(f"Error: User '{args.login_id}' not found", file=sys.stderr)
        return 1

    updated = dataclasses.replace(
        current,
        secret=args.password if args.password is not None else current.secret,
        full_name=args.full_name if args.full_name is not None else current.full_name,
        contact=args.contact if args.contact is not None else current.contact,
    )
    try:
        ctx.runner.submit(ctx.store.update, updated).result()
    except NotFound:
        print(f"Error: User '{args.login_id}' was removed concurrently", file=sys.stderr)
        return 1

    print(f"✓ Updated user {args.login_id}")
    return 0


def list_users(args, ctx: AppContext) -> int:
    """List all records without their secrets."""
    records = ctx.runner.submit(ctx.store.get_all).result()

    if not records:
        print("No users found")
        return 0

    print(f"{'Login ID':<20} {'Full name':<25} {'Contact':<30}")
    print("-" * 75)

    for record in sorted(records, key=lambda r: r.login_id):
        print(f"{record.login_id:<20} {record.full_name or '-':<25} {record.contact or '-':<30}")

    return 0


def remove_user(args, ctx: AppContext) -> int:
    """Remove a record by login ID."""
    try:
        ctx.runner.submit(ctx.store.delete, args.login_id).result()
    except NotFound:
        print(f"Error: User '{args.login_id}' not found", file=sys.stderr)
        return 1

    print(f"✓ Removed user {args.login_id}")
    return 0


def login(args, ctx: AppContext) -> int:
    """Run the authentication flow for one credential pair."""
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    result = asyncio.run(ctx.auth.authenticate(args.login_id, password))

    if result.accepted:
        print(f"✓ Accepted: {args.login_id.strip()}")
        if result.token:
            print(result.token)
        return 0
    if result.retryable:
        print("Error: Login is temporarily unavailable, try again", file=sys.stderr)
    else:
        print("Error: Invalid login credentials", file=sys.stderr)
    return 1


def seed(args, ctx: AppContext) -> int:
    """Create the default record if it is missing."""
    if not ctx.config.seed.enabled:
        print("Seeding disabled by config (seed.enabled=false)")
        return 0
    created = ctx.startup().result()
    login_id = ctx.config.seed.login_id
    if created:
        print(f"✓ Seeded default user {login_id}")
    else:
        print(f"Default user {login_id} already present")
    return 0


COMMANDS = {
    "add-user": add_user,
    "update-user": update_user,
    "list-users": list_users,
    "remove-user": remove_user,
    "login": login,
    "seed": seed,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="warden",
        description="Manage warden user records and check credentials",
    )
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to config.json (default: .warden/config.json)",
    )
    parser.add_argument(
        "--db-path",
        default=None,
        help="Path to SQLite database (overrides the config)",
    )
    parser.add_argument(
        "--log-level",
        "-l",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    add_parser = subparsers.add_parser("add-user", help="Add a new user")
    add_parser.add_argument("--login-id", required=True, help="Login ID")
    add_parser.add_argument("--password", help="Password (prompted if omitted)")
    add_parser.add_argument("--full-name", help="Full name")
    add_parser.add_argument("--contact", help="Contact (e.g. email)")

    update_parser = subparsers.add_parser("update-user", help="Update an existing user")
    update_parser.add_argument("--login-id", required=True, help="Login ID")
    update_parser.add_argument("--password", help="New password")
    update_parser.add_argument("--full-name", help="New full name")
    update_parser.add_argument("--contact", help="New contact")

    subparsers.add_parser("list-users", help="List all users")

    remove_parser = subparsers.add_parser("remove-user", help="Remove a user")
    remove_parser.add_argument("--login-id", required=True, help="Login ID")

    login_parser = subparsers.add_parser("login", help="Check a login ID and password")
    login_parser.add_argument("--login-id", required=True, help="Login ID")
    login_parser.add_argument("--password", help="Password (prompted if omitted)")

    subparsers.add_parser("seed", help="Create the default user if missing")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if args.db_path:
        config = dataclasses.replace(config, db_path_override=args.db_path)

    try:
        ctx = AppContext.create(config=config)
    except StorageFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        return COMMANDS[args.command](args, ctx)
    except StorageFailure as e:
        logger.error(f"Storage failure during {args.command}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        ctx.close()
        process_handle().close()


if __name__ == "__main__":
    sys.exit(main())
