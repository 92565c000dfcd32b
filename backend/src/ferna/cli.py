"""Operator command line for credential maintenance.

Usage:
    ferna-credential hash                 # prompt for a password, print its encoding
    ferna-credential inspect '<encoded>'  # show version and cost parameters
    ferna-credential verify '<encoded>'   # prompt for a password, report match
    ferna-credential create-user EMAIL    # create a local account in the database
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from getpass import getpass
from typing import Optional, Sequence

from ferna.core.auth.credentials import CredentialHasher, decode_credential, get_hasher
from ferna.core.auth.exceptions import CredentialError, MalformedCredentialError
from ferna.core.auth.login import normalize_identifier


def _read_password(confirm: bool = False) -> str:
    if not sys.stdin.isatty():
        return sys.stdin.readline().rstrip("\n")
    password = getpass("Password: ")
    if confirm and getpass("Repeat password: ") != password:
        raise SystemExit("Passwords do not match")
    return password


def cmd_hash(args: argparse.Namespace, hasher: CredentialHasher) -> int:
    print(hasher.encode(_read_password(confirm=True)))
    return 0


def cmd_inspect(args: argparse.Namespace, hasher: CredentialHasher) -> int:
    decoded = decode_credential(args.encoded)
    params = decoded.parameters
    print(f"algorithm:    {decoded.algorithm}")
    print(f"version:      {decoded.version}")
    print(f"memory_cost:  {params.memory_cost} KiB")
    print(f"time_cost:    {params.time_cost}")
    print(f"parallelism:  {params.parallelism}")
    print(f"salt_len:     {params.salt_len}")
    print(f"hash_len:     {params.hash_len}")
    print(f"needs_rehash: {hasher.needs_rehash(args.encoded)}")
    return 0


def cmd_verify(args: argparse.Namespace, hasher: CredentialHasher) -> int:
    if hasher.verify(_read_password(), args.encoded):
        print("match")
        return 0
    print("no match")
    return 1


async def _create_user(email: str, password_hash: str, full_name: str, timezone: str) -> str:
    from ferna.db.database import get_database
    from ferna.db.repositories.user import UserRepository

    db = get_database()
    await db.create_tables()
    try:
        async with db.session() as session:
            repo = UserRepository(session)
            if await repo.email_exists(email):
                raise SystemExit(f"Email already registered: {email}")
            user = await repo.create(
                email=email,
                password_hash=password_hash,
                full_name=full_name,
                timezone=timezone,
            )
            return user.id
    finally:
        await db.dispose()


def cmd_create_user(args: argparse.Namespace, hasher: CredentialHasher) -> int:
    email = normalize_identifier(args.email)
    password_hash = hasher.encode(_read_password(confirm=True))
    user_id = asyncio.run(_create_user(email, password_hash, args.full_name, args.timezone))
    print(f"Created user {email} ({user_id})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ferna-credential",
        description="Hash, inspect and verify Ferna password credentials",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("hash", help="Encode a password read from the prompt or stdin")

    inspect_p = sub.add_parser("inspect", help="Decode an encoded credential")
    inspect_p.add_argument("encoded")

    verify = sub.add_parser("verify", help="Check a password against an encoded credential")
    verify.add_argument("encoded")

    create = sub.add_parser("create-user", help="Create a local user account")
    create.add_argument("email")
    create.add_argument("--full-name", default="")
    create.add_argument("--timezone", default="UTC")

    return parser


COMMANDS = {
    "hash": cmd_hash,
    "inspect": cmd_inspect,
    "verify": cmd_verify,
    "create-user": cmd_create_user,
}


def main(argv: Optional[Sequence[str]] = None, hasher: Optional[CredentialHasher] = None) -> int:
    args = build_parser().parse_args(argv)
    hasher = hasher or get_hasher()
    try:
        return COMMANDS[args.command](args, hasher)
    except MalformedCredentialError as e:
        print(f"error: malformed credential ({e})", file=sys.stderr)
        return 2
    except CredentialError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
