"""Bootstrap a system administrator.

There is no public route to the system_admin role, so the first admin is
created from the command line. The password is prompted for unless given.

Usage:
    python -m scripts.create_admin --name "Platform Administrator" \\
        --email admin@example.com --address "1 Main Street"
"""

import argparse
import asyncio
import getpass
import sys

from storerate.core.database import async_session_maker
from storerate.core.exceptions import AppError
from storerate.core.validation import validate_user_creation
from storerate.models.user import UserRole
from storerate.services.user_service import UserService


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a system administrator account.")
    parser.add_argument("--name", required=True, help="20-60 characters")
    parser.add_argument("--email", required=True)
    parser.add_argument("--address", required=True, help="Up to 400 characters")
    parser.add_argument("--password", help="Prompted for when omitted")
    return parser.parse_args(argv)


async def create_admin(name: str, email: str, password: str, address: str) -> None:
    validate_user_creation(name, email, password, address, UserRole.SYSTEM_ADMIN.value)

    async with async_session_maker() as session:
        user = await UserService(session).create_user(
            name=name,
            email=email,
            password=password,
            address=address,
            role=UserRole.SYSTEM_ADMIN,
        )

    print(f"Created system admin {user.email} ({user.id})")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    password = args.password or getpass.getpass("Password: ")

    try:
        asyncio.run(create_admin(args.name, args.email, password, args.address))
    except AppError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        for error in e.errors or []:
            print(f"  - {error}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
