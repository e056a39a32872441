"""Create a user with roles directly in the database (operator tooling).

Usage:
    python -m scripts.create_user <email> [--admin] [--password PASSWORD]
If password is omitted, a random one is printed. Prints a bearer token for the
new user so the API can be exercised right away.
"""

import argparse
import asyncio
import secrets
import sys

from accounts.application.dtos.user import UserRecord
from accounts.core.config import get_settings
from accounts.domain.enums import Role
from accounts.domain.exceptions import ValidationException
from accounts.infrastructure.persistence import database
from accounts.infrastructure.persistence.repositories import UserRepository
from accounts.infrastructure.security import create_access_token, get_password_hash
from accounts.shared.utils.generators import generate_cuid


async def main() -> None:
    """Create user; ADMIN role added with --admin (USER is always granted)."""
    parser = argparse.ArgumentParser(description="Create a user account")
    parser.add_argument("email")
    parser.add_argument("--admin", action="store_true", help="grant the ADMIN role")
    parser.add_argument("--password", default=None)
    args = parser.parse_args()

    get_settings()
    await database.create_tables()
    password = args.password or secrets.token_urlsafe(12)
    roles = [Role.USER, Role.ADMIN] if args.admin else [Role.USER]

    session_factory = database._ensure_engine()
    async with session_factory() as session:
        async with session.begin():
            repo = UserRepository(session)
            try:
                user = await repo.add(
                    UserRecord(
                        id=generate_cuid(),
                        email=args.email,
                        hashed_password=get_password_hash(password),
                        roles=roles,
                    )
                )
            except ValidationException as e:
                print(e.message, file=sys.stderr)
                sys.exit(1)
    await database.dispose_engine()

    token = create_access_token(
        {"sub": user.id, "email": user.email, "roles": [r.value for r in user.roles]}
    )
    print(f"Created user: {user.id} ({user.email}) roles={[r.value for r in user.roles]}")
    print(f"Password: {password}")
    print(f"Token: {token}")


if __name__ == "__main__":
    asyncio.run(main())
