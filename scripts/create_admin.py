#!/usr/bin/env python3
"""
Create an admin account, or reset the password of an existing one.

Usage:
    python -m scripts.create_admin USERNAME EMAIL [--display-name NAME]

The password is read interactively so it never lands in shell history.
"""

import argparse
import asyncio
import getpass
import sys

from sqlalchemy import select

from app.core.database import engine, session_scope
from app.core.security import hash_password
from app.models.admin import Admins
from app.models.post import utc_now


async def create_admin(username: str, email: str, password: str, display_name: str | None) -> None:
    async with session_scope() as db:
        result = await db.execute(select(Admins).where(Admins.username == username))  # type: ignore[arg-type]
        admin = result.scalar_one_or_none()

        if admin is None:
            admin = Admins(
                username=username,
                email=email,
                display_name=display_name,
                password_hash=hash_password(password),
            )
            print(f"Creating admin '{username}'")
        else:
            admin.email = email
            admin.password_hash = hash_password(password)
            admin.is_active = True
            admin.updated_at = utc_now()
            if display_name is not None:
                admin.display_name = display_name
            print(f"Updating admin '{username}'")

        db.add(admin)
        await db.commit()

    await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or reset an admin account")
    parser.add_argument("username")
    parser.add_argument("email")
    parser.add_argument("--display-name", default=None)
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters", file=sys.stderr)
        return 1
    if password != getpass.getpass("Repeat password: "):
        print("Passwords do not match", file=sys.stderr)
        return 1

    asyncio.run(create_admin(args.username, args.email, password, args.display_name))
    return 0


if __name__ == "__main__":
    sys.exit(main())
