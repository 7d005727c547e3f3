#!/usr/bin/env python3
"""Create (or reset) an admin user with a properly hashed password."""

import asyncio

from app.core.logging import setup_logging
from app.core.security import hash_password
from app.database import AsyncSessionLocal
from app.domain.entities import UserRole
from app.repositories.sql import SqlStore


async def create_admin(
    email: str = "admin@carshare.local",
    password: str = "Admin@123",
    name: str = "CarShare Admin",
) -> None:
    """Create an admin user if it doesn't exist, otherwise reset it."""
    async with AsyncSessionLocal() as session:
        store = SqlStore(session)
        password_hash = hash_password(password)

        existing = await store.get_user_by_email(email)
        if existing:
            await store.update_user(
                existing.id,
                {"name": name, "password_hash": password_hash, "role": UserRole.ADMIN},
            )
            await session.commit()
            print(f"Updated existing admin user: {email}")
        else:
            await store.add_user(
                name=name,
                email=email,
                password_hash=password_hash,
                role=UserRole.ADMIN,
            )
            await session.commit()
            print(f"Created admin user: {email}")

        print(f"Email: {email}")
        print("Role: admin")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", default="admin@carshare.local", help="Admin email")
    parser.add_argument("--password", default="Admin@123", help="Admin password")
    parser.add_argument("--name", default="CarShare Admin", help="Display name")

    args = parser.parse_args()

    setup_logging()
    asyncio.run(create_admin(email=args.email, password=args.password, name=args.name))
