"""
Create the first admin user.

Usage:
    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=... python scripts/create_first_user.py
"""

import asyncio
import os

from agencydesk.core.permissions import UserRole
from agencydesk.db.session import SessionAsync, create_tables
from agencydesk.schemas.auth import UserCreate
from agencydesk.services.users import create_user, get_user_by_email


async def create_initial_user():
    print("--- Initial User Creation ---")

    data = UserCreate(
        name=os.environ.get("ADMIN_NAME", "Admin"),
        email=os.environ.get("ADMIN_EMAIL", "admin@example.com"),
        password=os.environ["ADMIN_PASSWORD"],
        role=UserRole.ADMIN,
    )

    await create_tables()
    async with SessionAsync() as session:
        if await get_user_by_email(session, data.email):
            print(f"User with email {data.email} already exists.")
            return

        user = await create_user(session, data)
        print("Initial user created successfully!")
        print(f"Email: {user.email}")
        print(f"Role: {user.role}")


if __name__ == "__main__":
    asyncio.run(create_initial_user())
