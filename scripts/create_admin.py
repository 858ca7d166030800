#!/usr/bin/env python3
"""Script to create an admin user."""

import asyncio
import os
import sys
from getpass import getpass

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from assetwatch.core.database import AsyncSessionLocal, engine
from assetwatch.core.security import hash_password
from assetwatch.models import Base
from assetwatch.models.user import User, UserRole


async def create_admin():
    """Create an admin user interactively."""
    # Create tables if they don't exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.role == UserRole.ADMIN))
        existing_admin = result.scalars().first()

        if existing_admin:
            print(f"An admin already exists: {existing_admin.email}")
            overwrite = input("Create another admin? (y/N): ")
            if overwrite.lower() != "y":
                print("Cancelled.")
                return

        print("\n=== Create admin user ===\n")
        email = input("Email: ").strip()
        if not email:
            print("Email is required.")
            return

        password = getpass("Password (min 8 characters): ")
        if len(password) < 8:
            print("Password must be at least 8 characters.")
            return

        password_confirm = getpass("Confirm password: ")
        if password != password_confirm:
            print("Passwords do not match.")
            return

        result = await session.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none():
            print(f"A user with email {email} already exists.")
            return

        admin = User(
            email=email,
            password_hash=hash_password(password),
            role=UserRole.ADMIN,
            is_active=True,
        )
        session.add(admin)
        await session.commit()

        print("\nAdmin created.")
        print(f"   Email: {email}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_admin())
