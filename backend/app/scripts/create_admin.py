"""
Create Admin User Script
Creates an admin user if one with the given email does not already exist.
Usage: ADMIN_EMAIL=... ADMIN_PASSWORD=... python -m app.scripts.create_admin
"""

import asyncio
import os
import sys

# Add parent directory to path to allow running as module
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from app.database import AsyncSessionLocal, init_db
from app.models.user import User, UserRole
from app.services import auth_service
from app.services.credential_store import UserStore, normalize_email
from app.utils.password_policy import validate_password

async def create_admin():
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    name = os.getenv("ADMIN_NAME", "Administrator")

    if not email or not password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD are required to create the admin user.")
        return

    errors = validate_password(password)
    if errors:
        print("ADMIN_PASSWORD does not meet password policy:")
        for err in errors:
            print(f"- {err}")
        return

    await init_db()

    async with AsyncSessionLocal() as db:
        store = UserStore(db)
        if await store.get_by_email(email):
            print(f"User {email} already exists.")
            return

        new_admin = User(
            name=name,
            email=normalize_email(email),
            hashed_password=auth_service.get_password_hash(password),
            role=UserRole.ADMIN.value,
            is_active=True,
        )
        await store.add(new_admin)
        await store.save(new_admin)
        print(f"Successfully created admin user: {new_admin.email}")

if __name__ == "__main__":
    asyncio.run(create_admin())
