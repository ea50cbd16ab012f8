"""
Credential Store
Persistence for user records: lookups, email uniqueness, and the single
refresh-token slot per user.
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import DuplicateEmail
from app.models.user import User


def normalize_email(email: str) -> str:
    """Emails are stored trimmed and lowercase."""
    return email.strip().lower()


class UserStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        stmt = select(User.id).where(User.email == normalize_email(email))
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def add(self, user: User) -> User:
        """Stage a new user and assign its id. The caller commits."""
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateEmail()
        return user

    async def save(self, user: User) -> User:
        """Commit pending changes. A unique-index hit on email becomes DuplicateEmail."""
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateEmail()
        await self.db.refresh(user)
        return user

    async def clear_refresh_token(self, user_id: int) -> None:
        await self.db.execute(
            update(User).where(User.id == user_id).values(refresh_token=None)
        )
        await self.db.commit()
