"""
Authentication Service
Handles password hashing and the register/login/refresh/logout lifecycle.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from passlib.context import CryptContext
from passlib.exc import PasswordSizeError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import (
    AccountInactive,
    DuplicateEmail,
    InvalidCredentials,
    InvalidCurrentPassword,
    InvalidRefreshToken,
    NotFound,
    TokenExpired,
    TokenInvalid,
)
from app.models.user import User, UserRole
from app.services.credential_store import UserStore, normalize_email
from app.services.session import AuthContext
from app.services.token_service import TokenKind, TokenPair, TokenService

logger = logging.getLogger(__name__)

# Password hashing configuration
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check if plain password matches hashed version."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except PasswordSizeError:
        # Over passlib's size cap; no stored hash can match it
        return False

def get_password_hash(password: str) -> str:
    """Generate bcrypt hash of password."""
    return pwd_context.hash(password)

def set_password(user: User, password: str, now: Optional[datetime] = None) -> None:
    """
    Replace the user's password hash.

    For existing users the change is stamped one second in the past, so
    tokens issued right after the change are not treated as stale.
    """
    user.hashed_password = get_password_hash(password)
    if user.id is not None:
        user.password_changed_at = (now or datetime.utcnow()) - timedelta(seconds=1)


@dataclass(frozen=True)
class AuthResult:
    user: User
    tokens: TokenPair


class AuthService:
    """Session lifecycle on top of the credential store and token service."""

    def __init__(self, db: AsyncSession, tokens: TokenService):
        self.users = UserStore(db)
        self.tokens = tokens

    async def _start_session(self, user: User) -> TokenPair:
        """Issue a fresh pair and make its refresh token the only live one."""
        pair = self.tokens.issue_pair(user.id)
        user.refresh_token = pair.refresh_token
        await self.users.save(user)
        return pair

    async def _current_user(self, ctx: AuthContext) -> User:
        user = await self.users.get(ctx.user_id)
        if not user:
            raise NotFound("User not found")
        return user

    async def register(self, name: str, email: str, password: str, role: UserRole = UserRole.USER) -> AuthResult:
        if await self.users.email_taken(email):
            raise DuplicateEmail()

        user = User(
            name=name.strip(),
            email=normalize_email(email),
            role=role.value,
            is_active=True,
        )
        set_password(user, password)
        await self.users.add(user)

        pair = await self._start_session(user)
        logger.info(f"Registered user {user.id}")
        return AuthResult(user=user, tokens=pair)

    async def login(self, email: str, password: str) -> AuthResult:
        user = await self.users.get_by_email(email)

        if not user or not verify_password(password, user.hashed_password):
            logger.info("Login rejected: invalid credentials")
            raise InvalidCredentials()

        if not user.is_active:
            logger.info(f"Login rejected: user {user.id} is inactive")
            raise AccountInactive()

        pair = await self._start_session(user)
        logger.info(f"User {user.id} logged in")
        return AuthResult(user=user, tokens=pair)

    async def refresh(self, refresh_token: Optional[str]) -> AuthResult:
        """
        Rotate a refresh token. The presented token must verify and match the
        stored one exactly; after rotation it can never be used again.
        """
        if not refresh_token:
            raise InvalidRefreshToken("Refresh token not provided")

        try:
            claims = self.tokens.verify(refresh_token, TokenKind.REFRESH)
        except (TokenInvalid, TokenExpired):
            logger.warning("Refresh rejected: token failed verification")
            raise InvalidRefreshToken()

        user = await self.users.get(claims.id)
        if not user or not user.refresh_token or not secrets.compare_digest(user.refresh_token, refresh_token):
            logger.warning(f"Refresh rejected: token does not match stored value for user {claims.id}")
            raise InvalidRefreshToken("Invalid refresh token")

        if not user.is_active:
            logger.warning(f"Refresh rejected: user {user.id} is inactive")
            raise InvalidRefreshToken("Your account has been deactivated")

        pair = await self._start_session(user)
        logger.info(f"Rotated refresh token for user {user.id}")
        return AuthResult(user=user, tokens=pair)

    async def logout(self, ctx: AuthContext) -> None:
        await self.users.clear_refresh_token(ctx.user_id)
        logger.info(f"User {ctx.user_id} logged out")

    async def get_profile(self, ctx: AuthContext) -> User:
        return await self._current_user(ctx)

    async def update_profile(self, ctx: AuthContext, name: Optional[str] = None, email: Optional[str] = None) -> User:
        user = await self._current_user(ctx)

        if email is not None:
            email = normalize_email(email)
            if email != user.email:
                if await self.users.email_taken(email, exclude_user_id=user.id):
                    raise DuplicateEmail("Email is already in use")
                user.email = email

        if name is not None:
            user.name = name.strip()

        return await self.users.save(user)

    async def update_password(self, ctx: AuthContext, current_password: str, new_password: str) -> AuthResult:
        user = await self._current_user(ctx)

        if not verify_password(current_password, user.hashed_password):
            raise InvalidCurrentPassword()

        set_password(user, new_password)
        pair = await self._start_session(user)
        logger.info(f"Password changed for user {user.id}")
        return AuthResult(user=user, tokens=pair)

    async def deactivate(self, ctx: AuthContext) -> None:
        """Soft delete: the record stays, the account and its session end."""
        user = await self._current_user(ctx)
        user.is_active = False
        user.refresh_token = None
        await self.users.save(user)
        logger.info(f"Deactivated user {user.id}")
