"""
Session Resolution
Turns a presented access token into an immutable caller identity.
"""

import calendar
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import TokenExpired, TokenInvalid, Unauthenticated
from app.models.user import User
from app.services.credential_store import UserStore
from app.services.token_service import TokenKind, TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Authenticated caller, passed explicitly to handlers and services."""
    user_id: int
    name: str
    email: str
    role: str
    token_issued_at: int

    @classmethod
    def for_user(cls, user: User, issued_at: int) -> "AuthContext":
        return cls(
            user_id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            token_issued_at=issued_at,
        )


def password_changed_after(user: User, issued_at: int) -> bool:
    """True when the password was changed after the token was issued."""
    if not user.password_changed_at:
        return False
    changed = calendar.timegm(user.password_changed_at.utctimetuple())
    return issued_at < changed


async def resolve_session(db: AsyncSession, tokens: TokenService, token: Optional[str]) -> AuthContext:
    """
    Verify an access token and load its user.

    Every failure is reported as Unauthenticated: no token, bad or expired
    token, unknown or inactive user, or a token older than the last
    password change.
    """
    if not token:
        raise Unauthenticated("Not authorized, no token provided")

    try:
        claims = tokens.verify(token, TokenKind.ACCESS)
    except TokenExpired:
        raise Unauthenticated("Token has expired")
    except TokenInvalid:
        raise Unauthenticated("Not authorized, invalid token")

    user = await UserStore(db).get(claims.id)
    if not user:
        raise Unauthenticated("The user belonging to this token no longer exists")
    if not user.is_active:
        raise Unauthenticated("Your account has been deactivated")
    if password_changed_after(user, claims.issued_at):
        logger.info(f"Rejected stale access token for user {user.id}")
        raise Unauthenticated("Password was recently changed. Please log in again")

    return AuthContext.for_user(user, claims.issued_at)
