"""
API Dependencies
Reusable FastAPI dependencies for endpoint protection.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.services.auth_service import AuthService
from app.services.session import AuthContext, resolve_session
from app.services.task_service import TaskStore
from app.services.token_service import TokenService


@lru_cache()
def get_token_service() -> TokenService:
    """Token service built once from explicit settings."""
    return TokenService.from_settings(settings)


def extract_access_token(request: Request) -> Optional[str]:
    """
    Find the access token on a request: the httpOnly cookie first,
    then an `Authorization: Bearer` header.
    """
    token = request.cookies.get(settings.access_cookie_name)
    if token:
        return token

    auth_header = request.headers.get("Authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_auth_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthContext:
    """
    Dependency that enforces authentication.
    Rejects the request before the handler runs if the token is missing,
    invalid, expired, stale, or belongs to an inactive user.
    """
    return await resolve_session(db, tokens, extract_access_token(request))


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, tokens)


def get_task_store(db: AsyncSession = Depends(get_db)) -> TaskStore:
    return TaskStore(db)
