"""
Authentication Router
Endpoints for registration, login, token refresh, logout and account management.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status

from app.api.dependencies import get_auth_context, get_auth_service
from app.config import settings
from app.limiter import limiter
from app.schemas.common import ApiResponse
from app.schemas.user import (
    AccessTokenPayload,
    AuthPayload,
    LoginRequest,
    PasswordUpdate,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    UserPayload,
    UserResponse,
)
from app.services.auth_service import AuthResult, AuthService
from app.services.session import AuthContext
from app.services.token_service import TokenPair
from app.utils.validation import (
    ensure_valid,
    validate_login,
    validate_password_update,
    validate_profile_update,
    validate_registration,
)

router = APIRouter()


def _cookie_samesite() -> str:
    return "strict" if settings.cookie_secure else "lax"


def set_token_cookies(response: Response, tokens: TokenPair) -> None:
    """Set the access cookie and the refresh cookie scoped to the refresh path."""
    response.set_cookie(
        key=settings.access_cookie_name,
        value=tokens.access_token,
        httponly=True,
        max_age=settings.access_token_max_age,
        samesite=_cookie_samesite(),
        secure=settings.cookie_secure,
    )
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=tokens.refresh_token,
        httponly=True,
        max_age=settings.refresh_token_max_age,
        samesite=_cookie_samesite(),
        secure=settings.cookie_secure,
        path=settings.refresh_cookie_path,
    )


def clear_token_cookies(response: Response) -> None:
    response.delete_cookie(
        key=settings.access_cookie_name,
        httponly=True,
        samesite=_cookie_samesite(),
        secure=settings.cookie_secure,
    )
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path=settings.refresh_cookie_path,
        httponly=True,
        samesite=_cookie_samesite(),
        secure=settings.cookie_secure,
    )


def _auth_payload(result: AuthResult) -> AuthPayload:
    return AuthPayload(
        user=UserResponse.model_validate(result.user),
        access_token=result.tokens.access_token,
    )


@router.post("/register", response_model=ApiResponse[AuthPayload], status_code=status.HTTP_201_CREATED)
@limiter.shared_limit(settings.rate_limit_auth, scope="auth")
async def register(
    request: Request,
    data: RegisterRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Create an account and start a session.
    Shares the auth rate limit with login.
    """
    ensure_valid(validate_registration(data))
    result = await auth.register(data.name, data.email, data.password)
    set_token_cookies(response, result.tokens)
    return ApiResponse(message="User registered successfully", data=_auth_payload(result))


@router.post("/login", response_model=ApiResponse[AuthPayload])
@limiter.shared_limit(settings.rate_limit_auth, scope="auth")
async def login(
    request: Request,
    data: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Authenticate user and set HTTP-only JWT cookies.
    Shares the auth rate limit with register to slow brute force attempts.
    """
    ensure_valid(validate_login(data))
    result = await auth.login(data.email, data.password)
    set_token_cookies(response, result.tokens)
    return ApiResponse(message="Login successful", data=_auth_payload(result))


@router.post("/refresh", response_model=ApiResponse[AccessTokenPayload])
async def refresh(
    request: Request,
    response: Response,
    data: Optional[RefreshRequest] = None,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Exchange a refresh token (cookie or body) for a new pair.
    The presented token is invalidated by the rotation.
    """
    token = request.cookies.get(settings.refresh_cookie_name) or (data.refresh_token if data else None)
    result = await auth.refresh(token)
    set_token_cookies(response, result.tokens)
    return ApiResponse(data=AccessTokenPayload(access_token=result.tokens.access_token))


@router.post("/logout", response_model=ApiResponse[dict])
async def logout(
    response: Response,
    ctx: AuthContext = Depends(get_auth_context),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Clear the stored refresh token and the authentication cookies.
    """
    await auth.logout(ctx)
    clear_token_cookies(response)
    return ApiResponse(message="Logged out successfully")


@router.get("/me", response_model=ApiResponse[UserPayload])
async def get_me(
    ctx: AuthContext = Depends(get_auth_context),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Get current user information.
    Requires authentication.
    """
    user = await auth.get_profile(ctx)
    return ApiResponse(data=UserPayload(user=UserResponse.model_validate(user)))


@router.put("/profile", response_model=ApiResponse[UserPayload])
async def update_profile(
    data: ProfileUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    auth: AuthService = Depends(get_auth_service),
):
    ensure_valid(validate_profile_update(data))
    user = await auth.update_profile(ctx, name=data.name, email=data.email)
    return ApiResponse(
        message="Profile updated successfully",
        data=UserPayload(user=UserResponse.model_validate(user)),
    )


@router.put("/password", response_model=ApiResponse[AccessTokenPayload])
async def update_password(
    data: PasswordUpdate,
    response: Response,
    ctx: AuthContext = Depends(get_auth_context),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Change password. Rotates the refresh token and reissues both cookies.
    """
    ensure_valid(validate_password_update(data))
    result = await auth.update_password(ctx, data.current_password, data.new_password)
    set_token_cookies(response, result.tokens)
    return ApiResponse(
        message="Password updated successfully",
        data=AccessTokenPayload(access_token=result.tokens.access_token),
    )


@router.delete("/account", response_model=ApiResponse[dict])
async def delete_account(
    response: Response,
    ctx: AuthContext = Depends(get_auth_context),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Soft delete: deactivate the account and end the session.
    """
    await auth.deactivate(ctx)
    clear_token_cookies(response)
    return ApiResponse(message="Account deactivated successfully")
