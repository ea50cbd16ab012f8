"""
Error Taxonomy
Application errors and the handlers that turn them into the
`{success: false, message}` response envelope.
"""

import logging
from dataclasses import dataclass, asdict
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldError:
    """A single rejected input field."""
    field: str
    message: str


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, errors: List[FieldError], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or ". ".join(e.message for e in self.errors) or None)


class DuplicateEmail(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User with this email already exists"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class InvalidCurrentPassword(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Current password is incorrect"


class AccountInactive(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Your account has been deactivated. Please contact support."


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized to access this route"


class InvalidRefreshToken(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired refresh token"


class TokenInvalid(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class TokenExpired(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token has expired"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class RateLimited(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests from this IP, please try again later"


class PayloadTooLarge(AppError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "Request body too large"


class Internal(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


def error_response(
    status_code: int,
    message: str,
    errors: Optional[List[FieldError]] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Build the failure envelope."""
    content = {"success": False, "message": message}
    if errors:
        content["errors"] = [asdict(e) for e in errors]
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _field_errors_from_request(exc: RequestValidationError) -> List[FieldError]:
    errors = []
    for err in exc.errors():
        # loc looks like ("body", "dueDate"), ("path", "task_id") or ("body", 12) for bad JSON
        loc = list(err.get("loc", ()))
        source = loc.pop(0) if loc and loc[0] in ("body", "query", "path", "header", "cookie") else "request"
        if err.get("type") == "json_invalid" or not loc or not isinstance(loc[0], str):
            field = source
        else:
            field = ".".join(str(part) for part in loc)
        errors.append(FieldError(field=field, message=f"Invalid {field}: {err.get('msg', 'invalid value')}"))
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers that render every failure as the standard envelope."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        errors = exc.errors if isinstance(exc, ValidationError) else None
        return error_response(exc.status_code, exc.message, errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = _field_errors_from_request(exc)
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            ". ".join(e.message for e in errors),
            errors,
        )

    # SlowAPIMiddleware calls this handler without awaiting it
    @app.exception_handler(RateLimitExceeded)
    def handle_rate_limited(request: Request, exc: RateLimitExceeded):
        logger.warning(f"Rate limit exceeded for {request.client.host if request.client else 'unknown'} on {request.url.path}")
        return error_response(
            RateLimited.status_code,
            f"{RateLimited.default_message} ({exc.detail})",
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            message = f"Not found - {request.url.path}"
        else:
            message = str(exc.detail)
        return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(Internal.status_code, Internal.default_message)
