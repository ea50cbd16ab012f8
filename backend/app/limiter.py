"""
Rate Limiting
Shared slowapi limiter. Every route gets the general limit through
SlowAPIMiddleware; login and register carry a stricter decorator limit.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_general],
    enabled=settings.rate_limit_enabled,
)
