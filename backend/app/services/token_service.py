"""
Token Service
Issues and verifies signed access/refresh JWT pairs.

Access and refresh tokens are signed with two independent secrets so that a
leaked access secret cannot be used to mint refresh tokens and vice versa.
The service holds configuration only: no I/O, no mutable state.
"""

import enum
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import jwt
from jwt import ExpiredSignatureError, PyJWTError

from app.config import Settings
from app.errors import TokenExpired, TokenInvalid


class TokenKind(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a token."""
    id: int
    issued_at: int  # seconds since epoch


class TokenService:
    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
    ):
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens must use different secrets")
        self._secrets = {
            TokenKind.ACCESS: access_secret,
            TokenKind.REFRESH: refresh_secret,
        }
        self._ttls = {
            TokenKind.ACCESS: access_ttl,
            TokenKind.REFRESH: refresh_ttl,
        }
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            access_secret=settings.jwt_access_secret,
            refresh_secret=settings.jwt_refresh_secret,
            access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
            algorithm=settings.jwt_algorithm,
        )

    def _issue(self, user_id: int, kind: TokenKind, now: Optional[datetime] = None) -> str:
        now = now or datetime.utcnow()
        to_encode = {
            "id": user_id,
            "type": kind.value,
            "iat": now,
            "exp": now + self._ttls[kind],
            # Two tokens minted in the same second must still differ
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(to_encode, self._secrets[kind], algorithm=self.algorithm)

    def issue_access_token(self, user_id: int) -> str:
        """Create a short-lived access token."""
        return self._issue(user_id, TokenKind.ACCESS)

    def issue_refresh_token(self, user_id: int) -> str:
        """Create a long-lived refresh token."""
        return self._issue(user_id, TokenKind.REFRESH)

    def issue_pair(self, user_id: int) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user_id),
            refresh_token=self.issue_refresh_token(user_id),
        )

    def verify(self, token: str, kind: TokenKind) -> TokenClaims:
        """
        Decode and validate a token of the given kind.

        Raises TokenExpired when the token is past its expiry and TokenInvalid
        for anything else (bad signature, malformed, wrong kind, bad claims).
        """
        if not token:
            raise TokenInvalid("Token not provided")
        try:
            payload = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except ExpiredSignatureError:
            raise TokenExpired()
        except PyJWTError:
            raise TokenInvalid()

        if payload.get("type") != kind.value:
            raise TokenInvalid()

        user_id = payload.get("id")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise TokenInvalid()

        return TokenClaims(id=user_id, issued_at=int(payload["iat"]))
