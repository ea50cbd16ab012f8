"""
TaskFlow Configuration Module
Loads settings from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


INSECURE_SECRET_VALUES = [
    "change-me-in-production",
    "secret",
    "password",
    "test",
    "dev",
    "default",
    "changeme",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "TaskFlow"
    environment: str = "development"  # development, production, test
    debug: bool = False

    # Authentication
    jwt_access_secret: str = Field(..., min_length=32)  # Required, no default
    jwt_refresh_secret: str = Field(..., min_length=32)  # Required, no default
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    jwt_algorithm: str = "HS256"
    bcrypt_rounds: int = 12

    # Cookie Security
    cookie_secure: bool = False  # Set to True for HTTPS (production)
    access_cookie_name: str = "accessToken"
    refresh_cookie_name: str = "refreshToken"

    # Rate Limiting
    rate_limit_enabled: bool = True
    rate_limit_general: str = "100/15minutes"  # Every API route
    rate_limit_auth: str = "10/hour"  # Shared by login and register

    # Request Limits
    max_body_bytes: int = 10 * 1024

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Logging
    log_dir: str = "/var/log/taskflow"
    log_level: str = "INFO"

    # API Settings
    api_prefix: str = "/api/v1"

    @field_validator("jwt_access_secret", "jwt_refresh_secret")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        """Validate that a signing secret is secure."""
        if not v or len(v) < 32:
            raise ValueError("JWT secrets must be at least 32 characters long")

        if v.lower() in INSECURE_SECRET_VALUES or any(bad in v.lower() for bad in INSECURE_SECRET_VALUES):
            raise ValueError(
                "JWT secret appears to be insecure. Generate a secure key with: "
                "python -c 'import secrets; print(secrets.token_hex(32))'"
            )

        return v

    @model_validator(mode="after")
    def validate_distinct_secrets(self) -> "Settings":
        # A leaked access secret must not be usable to forge refresh tokens
        if self.jwt_access_secret == self.jwt_refresh_secret:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        return self

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def access_token_max_age(self) -> int:
        return self.access_token_expire_minutes * 60

    @property
    def refresh_token_max_age(self) -> int:
        return self.refresh_token_expire_days * 24 * 60 * 60

    @property
    def refresh_cookie_path(self) -> str:
        return f"{self.api_prefix}/auth/refresh"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        return Settings()
    except Exception as e:
        print(f"❌ Configuration Error: {e}")
        raise e


# Convenience alias
settings = get_settings()
