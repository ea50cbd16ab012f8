"""
User Model
Stores user credentials, profile information and the live refresh token.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Index
from app.database import Base


class UserRole(str, enum.Enum):
    """Stored role. Informational only, never enforced."""
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """
    User model for authentication.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    hashed_password = Column(String(1024), nullable=False)
    role = Column(String(16), default=UserRole.USER.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # At most one outstanding refresh token; rotated on login/refresh/password change
    refresh_token = Column(String(1024), nullable=True)
    password_changed_at = Column(DateTime, nullable=True)

    # Reserved for a password reset flow
    password_reset_token = Column(String(255), nullable=True)
    password_reset_expires = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_users_email', 'email', unique=True),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
