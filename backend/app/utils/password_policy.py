"""
Password Policy Utilities
Provides password validation rules.
"""

import re
from typing import List


MIN_LENGTH = 6
# bcrypt only looks at the first 72 bytes
MAX_BYTES = 72


def validate_password(password: str) -> List[str]:
    """
    Validate password strength and return a list of errors.
    """
    errors: List[str] = []

    if not password:
        return ["Password is required"]

    if len(password) < MIN_LENGTH:
        errors.append(f"Password must be at least {MIN_LENGTH} characters")

    if len(password.encode("utf-8")) > MAX_BYTES:
        errors.append(f"Password cannot exceed {MAX_BYTES} bytes")

    if not (
        re.search(r"[a-z]", password)
        and re.search(r"[A-Z]", password)
        and re.search(r"\d", password)
    ):
        errors.append(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )

    return errors
