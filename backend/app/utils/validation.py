"""
Input Validation
One function per input shape. Each returns a list of field errors (empty
when the input is acceptable); `ensure_valid` raises them as a single
ValidationError before any domain object is built.
"""

import re
from typing import Any, Dict, List, Optional

from app.errors import FieldError, ValidationError
from app.models.task import TaskPriority
from app.schemas.task import TaskCreate, TaskUpdate
from app.schemas.user import LoginRequest, PasswordUpdate, ProfileUpdate, RegisterRequest
from app.utils.password_policy import validate_password

EMAIL_PATTERN = re.compile(r"^\w+([.+-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,})+$")

NAME_MIN, NAME_MAX = 2, 50
TASK_TEXT_MAX = 500
CATEGORY_MAX = 50

PRIORITIES = [p.value for p in TaskPriority]


def ensure_valid(errors: List[FieldError]) -> None:
    if errors:
        raise ValidationError(errors)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _check_name(name: str) -> List[FieldError]:
    if not NAME_MIN <= len(name.strip()) <= NAME_MAX:
        return [FieldError("name", f"Name must be between {NAME_MIN} and {NAME_MAX} characters")]
    return []


def _check_email(email: str) -> List[FieldError]:
    if not EMAIL_PATTERN.match(email.strip()):
        return [FieldError("email", "Please provide a valid email")]
    return []


def _check_new_password(field: str, password: Optional[str]) -> List[FieldError]:
    return [FieldError(field, message) for message in validate_password(password or "")]


def _check_priority(priority: Optional[str]) -> List[FieldError]:
    if priority is not None and priority not in PRIORITIES:
        return [FieldError("priority", "Priority must be low, medium, or high")]
    return []


def _check_category(category: Optional[str]) -> List[FieldError]:
    if category is not None and len(category.strip()) > CATEGORY_MAX:
        return [FieldError("category", f"Category cannot exceed {CATEGORY_MAX} characters")]
    return []


def validate_registration(data: RegisterRequest) -> List[FieldError]:
    errors: List[FieldError] = []

    if _blank(data.name):
        errors.append(FieldError("name", "Name is required"))
    else:
        errors.extend(_check_name(data.name))

    if _blank(data.email):
        errors.append(FieldError("email", "Email is required"))
    else:
        errors.extend(_check_email(data.email))

    errors.extend(_check_new_password("password", data.password))

    if not data.confirm_password:
        errors.append(FieldError("confirmPassword", "Please confirm your password"))
    elif data.confirm_password != data.password:
        errors.append(FieldError("confirmPassword", "Passwords do not match"))

    return errors


def validate_login(data: LoginRequest) -> List[FieldError]:
    errors: List[FieldError] = []

    if _blank(data.email):
        errors.append(FieldError("email", "Email is required"))
    else:
        errors.extend(_check_email(data.email))

    if not data.password:
        errors.append(FieldError("password", "Password is required"))

    return errors


def validate_profile_update(data: ProfileUpdate) -> List[FieldError]:
    errors: List[FieldError] = []
    if data.name is not None:
        errors.extend(_check_name(data.name))
    if data.email is not None:
        errors.extend(_check_email(data.email))
    return errors


def validate_password_update(data: PasswordUpdate) -> List[FieldError]:
    errors: List[FieldError] = []

    if not data.current_password:
        errors.append(FieldError("currentPassword", "Current password is required"))

    if not data.new_password:
        errors.append(FieldError("newPassword", "New password is required"))
    else:
        errors.extend(_check_new_password("newPassword", data.new_password))

    if not data.confirm_new_password:
        errors.append(FieldError("confirmNewPassword", "Please confirm your new password"))
    elif data.confirm_new_password != data.new_password:
        errors.append(FieldError("confirmNewPassword", "Passwords do not match"))

    return errors


def _check_task_text(text: str) -> List[FieldError]:
    if not 1 <= len(text.strip()) <= TASK_TEXT_MAX:
        return [FieldError("text", f"Task text must be between 1 and {TASK_TEXT_MAX} characters")]
    return []


def validate_task_create(data: TaskCreate) -> List[FieldError]:
    errors: List[FieldError] = []
    if _blank(data.text):
        errors.append(FieldError("text", "Task text is required"))
    else:
        errors.extend(_check_task_text(data.text))
    errors.extend(_check_priority(data.priority))
    errors.extend(_check_category(data.category))
    return errors


def validate_task_update(data: TaskUpdate) -> List[FieldError]:
    errors: List[FieldError] = []
    provided = data.model_fields_set

    if "text" in provided:
        if data.text is None:
            errors.append(FieldError("text", "Task text is required"))
        else:
            errors.extend(_check_task_text(data.text))
    for field in ("completed", "priority", "category", "order"):
        if field in provided and getattr(data, field) is None:
            errors.append(FieldError(field, f"{field} cannot be null"))
    errors.extend(_check_priority(data.priority))
    errors.extend(_check_category(data.category))
    return errors


def validate_priority(priority: str) -> List[FieldError]:
    if priority not in PRIORITIES:
        return [FieldError("priority", "Invalid priority. Must be low, medium, or high")]
    return []


def task_fields(data: Any, partial: bool = False) -> Dict[str, Any]:
    """
    Normalized column values from a validated task payload. With `partial`,
    only the fields the client actually sent are returned.
    """
    values = data.model_dump(exclude_unset=partial)
    if values.get("text") is not None:
        values["text"] = values["text"].strip()
    if values.get("category") is not None:
        values["category"] = values["category"].strip()
    return values
