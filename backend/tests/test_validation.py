"""Tests for input validation functions and the password policy."""

from app.schemas.task import TaskCreate, TaskUpdate
from app.schemas.user import LoginRequest, PasswordUpdate, ProfileUpdate, RegisterRequest
from app.utils.password_policy import validate_password
from app.utils.validation import (
    task_fields,
    validate_login,
    validate_password_update,
    validate_priority,
    validate_profile_update,
    validate_registration,
    validate_task_create,
    validate_task_update,
)


def _fields(errors):
    return {e.field for e in errors}


class TestPasswordPolicy:
    def test_strong_password(self):
        assert validate_password("Secure123") == []

    def test_missing_password(self):
        assert validate_password("") == ["Password is required"]

    def test_too_short(self):
        errors = validate_password("Ab1")
        assert "Password must be at least 6 characters" in errors

    def test_requires_mixed_case_and_digit(self):
        for weak in ("alllower1", "ALLUPPER1", "NoDigitsHere"):
            assert validate_password(weak), weak


class TestRegistration:
    def test_valid(self):
        data = RegisterRequest(name="Alice", email="alice@example.com", password="Secure123", confirm_password="Secure123")
        assert validate_registration(data) == []

    def test_accepts_camel_case_payload(self):
        data = RegisterRequest.model_validate(
            {"name": "Alice", "email": "alice@example.com", "password": "Secure123", "confirmPassword": "Secure123"}
        )
        assert validate_registration(data) == []

    def test_missing_everything(self):
        errors = validate_registration(RegisterRequest())
        assert _fields(errors) == {"name", "email", "password", "confirmPassword"}

    def test_mismatched_confirmation(self):
        data = RegisterRequest(name="Alice", email="alice@example.com", password="Secure123", confirm_password="Secure124")
        errors = validate_registration(data)
        assert [e.message for e in errors] == ["Passwords do not match"]

    def test_bad_email_and_short_name(self):
        data = RegisterRequest(name="A", email="not-an-email", password="Secure123", confirm_password="Secure123")
        assert _fields(validate_registration(data)) == {"name", "email"}


class TestLoginAndProfile:
    def test_login_requires_both_fields(self):
        assert _fields(validate_login(LoginRequest())) == {"email", "password"}

    def test_profile_update_empty_is_valid(self):
        assert validate_profile_update(ProfileUpdate()) == []

    def test_profile_update_rejects_bad_email(self):
        assert _fields(validate_profile_update(ProfileUpdate(email="nope"))) == {"email"}

    def test_password_update(self):
        ok = PasswordUpdate(current_password="Old12345", new_password="New12345", confirm_new_password="New12345")
        assert validate_password_update(ok) == []

        bad = PasswordUpdate(current_password="", new_password="weak", confirm_new_password="other")
        assert _fields(validate_password_update(bad)) == {"currentPassword", "newPassword", "confirmNewPassword"}


class TestTasks:
    def test_create_requires_text(self):
        assert _fields(validate_task_create(TaskCreate(text="   "))) == {"text"}

    def test_create_text_limit(self):
        assert validate_task_create(TaskCreate(text="x" * 500)) == []
        assert _fields(validate_task_create(TaskCreate(text="x" * 501))) == {"text"}

    def test_create_priority_and_category(self):
        errors = validate_task_create(TaskCreate(text="Buy milk", priority="urgent", category="c" * 51))
        assert _fields(errors) == {"priority", "category"}

    def test_update_only_checks_sent_fields(self):
        assert validate_task_update(TaskUpdate.model_validate({"completed": True})) == []

    def test_update_rejects_null_text(self):
        assert _fields(validate_task_update(TaskUpdate.model_validate({"text": None}))) == {"text"}

    def test_update_allows_clearing_due_date(self):
        assert validate_task_update(TaskUpdate.model_validate({"dueDate": None})) == []

    def test_priority_path_value(self):
        assert validate_priority("high") == []
        assert validate_priority("urgent")

    def test_task_fields_partial_keeps_only_sent_keys(self):
        data = TaskUpdate.model_validate({"text": "  trimmed  ", "dueDate": None})
        assert task_fields(data, partial=True) == {"text": "trimmed", "due_date": None}
