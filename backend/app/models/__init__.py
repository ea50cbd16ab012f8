"""
TaskFlow Database Models
Exports all models for use throughout the application.
"""

from app.models.user import User, UserRole
from app.models.task import Task, TaskPriority, apply_completion_state, derive_completed_at

__all__ = [
    "User",
    "UserRole",
    "Task",
    "TaskPriority",
    "apply_completion_state",
    "derive_completed_at",
]
