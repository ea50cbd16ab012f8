"""
Task Schemas
Pydantic models for task payloads and responses.
"""

from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class TaskCreate(CamelModel):
    text: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    category: Optional[str] = None
    order: Optional[int] = None


class TaskUpdate(CamelModel):
    text: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    category: Optional[str] = None
    order: Optional[int] = None


class TaskResponse(CamelModel):
    id: int
    text: str
    completed: bool
    priority: str
    due_date: Optional[datetime] = None
    category: str
    order: int
    completed_at: Optional[datetime] = None
    is_overdue: bool
    user_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class TaskStats(CamelModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    high_priority: int = 0
    overdue: int = 0


class DeletedCount(CamelModel):
    deleted_count: int
