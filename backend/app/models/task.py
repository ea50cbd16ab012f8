"""
Task Model
Stores to-do items owned by a single user.
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index

from app.database import Base


class TaskPriority(str, enum.Enum):
    """Task urgency."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


DEFAULT_CATEGORY = "general"


class Task(Base):
    """
    Task model. Ownership (user_id) never changes after creation.
    """
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    text = Column(String(500), nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    priority = Column(String(10), default=TaskPriority.MEDIUM.value, nullable=False)
    due_date = Column(DateTime, nullable=True)
    category = Column(String(50), default=DEFAULT_CATEGORY, nullable=False)
    order = Column(Integer, default=0, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_tasks_user_created', 'user_id', 'created_at'),
        Index('ix_tasks_user_completed', 'user_id', 'completed'),
        Index('ix_tasks_user_priority', 'user_id', 'priority'),
        Index('ix_tasks_user_due_date', 'user_id', 'due_date'),
    )

    @property
    def is_overdue(self) -> bool:
        """Pending task whose due date has passed."""
        if not self.due_date or self.completed:
            return False
        return datetime.utcnow() > self.due_date

    def __repr__(self):
        return f"<Task(id={self.id}, user_id={self.user_id}, completed={self.completed})>"


def derive_completed_at(
    completed: bool,
    completed_at: Optional[datetime],
    now: datetime,
) -> Optional[datetime]:
    """
    Completion timestamp implied by the completed flag.

    Keeps an existing timestamp while the task stays completed, stamps `now`
    on the transition to completed, and clears it otherwise.
    """
    if not completed:
        return None
    return completed_at or now


def apply_completion_state(task: Task, now: Optional[datetime] = None) -> Task:
    """Bring task.completed_at in line with task.completed. Call after every mutation."""
    task.completed_at = derive_completed_at(
        bool(task.completed), task.completed_at, now or datetime.utcnow()
    )
    return task
