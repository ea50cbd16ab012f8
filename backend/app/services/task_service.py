"""
Task Service
Owner-scoped task persistence: listing, CRUD, toggling, bulk delete and
statistics. Every query is filtered by the owning user's id, so a task
belonging to someone else behaves exactly like a missing one.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, asc, case, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import FieldError, NotFound, ValidationError
from app.models.task import DEFAULT_CATEGORY, Task, TaskPriority, apply_completion_state

logger = logging.getLogger(__name__)

# camelCase sort keys accepted from clients
SORTABLE_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    "priority": Task.priority,
    "text": Task.text,
    "completed": Task.completed,
    "category": Task.category,
    "order": Task.order,
}

DEFAULT_PAGE_SIZE = 50


@dataclass
class TaskFilters:
    completed: Optional[bool] = None
    priority: Optional[str] = None
    category: Optional[str] = None


@dataclass
class TaskPage:
    items: List[Task]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_sort(sort: Optional[str]) -> List[Any]:
    """
    Parse "field,-field" into ORDER BY clauses. A leading '-' means
    descending. Defaults to newest first.
    """
    if not sort:
        return [desc(Task.created_at)]

    clauses = []
    errors = []
    for raw in sort.split(","):
        raw = raw.strip()
        if not raw:
            continue
        direction = desc if raw.startswith("-") else asc
        name = raw.lstrip("-")
        column = SORTABLE_FIELDS.get(name)
        if column is None:
            errors.append(FieldError(field="sort", message=f"Cannot sort by '{name}'"))
            continue
        clauses.append(direction(column))

    if errors:
        raise ValidationError(errors)
    return clauses or [desc(Task.created_at)]


class TaskStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _owned(self, user_id: int):
        return select(Task).where(Task.user_id == user_id)

    async def list(
        self,
        user_id: int,
        filters: Optional[TaskFilters] = None,
        sort: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> TaskPage:
        filters = filters or TaskFilters()
        conditions = [Task.user_id == user_id]
        if filters.completed is not None:
            conditions.append(Task.completed == filters.completed)
        if filters.priority:
            conditions.append(Task.priority == filters.priority)
        if filters.category:
            conditions.append(Task.category == filters.category)

        order_by = parse_sort(sort)
        stmt = (
            select(Task)
            .where(*conditions)
            .order_by(*order_by, asc(Task.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = (await self.db.execute(stmt)).scalars().all()
        total = (await self.db.execute(
            select(func.count(Task.id)).where(*conditions)
        )).scalar() or 0

        return TaskPage(items=list(items), total=total, page=page, limit=limit)

    async def list_by_priority(self, user_id: int, priority: TaskPriority) -> List[Task]:
        stmt = (
            self._owned(user_id)
            .where(Task.priority == priority.value)
            .order_by(desc(Task.created_at), asc(Task.id))
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def get(self, user_id: int, task_id: int) -> Task:
        result = await self.db.execute(self._owned(user_id).where(Task.id == task_id))
        task = result.scalar_one_or_none()
        if not task:
            raise NotFound("Task not found")
        return task

    async def _save(self, task: Task) -> Task:
        apply_completion_state(task)
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def create(self, user_id: int, fields: Dict[str, Any]) -> Task:
        task = Task(
            user_id=user_id,
            text=fields["text"],
            completed=fields.get("completed") or False,
            priority=fields.get("priority") or TaskPriority.MEDIUM.value,
            due_date=to_naive_utc(fields.get("due_date")),
            category=fields.get("category") or DEFAULT_CATEGORY,
            order=fields.get("order") or 0,
        )
        self.db.add(task)
        return await self._save(task)

    async def update(self, user_id: int, task_id: int, fields: Dict[str, Any]) -> Task:
        """Apply a partial update. Only keys present in `fields` change."""
        task = await self.get(user_id, task_id)
        for key, value in fields.items():
            if key == "due_date":
                value = to_naive_utc(value)
            elif key == "category" and not value:
                value = DEFAULT_CATEGORY
            setattr(task, key, value)
        return await self._save(task)

    async def toggle(self, user_id: int, task_id: int) -> Task:
        task = await self.get(user_id, task_id)
        task.completed = not task.completed
        return await self._save(task)

    async def delete(self, user_id: int, task_id: int) -> None:
        task = await self.get(user_id, task_id)
        await self.db.delete(task)
        await self.db.commit()

    async def delete_completed(self, user_id: int) -> int:
        result = await self.db.execute(
            delete(Task).where(Task.user_id == user_id, Task.completed == True)
        )
        await self.db.commit()
        deleted = result.rowcount or 0
        logger.info(f"Deleted {deleted} completed task(s) for user {user_id}")
        return deleted

    async def stats(self, user_id: int, now: Optional[datetime] = None) -> Dict[str, int]:
        """Counts for the owner's tasks, computed in a single grouped query."""
        now = now or datetime.utcnow()
        stmt = select(
            func.count(Task.id),
            func.sum(case((Task.completed == True, 1), else_=0)),
            func.sum(case((Task.completed == False, 1), else_=0)),
            func.sum(case((Task.priority == TaskPriority.HIGH.value, 1), else_=0)),
            func.sum(case(
                (and_(Task.completed == False, Task.due_date.isnot(None), Task.due_date < now), 1),
                else_=0,
            )),
        ).where(Task.user_id == user_id)

        row: Tuple = (await self.db.execute(stmt)).one()
        total, completed, pending, high_priority, overdue = (int(v or 0) for v in row)
        return {
            "total": total,
            "completed": completed,
            "pending": pending,
            "high_priority": high_priority,
            "overdue": overdue,
        }
