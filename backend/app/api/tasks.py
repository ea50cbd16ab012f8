"""
Tasks API
Endpoints for listing, creating and managing the caller's tasks.
All routes require authentication and only ever see the caller's own tasks.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_auth_context, get_task_store
from app.models.task import TaskPriority
from app.schemas.common import ApiResponse, ListResponse, PaginatedResponse
from app.schemas.task import DeletedCount, TaskCreate, TaskResponse, TaskStats, TaskUpdate
from app.services.session import AuthContext
from app.services.task_service import TaskFilters, TaskStore
from app.utils.validation import (
    ensure_valid,
    task_fields,
    validate_priority,
    validate_task_create,
    validate_task_update,
)

router = APIRouter()


# Fixed paths are declared before /{task_id} so they are not captured by it

@router.get("/stats", response_model=ApiResponse[TaskStats])
async def get_task_stats(
    ctx: AuthContext = Depends(get_auth_context),
    tasks: TaskStore = Depends(get_task_store),
):
    """Totals for the dashboard: all, completed, pending, high priority, overdue."""
    stats = await tasks.stats(ctx.user_id)
    return ApiResponse(data=TaskStats(**stats))


@router.delete("/completed", response_model=ApiResponse[DeletedCount])
async def delete_completed_tasks(
    ctx: AuthContext = Depends(get_auth_context),
    tasks: TaskStore = Depends(get_task_store),
):
    deleted = await tasks.delete_completed(ctx.user_id)
    return ApiResponse(
        message=f"{deleted} completed task(s) deleted",
        data=DeletedCount(deleted_count=deleted),
    )


@router.get("/priority/{priority}", response_model=ListResponse[TaskResponse])
async def get_tasks_by_priority(
    priority: str,
    ctx: AuthContext = Depends(get_auth_context),
    tasks: TaskStore = Depends(get_task_store),
):
    ensure_valid(validate_priority(priority))
    items = await tasks.list_by_priority(ctx.user_id, TaskPriority(priority))
    return ListResponse(count=len(items), data=[TaskResponse.model_validate(t) for t in items])


@router.get("", response_model=PaginatedResponse[TaskResponse])
async def list_tasks(
    completed: Optional[bool] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    ctx: AuthContext = Depends(get_auth_context),
    tasks: TaskStore = Depends(get_task_store),
):
    """
    List the caller's tasks with optional filters.
    `sort` is a comma-separated list of fields; prefix with '-' for descending.
    """
    if priority is not None:
        ensure_valid(validate_priority(priority))

    result = await tasks.list(
        ctx.user_id,
        TaskFilters(completed=completed, priority=priority, category=category),
        sort=sort,
        page=page,
        limit=limit,
    )
    return PaginatedResponse(
        count=len(result.items),
        total=result.total,
        page=result.page,
        pages=result.pages,
        data=[TaskResponse.model_validate(t) for t in result.items],
    )


@router.post("", response_model=ApiResponse[TaskResponse], status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    ctx: AuthContext = Depends(get_auth_context),
    tasks: TaskStore = Depends(get_task_store),
):
    ensure_valid(validate_task_create(data))
    task = await tasks.create(ctx.user_id, task_fields(data))
    return ApiResponse(message="Task created successfully", data=TaskResponse.model_validate(task))


@router.get("/{task_id}", response_model=ApiResponse[TaskResponse])
async def get_task(
    task_id: int,
    ctx: AuthContext = Depends(get_auth_context),
    tasks: TaskStore = Depends(get_task_store),
):
    task = await tasks.get(ctx.user_id, task_id)
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.put("/{task_id}", response_model=ApiResponse[TaskResponse])
async def update_task(
    task_id: int,
    data: TaskUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    tasks: TaskStore = Depends(get_task_store),
):
    ensure_valid(validate_task_update(data))
    task = await tasks.update(ctx.user_id, task_id, task_fields(data, partial=True))
    return ApiResponse(message="Task updated successfully", data=TaskResponse.model_validate(task))


@router.put("/{task_id}/toggle", response_model=ApiResponse[TaskResponse])
async def toggle_task(
    task_id: int,
    ctx: AuthContext = Depends(get_auth_context),
    tasks: TaskStore = Depends(get_task_store),
):
    task = await tasks.toggle(ctx.user_id, task_id)
    message = "Task marked as completed" if task.completed else "Task marked as pending"
    return ApiResponse(message=message, data=TaskResponse.model_validate(task))


@router.delete("/{task_id}", response_model=ApiResponse[dict])
async def delete_task(
    task_id: int,
    ctx: AuthContext = Depends(get_auth_context),
    tasks: TaskStore = Depends(get_task_store),
):
    await tasks.delete(ctx.user_id, task_id)
    return ApiResponse(message="Task deleted successfully", data={})
