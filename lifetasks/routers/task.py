"""
Task router - API endpoints for tasks, subtasks and reminders.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from lifetasks.core.dependencies import get_current_user
from lifetasks.db.session import get_db
from lifetasks.errors import ValidationError
from lifetasks.models.user import User
from lifetasks.schemas.task import (
    MessageResponse,
    ReminderCreate,
    SubtaskCreate,
    SubtaskUpdate,
    TaskCreate,
    TaskFilters,
    TaskRead,
    TaskUpdate,
)
from lifetasks.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskRead])
async def list_tasks(
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List the current user's tasks, newest first.

    Filters: category, status, priority (case-insensitive).
    """
    try:
        filters = TaskFilters(category=category, status=status, priority=priority)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"{field}: {first.get('msg', 'invalid value')}")
    service = TaskService(db)
    return await service.list_tasks(current_user, filters)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a task by ID."""
    service = TaskService(db)
    return await service.get_task(current_user, task_id)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new task."""
    service = TaskService(db)
    task = await service.create_task(current_user, data)
    await db.commit()
    return task


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: UUID,
    data: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a task. Only the fields present in the body change."""
    service = TaskService(db)
    task = await service.update_task(current_user, task_id, data)
    await db.commit()
    return task


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a task together with its subtasks and reminders."""
    service = TaskService(db)
    await service.delete_task(current_user, task_id)
    await db.commit()
    return MessageResponse(message="Task deleted successfully")


@router.post(
    "/{task_id}/subtasks",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_subtask(
    task_id: UUID,
    data: SubtaskCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Append a subtask; returns the parent task."""
    service = TaskService(db)
    task = await service.add_subtask(current_user, task_id, data)
    await db.commit()
    return task


@router.put("/{task_id}/subtasks/{subtask_id}", response_model=TaskRead)
async def update_subtask(
    task_id: UUID,
    subtask_id: UUID,
    data: SubtaskUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = TaskService(db)
    task = await service.update_subtask(current_user, task_id, subtask_id, data)
    await db.commit()
    return task


@router.delete("/{task_id}/subtasks/{subtask_id}", response_model=MessageResponse)
async def delete_subtask(
    task_id: UUID,
    subtask_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = TaskService(db)
    await service.delete_subtask(current_user, task_id, subtask_id)
    await db.commit()
    return MessageResponse(message="Subtask deleted successfully")


@router.post(
    "/{task_id}/reminders",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_reminder(
    task_id: UUID,
    data: ReminderCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Schedule an extra reminder date for a task."""
    service = TaskService(db)
    task = await service.add_reminder(current_user, task_id, data.remind_at)
    await db.commit()
    return task
