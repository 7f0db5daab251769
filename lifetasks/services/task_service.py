"""
Task business logic service.

Every operation takes the authenticated owner explicitly and checks
ownership on each access. Mutations either apply completely within the
request's transaction or raise before anything is written.
"""

import enum
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lifetasks.errors import ForbiddenError, NotFoundError, ValidationError
from lifetasks.models.task import Priority, Subtask, Task, TaskReminder, TaskStatus
from lifetasks.models.user import User
from lifetasks.repositories.task_repository import TaskRepository
from lifetasks.schemas.ai import SubtaskProposal
from lifetasks.schemas.task import (
    SubtaskCreate,
    SubtaskUpdate,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
)
from lifetasks.utils.time import utc_now

logger = logging.getLogger(__name__)

# Columns that may be cleared with an explicit null
_NULLABLE_TASK_FIELDS = {"description", "due_date", "notes"}
_NULLABLE_SUBTASK_FIELDS = {"description", "due_date", "notes"}


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    return value


def _require_title(title: Optional[str], what: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError(f"{what} title is required")
    return title


def apply_task_status(task: Task, status: str, now: Optional[datetime] = None) -> None:
    """
    Set status and keep completed_at in step with it.

    Entering "completed" stamps completed_at once; leaving it clears it.
    """
    task.status = status
    if status == TaskStatus.COMPLETED.value:
        if task.completed_at is None:
            task.completed_at = now or utc_now()
    else:
        task.completed_at = None


def apply_subtask_completed(subtask: Subtask, completed: bool, now: Optional[datetime] = None) -> None:
    subtask.completed = completed
    if completed:
        if subtask.completed_at is None:
            subtask.completed_at = now or utc_now()
    else:
        subtask.completed_at = None


class TaskService:
    """Service for task and subtask business logic."""

    def __init__(self, db: AsyncSession):
        self.repository = TaskRepository(db)

    async def list_tasks(self, owner: User, filters: Optional[TaskFilters] = None) -> List[Task]:
        """List the owner's tasks matching the filters, newest first."""
        filters = filters or TaskFilters()
        return await self.repository.list_for_owner(
            user_id=owner.id,
            category=_plain(filters.category),
            status=_plain(filters.status),
            priority=_plain(filters.priority),
        )

    async def get_task(self, owner: User, task_id: UUID) -> Task:
        """
        Get a task owned by ``owner``.

        Raises:
            NotFoundError: no task with this id
            ForbiddenError: the task belongs to another user
        """
        task = await self.repository.get_by_id(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        if task.user_id != owner.id:
            raise ForbiddenError("Not authorized to access this task")
        return task

    async def create_task(self, owner: User, data: TaskCreate) -> Task:
        """Create a new task with defaults applied."""
        title = _require_title(data.title, "Task")

        task = Task(
            user_id=owner.id,
            title=title,
            description=data.description,
            category=_plain(data.category),
            priority=_plain(data.priority),
            due_date=data.due_date,
            notes=data.notes,
            attachments=list(data.attachments),
            ai_generated=False,
            subtasks=[],
        )
        task.set_reminder_dates(data.reminder_dates)
        apply_task_status(task, _plain(data.status))

        await self.repository.add(task)
        logger.info("Created task %s for user %s", task.id, owner.id)
        return task

    async def update_task(self, owner: User, task_id: UUID, data: TaskUpdate) -> Task:
        """Apply only the fields present in ``data``."""
        task = await self.get_task(owner, task_id)
        update_data = data.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if value is None and field not in _NULLABLE_TASK_FIELDS:
                raise ValidationError(f"{field} cannot be null")

        if "title" in update_data:
            task.title = _require_title(update_data.pop("title"), "Task")
        if "status" in update_data:
            apply_task_status(task, _plain(update_data.pop("status")))
        if "reminder_dates" in update_data:
            task.set_reminder_dates(update_data.pop("reminder_dates"))

        for field, value in update_data.items():
            setattr(task, field, _plain(value))

        task.updated_at = utc_now()
        await self.repository.save(task)
        return task

    async def delete_task(self, owner: User, task_id: UUID) -> None:
        task = await self.get_task(owner, task_id)
        await self.repository.delete(task)
        logger.info("Deleted task %s for user %s", task_id, owner.id)

    async def add_subtask(self, owner: User, task_id: UUID, data: SubtaskCreate) -> Task:
        """Append a subtask and return the parent task."""
        title = _require_title(data.title, "Subtask")
        task = await self.get_task(owner, task_id)

        task.subtasks.append(
            Subtask(
                title=title,
                description=data.description,
                priority=_plain(data.priority),
                due_date=data.due_date,
                notes=data.notes,
                resources=list(data.resources),
                completed=False,
            )
        )
        task.updated_at = utc_now()
        await self.repository.save(task)
        return task

    async def get_subtask(self, owner: User, task_id: UUID, subtask_id: UUID) -> tuple[Task, Subtask]:
        task = await self.get_task(owner, task_id)
        subtask = task.find_subtask(subtask_id)
        if subtask is None:
            raise NotFoundError("Subtask not found")
        return task, subtask

    async def update_subtask(
        self,
        owner: User,
        task_id: UUID,
        subtask_id: UUID,
        data: SubtaskUpdate,
    ) -> Task:
        task, subtask = await self.get_subtask(owner, task_id, subtask_id)
        update_data = data.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if value is None and field not in _NULLABLE_SUBTASK_FIELDS:
                raise ValidationError(f"{field} cannot be null")

        if "title" in update_data:
            subtask.title = _require_title(update_data.pop("title"), "Subtask")
        if "completed" in update_data:
            apply_subtask_completed(subtask, update_data.pop("completed"))

        for field, value in update_data.items():
            setattr(subtask, field, _plain(value))

        now = utc_now()
        subtask.updated_at = now
        task.updated_at = now
        await self.repository.save(task)
        return task

    async def delete_subtask(self, owner: User, task_id: UUID, subtask_id: UUID) -> Task:
        task, subtask = await self.get_subtask(owner, task_id, subtask_id)
        task.subtasks.remove(subtask)
        task.updated_at = utc_now()
        await self.repository.save(task)
        return task

    async def add_reminder(self, owner: User, task_id: UUID, remind_at: datetime) -> Task:
        """Schedule one more reminder date on a task."""
        task = await self.get_task(owner, task_id)
        task.reminders.append(TaskReminder(remind_at=remind_at))
        task.updated_at = utc_now()
        await self.repository.save(task)
        return task

    async def merge_proposals(
        self,
        owner: User,
        task_id: UUID,
        proposals: Iterable[SubtaskProposal],
        now: Optional[datetime] = None,
    ) -> Task:
        """
        Append one subtask per breakdown proposal and flag the task as
        AI-generated. dueDateOffsetDays is turned into an absolute date.
        """
        task = await self.get_task(owner, task_id)
        now = now or utc_now()

        for proposal in proposals:
            due_date = None
            if proposal.due_date_offset_days is not None:
                due_date = now + timedelta(days=proposal.due_date_offset_days)
            task.subtasks.append(
                Subtask(
                    title=proposal.title,
                    description=proposal.description,
                    priority=_plain(proposal.priority) or Priority.MEDIUM.value,
                    due_date=due_date,
                    completed=False,
                    resources=[],
                )
            )

        task.ai_generated = True
        task.updated_at = now
        await self.repository.save(task)
        return task

    async def mark_subtask_ai_assisted(self, task: Task, subtask: Subtask) -> Task:
        subtask.ai_assisted = True
        now = utc_now()
        subtask.updated_at = now
        task.updated_at = now
        await self.repository.save(task)
        return task


def summarize_task(task: Task) -> Dict[str, Any]:
    """Plain-dict view of a task used as AI prompt context."""
    return {
        "title": task.title,
        "description": task.description,
        "category": task.category,
        "status": task.status,
        "priority": task.priority,
        "dueDate": task.due_date.isoformat() if task.due_date else None,
        "notes": task.notes,
    }
