"""
Task repository - database operations for Task and its children.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lifetasks.models.task import Task, TaskReminder, TaskStatus


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_owner(
        self,
        user_id: UUID,
        category: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> List[Task]:
        """List a user's tasks, newest first."""
        query = select(Task).where(Task.user_id == user_id)

        if category is not None:
            query = query.where(Task.category == category)
        if status is not None:
            query = query.where(Task.status == status)
        if priority is not None:
            query = query.where(Task.priority == priority)

        query = query.order_by(Task.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, task_id: UUID) -> Optional[Task]:
        """
        Get a task by ID regardless of owner.

        Ownership is decided by TaskService so it can tell "missing" from
        "belongs to someone else".
        """
        result = await self.db.execute(
            select(Task).where(Task.id == task_id)
        )
        return result.scalar_one_or_none()

    async def add(self, task: Task) -> Task:
        self.db.add(task)
        await self.db.flush()
        return task

    async def save(self, task: Task) -> Task:
        """Flush pending changes on a task and its children as one unit."""
        await self.db.flush()
        return task

    async def delete(self, task: Task) -> None:
        """Delete a task; subtasks and reminders go with it."""
        await self.db.delete(task)
        await self.db.flush()

    async def list_reminder_candidates(
        self,
        due_from: datetime,
        due_until: datetime,
        remind_from: datetime,
        remind_until: datetime,
    ) -> List[Task]:
        """
        Open tasks due inside [due_from, due_until) or with a reminder inside
        [remind_from, remind_until), across all users, owners preloaded.
        """
        reminder_hit = (
            select(TaskReminder.task_id)
            .where(
                TaskReminder.remind_at >= remind_from,
                TaskReminder.remind_at < remind_until,
            )
        )
        query = (
            select(Task)
            .where(
                Task.status != TaskStatus.COMPLETED.value,
                or_(
                    (Task.due_date >= due_from) & (Task.due_date < due_until),
                    Task.id.in_(reminder_hit),
                ),
            )
            .options(selectinload(Task.owner))
            .order_by(Task.user_id, Task.due_date)
        )
        result = await self.db.execute(query)
        return list(result.scalars().unique().all())
