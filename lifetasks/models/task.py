"""
Task, Subtask and TaskReminder models.

A Task owns an ordered list of Subtasks and an ordered list of reminder
timestamps. Both child tables cascade on delete, so removing a Task removes
everything under it in the same transaction.
"""

import enum
import uuid
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lifetasks.db.types import UTCDateTime
from lifetasks.models.base_model import TimestampedModel

if TYPE_CHECKING:
    from lifetasks.models.user import User


class TaskCategory(str, enum.Enum):
    HOME = "home"
    WORK = "work"
    FINANCE = "finance"
    HEALTH = "health"
    FAMILY = "family"
    OTHER = "other"


class TaskStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DEFERRED = "deferred"


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(TimestampedModel):
    """
    Task table - top-level unit of work owned by one user.

    completed_at is set exactly while status is "completed"; TaskService
    maintains that on every status change.
    """

    __tablename__ = "tasks"

    # Owner never changes after creation
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TaskCategory.OTHER.value,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TaskStatus.NOT_STARTED.value,
    )

    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=Priority.MEDIUM.value,
    )

    due_date: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Opaque references (URLs, storage keys)
    attachments: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    ai_generated: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    completed_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    # Relationships
    owner: Mapped["User"] = relationship("User")

    subtasks: Mapped[List["Subtask"]] = relationship(
        "Subtask",
        back_populates="task",
        order_by="Subtask.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    reminders: Mapped[List["TaskReminder"]] = relationship(
        "TaskReminder",
        back_populates="task",
        order_by="TaskReminder.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_tasks_user_created", "user_id", "created_at"),
        Index("ix_tasks_due_date", "due_date"),
    )

    @property
    def reminder_dates(self) -> List[datetime]:
        return [reminder.remind_at for reminder in self.reminders]

    def set_reminder_dates(self, dates: List[datetime]) -> None:
        self.reminders = [TaskReminder(remind_at=value) for value in dates]

    def find_subtask(self, subtask_id: uuid.UUID) -> Optional["Subtask"]:
        for subtask in self.subtasks:
            if subtask.id == subtask_id:
                return subtask
        return None


class Subtask(TimestampedModel):
    """
    Subtask table - a smaller unit of work inside a Task.

    Only addressable through its parent (task_id + id).
    """

    __tablename__ = "subtasks"

    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    due_date: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=Priority.MEDIUM.value,
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    resources: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    completed_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    ai_assisted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    task: Mapped["Task"] = relationship(
        "Task",
        back_populates="subtasks",
    )


class TaskReminder(TimestampedModel):
    """Reminder timestamp attached to a Task, scanned by the reminder sweep."""

    __tablename__ = "task_reminders"

    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    remind_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        index=True,
    )

    task: Mapped["Task"] = relationship(
        "Task",
        back_populates="reminders",
    )
