"""
Task and Subtask Pydantic schemas.

Title emptiness is enforced by TaskService (it raises the API's
ValidationError); the schemas only trim and case-normalize input.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from lifetasks.models.task import Priority, TaskCategory, TaskStatus
from lifetasks.schemas.base import CamelModel, RecordRead, lower_text, strip_text


class SubtaskCreate(CamelModel):
    """Schema for adding a subtask to a task."""

    title: str
    description: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    resources: List[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return strip_text(v)

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v):
        return lower_text(v)


class SubtaskUpdate(CamelModel):
    """Schema for updating a subtask. Only fields that are sent change."""

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    resources: Optional[List[str]] = None
    completed: Optional[bool] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return strip_text(v)

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v):
        return lower_text(v)


class SubtaskRead(RecordRead):
    """Schema for reading subtask data (API response)."""

    title: str
    description: Optional[str] = None
    completed: bool
    due_date: Optional[datetime] = None
    priority: Priority
    notes: Optional[str] = None
    resources: List[str] = Field(default_factory=list)
    completed_at: Optional[datetime] = None
    ai_assisted: bool = False


class TaskCreate(CamelModel):
    """Schema for creating a new task."""

    title: str
    description: Optional[str] = None
    category: TaskCategory = TaskCategory.OTHER
    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: Priority = Priority.MEDIUM
    due_date: Optional[datetime] = None
    reminder_dates: List[datetime] = Field(default_factory=list)
    notes: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return strip_text(v)

    @field_validator("category", "status", "priority", mode="before")
    @classmethod
    def normalize_enums(cls, v):
        return lower_text(v)


class TaskUpdate(CamelModel):
    """Schema for updating a task. Only fields that are sent change."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[TaskCategory] = None
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None
    reminder_dates: Optional[List[datetime]] = None
    notes: Optional[str] = None
    attachments: Optional[List[str]] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return strip_text(v)

    @field_validator("category", "status", "priority", mode="before")
    @classmethod
    def normalize_enums(cls, v):
        return lower_text(v)


class TaskRead(RecordRead):
    """Schema for reading task data (API response)."""

    user_id: UUID
    title: str
    description: Optional[str] = None
    category: TaskCategory
    status: TaskStatus
    priority: Priority
    due_date: Optional[datetime] = None
    reminder_dates: List[datetime] = Field(default_factory=list)
    notes: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)
    ai_generated: bool = False
    completed_at: Optional[datetime] = None
    subtasks: List[SubtaskRead] = Field(default_factory=list)


class TaskFilters(CamelModel):
    """Optional filters for listing tasks; None means no restriction."""

    category: Optional[TaskCategory] = None
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None

    @field_validator("category", "status", "priority", mode="before")
    @classmethod
    def normalize_enums(cls, v):
        return lower_text(v)


class ReminderCreate(CamelModel):
    """Schema for scheduling one more reminder on a task."""

    remind_at: datetime


class MessageResponse(CamelModel):
    message: str
