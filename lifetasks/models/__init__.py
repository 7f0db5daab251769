"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from lifetasks.models.user import User
from lifetasks.models.task import (
    Priority,
    Subtask,
    Task,
    TaskCategory,
    TaskReminder,
    TaskStatus,
)

# Export all models
__all__ = [
    "User",
    "Task",
    "Subtask",
    "TaskReminder",
    "TaskCategory",
    "TaskStatus",
    "Priority",
]
