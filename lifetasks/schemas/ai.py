"""
AI augmentation schemas.

Request/response bodies for the /ai endpoints plus SubtaskProposal, the
typed shape every breakdown (model output or fallback) is normalized into.
"""

import math
from typing import Any, List, Optional
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator

from lifetasks.models.task import Priority
from lifetasks.schemas.base import CamelModel, strip_text
from lifetasks.schemas.task import TaskRead

PRIORITY_VALUES = {p.value for p in Priority}

# Ten years; keeps now + offset inside the datetime range
MAX_OFFSET_DAYS = 3650


def normalize_priority(value: Any, default: str = Priority.MEDIUM.value) -> str:
    """Map free-form priority text onto low/medium/high; anything else is the default."""
    if isinstance(value, Priority):
        return value.value
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in PRIORITY_VALUES:
            return candidate
    return default


def coerce_offset_days(value: Any) -> Optional[int]:
    """
    Accept 3, 3.0 or "3" as a day offset; anything else (negative, NaN or
    infinite included) is None. Offsets above MAX_OFFSET_DAYS are clamped.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        days = int(value)
    elif isinstance(value, str) and value.strip().lstrip("+").isdigit():
        days = int(value.strip().lstrip("+"))
    else:
        return None
    if days < 0:
        return None
    return min(days, MAX_OFFSET_DAYS)


class SubtaskProposal(CamelModel):
    """One proposed subtask from a breakdown."""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    due_date_offset_days: Optional[int] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return strip_text(v)

    @field_validator("priority", mode="before")
    @classmethod
    def canonical_priority(cls, v):
        return normalize_priority(v)

    @field_validator("due_date_offset_days", mode="before")
    @classmethod
    def offset_days(cls, v):
        return coerce_offset_days(v)


class BreakdownRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    task_id: Optional[UUID] = None


class BreakdownResponse(CamelModel):
    subtasks: List[SubtaskProposal]
    fallback: bool = False
    task: Optional[TaskRead] = None


class PrioritizeItem(CamelModel):
    """A task to prioritize; unknown fields are echoed back untouched."""

    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    priority: Optional[str] = None


class PrioritizeRequest(CamelModel):
    tasks: List[PrioritizeItem] = Field(default_factory=list)


class SuggestionTask(CamelModel):
    """Task fields accepted inline by /ai/suggestions."""

    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None


class SuggestionRequest(CamelModel):
    task: Optional[SuggestionTask] = None
    task_id: Optional[UUID] = None


class SuggestionResponse(CamelModel):
    suggestions: str
    fallback: bool = False


class SubtaskSuggestionRequest(CamelModel):
    task_id: UUID
    subtask_id: UUID
    question: Optional[str] = None


class SubtaskSuggestionResponse(SuggestionResponse):
    subtask_id: UUID
    ai_assisted: bool = False
