"""
Base Pydantic schemas with common fields.

These are templates that other schemas inherit from.
The JSON API speaks camelCase (dueDate, aiGenerated, ...); request bodies
also accept the snake_case field names.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every request/response body."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RecordRead(CamelModel):
    """
    Base schema for reading persisted records.

    Includes all the auto-generated fields like id and timestamps.
    """

    id: UUID
    created_at: datetime
    updated_at: datetime


def strip_text(value: Any) -> Any:
    """Trim strings; leave everything else for the field validator."""
    if isinstance(value, str):
        return value.strip()
    return value


def lower_text(value: Any) -> Any:
    """Case-normalize enum input so "HIGH" and "high" are the same value."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
