"""
User model for authentication and reminder preferences.
"""

from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from lifetasks.models.base_model import TimestampedModel


def default_preferences() -> Dict[str, Any]:
    return {
        "theme": "system",
        "reminderFrequency": "daily",
        "notificationMethods": {"email": True, "push": False},
    }


class User(TimestampedModel):
    """
    User table - represents registered account holders.

    Each user owns their tasks; nothing is shared between users.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Always stored lowercase, see UserRepository
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Free-text city/region, passed to the AI adapter as context
    location: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    preferences: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=default_preferences,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    __table_args__ = (
        Index("ix_users_email", "email", unique=True),
    )

    @property
    def wants_email_reminders(self) -> bool:
        methods = (self.preferences or {}).get("notificationMethods") or {}
        return bool(methods.get("email", True))
