"""
User Pydantic schemas.
"""

from typing import Literal, Optional

from pydantic import EmailStr, Field, field_validator

from lifetasks.schemas.base import CamelModel, RecordRead, blank_to_none, strip_text


class NotificationMethods(CamelModel):
    email: bool = True
    push: bool = False


class UserPreferences(CamelModel):
    """Per-user preferences sub-document."""

    theme: Literal["light", "dark", "system"] = "system"
    reminder_frequency: Literal["daily", "weekly", "custom"] = "daily"
    notification_methods: NotificationMethods = Field(default_factory=NotificationMethods)


class UserCreate(CamelModel):
    """Schema for registering a new user."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    location: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return strip_text(v)


class PreferencesUpdate(CamelModel):
    """Schema for updating profile fields and preferences."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = None
    preferences: Optional[UserPreferences] = None

    @field_validator("location")
    @classmethod
    def clean_location(cls, v):
        return blank_to_none(v)


class UserRead(RecordRead):
    """Schema for reading user data (API response)."""

    name: str
    email: str
    location: Optional[str] = None
    preferences: UserPreferences
    is_active: bool


class LoginRequest(CamelModel):
    """Schema for login request."""

    email: EmailStr
    password: str


class LoginResponse(CamelModel):
    """Schema for login and registration responses."""

    access_token: str
    token_type: str = "bearer"
    user: UserRead
