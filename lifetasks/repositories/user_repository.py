"""
User repository - database operations for User.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from lifetasks.models.user import User, default_preferences
from lifetasks.schemas.user import PreferencesUpdate, UserCreate, UserPreferences
from lifetasks.core.security import hash_password
from lifetasks.utils.time import utc_now


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive)."""
        if not email or not email.strip():
            return None
        email_clean = normalize_email(email)
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email_clean)
        )
        return result.scalar_one_or_none()

    async def create(self, data: UserCreate) -> User:
        """Create a new user."""
        user = User(
            name=data.name,
            email=normalize_email(data.email),
            hashed_password=hash_password(data.password),
            location=data.location,
            preferences=default_preferences(),
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def update_profile(self, user: User, data: PreferencesUpdate) -> User:
        """Update name, location and preferences from the fields that were sent."""
        update_data = data.model_dump(exclude_unset=True)

        if "name" in update_data and update_data["name"]:
            user.name = update_data["name"].strip()
        if "location" in update_data:
            user.location = update_data["location"]
        if data.preferences is not None:
            current = UserPreferences.model_validate(user.preferences or {}).model_dump()
            sent = data.preferences.model_dump(exclude_unset=True)
            methods = {**current["notification_methods"], **sent.pop("notification_methods", {})}
            current.update(sent)
            current["notification_methods"] = methods
            # Reassign so the JSON column is flagged dirty
            user.preferences = UserPreferences.model_validate(current).model_dump(by_alias=True)

        user.updated_at = utc_now()
        await self.db.flush()
        return user
