"""
Authentication service for registration, login and token issuance.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from lifetasks.core.security import token_manager, verify_password
from lifetasks.errors import ConflictError, UnauthorizedError
from lifetasks.models.user import User
from lifetasks.repositories.user_repository import UserRepository
from lifetasks.schemas.user import LoginRequest, LoginResponse, UserCreate, UserRead

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.user_repository = UserRepository(db)

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by email and password.

        Returns:
            User object if authentication successful, None otherwise
        """
        user = await self.user_repository.get_by_email(email)

        if not user:
            return None

        if not user.is_active:
            return None

        if not verify_password(password, user.hashed_password):
            return None

        return user

    def build_login_response(self, user: User) -> LoginResponse:
        return LoginResponse(
            access_token=token_manager.create_access_token(user.id, user.email),
            token_type="bearer",
            user=UserRead.model_validate(user),
        )

    async def register(self, data: UserCreate) -> LoginResponse:
        """Create an account and return a token for it."""
        existing = await self.user_repository.get_by_email(data.email)
        if existing:
            raise ConflictError("Email already registered")

        user = await self.user_repository.create(data)
        logger.info("Registered user %s", user.id)
        return self.build_login_response(user)

    async def login(self, credentials: LoginRequest) -> LoginResponse:
        user = await self.authenticate_user(credentials.email, credentials.password)
        if not user:
            raise UnauthorizedError("Incorrect email or password")
        return self.build_login_response(user)
