"""
FastAPI dependencies for the application.
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from lifetasks.core.security import token_manager
from lifetasks.db.session import get_db
from lifetasks.errors import ForbiddenError, UnauthorizedError
from lifetasks.models.user import User
from lifetasks.repositories.user_repository import UserRepository

# Security scheme for bearer tokens; auto_error=False so a missing header
# produces our 401 payload instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from the bearer token.

    The user is resolved per request and passed explicitly to every service
    call; nothing about identity is kept at module level.

    Raises:
        401: If token is missing, invalid, expired or the user is gone
        403: If user is not active
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required")

    payload = token_manager.decode_access_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Invalid authentication credentials")

    user_id_str = payload.get("user_id")
    try:
        user_id = UUID(user_id_str)
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token payload")

    user = await UserRepository(db).get_by_id(user_id)
    if not user:
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise ForbiddenError("User account is inactive")

    return user
