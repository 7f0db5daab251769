"""
Authentication router for registration, login and the user's own profile.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lifetasks.core.dependencies import get_current_user
from lifetasks.db.session import get_db
from lifetasks.models.user import User
from lifetasks.repositories.user_repository import UserRepository
from lifetasks.schemas.user import LoginRequest, LoginResponse, PreferencesUpdate, UserCreate, UserRead
from lifetasks.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create an account and return an access token for it.

    Emails are stored lowercase; registering an existing email returns 409.
    """
    auth_service = AuthService(db)
    result = await auth_service.register(user_data)
    await db.commit()
    return result


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate user and return a bearer access token."""
    auth_service = AuthService(db)
    return await auth_service.login(credentials)


@router.get("/verify", response_model=UserRead)
async def verify(current_user: User = Depends(get_current_user)):
    """
    Get information about the currently authenticated user.
    """
    return current_user


@router.put("/preferences", response_model=UserRead)
async def update_preferences(
    data: PreferencesUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update name, location and preferences of the current user."""
    user = await UserRepository(db).update_profile(current_user, data)
    await db.commit()
    return user
