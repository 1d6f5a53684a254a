"""
User profile API routes.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from strideboard.core.database import get_db_session
from strideboard.core.security import create_user_token
from strideboard.modules.auth.dependencies import get_current_user
from strideboard.modules.auth.models import User
from strideboard.modules.auth.schemas import (
    PasswordChange,
    ProfileUpdateResponse,
    UserResponse,
    UserSummary,
    UserUpdate,
)
from strideboard.modules.auth.service import AuthService

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: User = Depends(get_current_user)):
    """Get current user profile."""
    return UserResponse.model_validate(current_user)


@router.patch("/me", response_model=ProfileUpdateResponse)
async def update_current_user_profile(
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Update display name and/or e-mail; returns a reissued token."""
    user = await AuthService(session).update_user(current_user, user_update)
    return ProfileUpdateResponse(
        user=UserResponse.model_validate(user),
        access_token=create_user_token(user.id, user.email),
    )


@router.patch("/me/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    password_data: PasswordChange,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Change the caller's password."""
    await AuthService(session).change_password(
        current_user,
        password_data.current_password,
        password_data.new_password
    )


@router.get("/search", response_model=List[UserSummary])
async def search_users(
    query: str = Query("", description="Part of an e-mail address"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Find users by e-mail, excluding the caller."""
    users = await AuthService(session).search_users(query, exclude_user_ids=[current_user.id])
    return [UserSummary.model_validate(user) for user in users]
