"""
Authentication API routes.
"""
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from strideboard.core.config import settings
from strideboard.core.database import get_db_session
from strideboard.core.exceptions import AuthenticationException
from strideboard.core.logger import logger
from strideboard.core.security import create_user_token
from strideboard.modules.auth.schemas import LoginResponse, UserCreate, UserResponse
from strideboard.modules.auth.service import AuthService

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: UserCreate,
    session: AsyncSession = Depends(get_db_session)
):
    """Register a new user."""
    user = await AuthService(session).create_user(request)
    logger.info("User registered", user_id=str(user.id))
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_db_session)
):
    """Authenticate with e-mail (``username`` form field) and password."""
    user = await AuthService(session).authenticate_user(
        email=form_data.username,
        password=form_data.password
    )
    if not user:
        raise AuthenticationException("Invalid credentials")

    return LoginResponse(
        access_token=create_user_token(user.id, user.email),
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user),
    )
