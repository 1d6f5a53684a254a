"""
Authentication dependencies.

This module provides the FastAPI dependency that resolves the authenticated
principal for a request.
"""
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from strideboard.core.database import get_db_session
from strideboard.core.exceptions import AuthenticationException
from strideboard.core.logger import bind_request_context
from strideboard.core.security import TokenError, decode_token
from strideboard.modules.auth.models import User
from strideboard.modules.auth.service import AuthService

logger = get_logger(__name__)

# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login", auto_error=False)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session)
) -> User:
    """
    Get the current authenticated user from JWT token.

    Args:
        token: JWT access token
        db: Request database session

    Returns:
        The authenticated user

    Raises:
        AuthenticationException: If token is missing or invalid, or the user no longer exists
    """
    if not token:
        raise AuthenticationException("Not authenticated")

    try:
        payload = decode_token(token)
    except TokenError as e:
        raise AuthenticationException(str(e))

    user_id = payload.get("sub")
    if user_id is None or payload.get("type") != "access":
        raise AuthenticationException("Could not validate credentials")

    user = await AuthService(db).get_user_by_id(user_id)
    if user is None:
        logger.warning("User not found for token", user_id=user_id)
        raise AuthenticationException("Could not validate credentials")

    bind_request_context(user_id=str(user.id))
    return user
