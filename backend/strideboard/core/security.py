"""
Security utilities for authentication.

This module provides JWT token handling and password hashing.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
from structlog import get_logger

from strideboard.core.config import get_settings

logger = get_logger(__name__)
settings = get_settings()

# bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72


class SecurityError(Exception):
    """Base exception for security-related errors."""
    pass


class TokenError(SecurityError):
    """Exception raised for token-related errors."""
    pass


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def generate_password_hash(password: str) -> str:
    """
    Generate a salted bcrypt hash for the given password.

    Args:
        password: The plain text password to hash

    Returns:
        The hashed password
    """
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against its hash in constant time.

    Args:
        plain_password: The plain text password
        hashed_password: The hashed password to verify against

    Returns:
        True if password matches, False otherwise
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.warning("Password verification failed", error=str(e))
        return False


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        data: The data to encode in the token
        expires_delta: Token expiration time delta

    Returns:
        The encoded JWT token
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    to_encode.update({"exp": expire, "iat": now, "type": "access"})

    encoded_jwt = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm
    )

    logger.debug("Access token created", expires_at=expire.isoformat())
    return encoded_jwt


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT token to decode

    Returns:
        The decoded token payload

    Raises:
        TokenError: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm]
        )
    except jwt.ExpiredSignatureError:
        logger.info("Token has expired")
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.info("Invalid token", error=str(e))
        raise TokenError("Invalid token")


def create_user_token(user_id: Any, email: str) -> str:
    """Issue an access token identifying a user."""
    return create_access_token({"sub": str(user_id), "email": email})
