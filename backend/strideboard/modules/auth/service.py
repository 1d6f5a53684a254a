"""
Authentication service.

This module provides business logic for user registration, login and profile
management.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from strideboard.core.config import settings
from strideboard.core.exceptions import BadRequestException, ConflictException
from strideboard.core.security import generate_password_hash, verify_password
from strideboard.modules.auth.models import User
from strideboard.modules.auth.schemas import UserCreate, UserUpdate

logger = get_logger(__name__)


class AuthService:
    """Service class for authentication operations."""

    def __init__(self, db: AsyncSession):
        """
        Initialize the auth service.

        Args:
            db: Database session
        """
        self.db = db

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User ID (string form, as carried in tokens)

        Returns:
            User if found, None otherwise
        """
        try:
            uuid_id = user_id if isinstance(user_id, UUID) else UUID(str(user_id))
        except ValueError:
            logger.warning("Malformed user id", user_id=str(user_id))
            return None

        result = await self.db.execute(
            select(User).where(User.id == uuid_id)
        )
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email (case-insensitive).

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def create_user(self, user_data: UserCreate) -> User:
        """
        Register a new user.

        Args:
            user_data: User creation data

        Returns:
            Created user

        Raises:
            ConflictException: If the e-mail is already registered
        """
        email = user_data.email.lower()
        if await self.get_user_by_email(email):
            raise ConflictException(
                "User with this email already exists",
                details={"field": "email"}
            )

        user = User(
            email=email,
            display_name=user_data.display_name,
            hashed_password=generate_password_hash(user_data.password),
        )
        self.db.add(user)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException(
                "User with this email already exists",
                details={"field": "email"}
            )

        logger.info("User created", user_id=str(user.id), email=user.email)
        return user

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user with e-mail and password.

        Args:
            email: Registered e-mail
            password: Plain text password

        Returns:
            User if authentication successful, None otherwise
        """
        user = await self.get_user_by_email(email)

        if not user:
            logger.warning("Authentication failed: user not found", email=email)
            return None

        if not verify_password(password, user.hashed_password):
            logger.warning("Authentication failed: invalid password", user_id=str(user.id))
            return None

        logger.info("User authenticated successfully", user_id=str(user.id))
        return user

    async def update_user(self, user: User, user_data: UserUpdate) -> User:
        """
        Update the user's display name and/or e-mail.

        Args:
            user: User to update
            user_data: Changed fields

        Returns:
            Updated user

        Raises:
            ConflictException: If the new e-mail belongs to another user
        """
        if user_data.email is not None and user_data.email != user.email:
            existing = await self.get_user_by_email(user_data.email)
            if existing and existing.id != user.id:
                raise ConflictException(
                    "Email is already in use",
                    details={"field": "email"}
                )
            user.email = user_data.email

        # a blank display name is ignored
        if user_data.display_name is not None and user_data.display_name.strip():
            user.display_name = user_data.display_name.strip()

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException("Email is already in use", details={"field": "email"})

        logger.info("User updated", user_id=str(user.id))
        return user

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """
        Change user password.

        Raises:
            BadRequestException: If the current password does not verify
        """
        if not verify_password(current_password, user.hashed_password):
            logger.warning("Password change failed: invalid current password", user_id=str(user.id))
            raise BadRequestException("Current password is incorrect")

        user.hashed_password = generate_password_hash(new_password)
        await self.db.commit()

        logger.info("Password changed", user_id=str(user.id))

    async def search_users(
        self,
        query: str,
        exclude_user_ids: Optional[List[UUID]] = None,
        limit: Optional[int] = None
    ) -> List[User]:
        """
        Case-insensitive substring search on e-mail.

        Queries shorter than the configured minimum return nothing.

        Args:
            query: Search text
            exclude_user_ids: Users to leave out of the result
            limit: Maximum rows (defaults to the configured limit)

        Returns:
            Matching users ordered by e-mail
        """
        query = (query or "").strip().lower()
        if len(query) < settings.search_min_query_length:
            return []

        stmt = (
            select(User)
            .where(func.lower(User.email).contains(query, autoescape=True))
            .order_by(User.email)
            .limit(limit or settings.search_result_limit)
        )
        if exclude_user_ids:
            stmt = stmt.where(User.id.not_in(exclude_user_ids))

        result = await self.db.execute(stmt)
        return list(result.scalars().all())
