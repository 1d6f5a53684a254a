"""
Unit tests for AuthService and the token helpers.

This module tests registration, login, profile updates, password changes
and user search.
"""
from datetime import timedelta
from unittest.mock import Mock, patch
from uuid import uuid4

import pytest
from conftest import create_user

from strideboard.core.exceptions import BadRequestException, ConflictException
from strideboard.core.security import (
    TokenError,
    create_access_token,
    create_user_token,
    decode_token,
    generate_password_hash,
    verify_password,
)
from strideboard.modules.auth.models import User
from strideboard.modules.auth.schemas import UserCreate, UserUpdate
from strideboard.modules.auth.service import AuthService


def create_mock_user(email: str = "test@example.com") -> Mock:
    user = Mock(spec=User)
    user.id = uuid4()
    user.email = email
    user.display_name = "Test User"
    user.hashed_password = "hashed"
    return user


def scalar_result(value) -> Mock:
    result = Mock()
    result.scalar_one_or_none.return_value = value
    return result


class TestAuthServiceUserRetrieval:
    """Test user retrieval methods."""

    @pytest.mark.asyncio
    async def test_get_user_by_id_invalid_uuid(self, mock_db_session):
        """Malformed ids never reach the database."""
        # Arrange
        service = AuthService(mock_db_session)

        # Act
        result = await service.get_user_by_id("invalid-uuid")

        # Assert
        assert result is None
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_user_by_email_success(self, mock_db_session):
        """Test successful user retrieval by email."""
        # Arrange
        mock_user = create_mock_user()
        mock_db_session.execute.return_value = scalar_result(mock_user)
        service = AuthService(mock_db_session)

        # Act
        result = await service.get_user_by_email("  TEST@example.com ")

        # Assert
        assert result == mock_user
        mock_db_session.execute.assert_called_once()


class TestAuthServiceUserCreation:
    """Test user registration."""

    @pytest.mark.asyncio
    @patch("strideboard.modules.auth.service.generate_password_hash")
    async def test_create_user_success(self, mock_hash, mock_db_session):
        """Test successful user creation."""
        # Arrange
        mock_hash.return_value = "hashed_password"
        mock_db_session.execute.return_value = scalar_result(None)
        user_data = UserCreate(email="New@Example.com", password="password123", display_name=" New ")
        service = AuthService(mock_db_session)

        # Act
        result = await service.create_user(user_data)

        # Assert
        assert isinstance(result, User)
        assert result.email == "new@example.com"
        assert result.display_name == "New"
        assert result.hashed_password == "hashed_password"
        mock_db_session.add.assert_called_once()
        mock_db_session.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_create_user_email_exists(self, mock_db_session):
        """Test user creation when email already exists."""
        # Arrange
        mock_db_session.execute.return_value = scalar_result(create_mock_user())
        service = AuthService(mock_db_session)

        # Act & Assert
        with pytest.raises(ConflictException, match="already exists"):
            await service.create_user(UserCreate(email="test@example.com", password="password123"))
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_registration_in_database(self, db_session):
        """A second account with the same address differing only in case is rejected."""
        service = AuthService(db_session)
        await service.create_user(UserCreate(email="dup@example.com", password="password123"))

        with pytest.raises(ConflictException):
            await service.create_user(UserCreate(email="DUP@example.com", password="password123"))


class TestAuthServiceAuthentication:
    """Test user authentication methods."""

    @pytest.mark.asyncio
    @patch("strideboard.modules.auth.service.verify_password")
    async def test_authenticate_user_success(self, mock_verify, mock_db_session):
        """Test successful user authentication."""
        # Arrange
        mock_user = create_mock_user()
        mock_db_session.execute.return_value = scalar_result(mock_user)
        mock_verify.return_value = True
        service = AuthService(mock_db_session)

        # Act
        result = await service.authenticate_user("test@example.com", "password123")

        # Assert
        assert result == mock_user
        mock_verify.assert_called_once_with("password123", "hashed")

    @pytest.mark.asyncio
    async def test_authenticate_user_not_found(self, mock_db_session):
        """Test authentication when user not found."""
        # Arrange
        mock_db_session.execute.return_value = scalar_result(None)
        service = AuthService(mock_db_session)

        # Act
        result = await service.authenticate_user("nobody@example.com", "password")

        # Assert
        assert result is None

    @pytest.mark.asyncio
    async def test_authenticate_with_real_hash(self, db_session):
        """Registration stores a bcrypt hash that login verifies."""
        service = AuthService(db_session)
        await service.create_user(UserCreate(email="erin@example.com", password="correct horse"))

        assert await service.authenticate_user("ERIN@example.com", "correct horse") is not None
        assert await service.authenticate_user("erin@example.com", "wrong horse") is None


class TestAuthServiceProfile:
    """Profile and password changes."""

    @pytest.mark.asyncio
    async def test_update_email_conflict(self, db_session, alice, bob):
        """Taking another user's address is a conflict."""
        with pytest.raises(ConflictException):
            await AuthService(db_session).update_user(alice, UserUpdate(email="bob@example.com"))

    @pytest.mark.asyncio
    async def test_update_profile(self, db_session, alice):
        updated = await AuthService(db_session).update_user(
            alice, UserUpdate(email="Alice.New@Example.com", display_name="  Al ")
        )

        assert updated.email == "alice.new@example.com"
        assert updated.display_name == "Al"

    @pytest.mark.asyncio
    async def test_blank_display_name_is_ignored(self, db_session, alice):
        """Whitespace-only names keep the current display name."""
        service = AuthService(db_session)
        await service.update_user(alice, UserUpdate(display_name="Alice"))

        updated = await service.update_user(alice, UserUpdate(display_name="   "))

        assert updated.display_name == "Alice"

    @pytest.mark.asyncio
    async def test_change_password(self, db_session):
        """The current password must verify before it is replaced."""
        service = AuthService(db_session)
        user = await service.create_user(UserCreate(email="frank@example.com", password="first-secret"))

        with pytest.raises(BadRequestException):
            await service.change_password(user, "not-it", "second-secret")

        await service.change_password(user, "first-secret", "second-secret")

        assert await service.authenticate_user("frank@example.com", "second-secret") is not None
        assert await service.authenticate_user("frank@example.com", "first-secret") is None


class TestAuthServiceSearch:
    """User search by e-mail fragment."""

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, db_session, alice, bob):
        found = await AuthService(db_session).search_users("ALI")

        assert [user.email for user in found] == ["alice@example.com"]

    @pytest.mark.asyncio
    async def test_short_query_returns_nothing(self, db_session, alice):
        assert await AuthService(db_session).search_users("a") == []
        assert await AuthService(db_session).search_users("  ") == []

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, db_session, alice):
        assert await AuthService(db_session).search_users("%%") == []

    @pytest.mark.asyncio
    async def test_exclusions_and_limit(self, db_session, alice, bob, carol):
        service = AuthService(db_session)

        found = await service.search_users("example", exclude_user_ids=[bob.id])
        assert [user.email for user in found] == ["alice@example.com", "carol@example.com"]

        limited = await service.search_users("example", limit=1)
        assert len(limited) == 1

    @pytest.mark.asyncio
    async def test_placeholder_hash_never_verifies(self, db_session):
        user = await create_user(db_session, "gina@example.com")

        assert await AuthService(db_session).authenticate_user(user.email, "anything") is None


class TestTokens:
    """JWT helpers."""

    def test_user_token_round_trip(self):
        user_id = uuid4()
        payload = decode_token(create_user_token(user_id, "alice@example.com"))

        assert payload["sub"] == str(user_id)
        assert payload["email"] == "alice@example.com"
        assert payload["type"] == "access"

    def test_expired_token(self):
        token = create_access_token({"sub": "x"}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(TokenError, match="expired"):
            decode_token(token)

    def test_tampered_token(self):
        token = create_user_token(uuid4(), "alice@example.com")

        with pytest.raises(TokenError):
            decode_token(token.rsplit(".", 1)[0] + ".AAAA")

    def test_password_hashing(self):
        hashed = generate_password_hash("password123")

        assert hashed != "password123"
        assert verify_password("password123", hashed) is True
        assert verify_password("password124", hashed) is False
