"""
Authentication schemas.

This module defines Pydantic models for authentication requests and responses.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


class UserBase(BaseModel):
    """Base user schema with common fields."""

    email: EmailStr = Field(..., description="User's email address")
    display_name: str = Field(default="", max_length=255, description="Display name")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        """Store and compare e-mails in lower case."""
        return _normalize_email(v)

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str) -> str:
        return v.strip()


class UserCreate(UserBase):
    """Schema for user registration."""

    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (minimum 8 characters)"
    )


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr = Field(..., description="Registered e-mail address")
    password: str = Field(..., description="Password")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class UserUpdate(BaseModel):
    """Schema for updating the caller's profile."""

    email: Optional[EmailStr] = Field(None, description="New email address")
    display_name: Optional[str] = Field(None, max_length=255, description="New display name")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class PasswordChange(BaseModel):
    """Schema for password change."""

    current_password: str = Field(..., description="Current password")
    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password"
    )


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    display_name: str
    created_at: datetime


class UserSummary(BaseModel):
    """Compact user row used by search results."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    display_name: str


class Token(BaseModel):
    """Schema for token response."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")


class LoginResponse(Token):
    """Token plus the authenticated user."""

    user: UserResponse


class ProfileUpdateResponse(BaseModel):
    """
    Updated profile with a freshly issued token.

    The token embeds the e-mail, so it is reissued whenever the profile changes.
    """

    user: UserResponse
    access_token: str
    token_type: str = "bearer"
