"""
Authentication models.

This module defines the database models for user identity.
"""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from strideboard.core.models import BaseModel


class User(BaseModel):
    """User model for identity and profile."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="User's email address (unique, lower case)"
    )

    display_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="User's display name"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Salted bcrypt hash"
    )

    def __repr__(self) -> str:
        """String representation of the User model."""
        return f"<User(id={self.id}, email='{self.email}')>"
