"""
Base database models with common fields and utilities.

This module provides:
- BaseModel with common fields (id, created_at, updated_at)
- Mixins for common functionality
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""

    # Type annotation map for SQLAlchemy 2.0
    type_annotation_map = {
        str: String(255),  # Default string length
    }


class TimestampMixin:
    """Mixin for adding timestamp fields to models."""

    # Python-side defaults keep the values loaded on the instance after a flush,
    # so async code never triggers an implicit refresh.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was created",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was last updated",
    )


class UUIDMixin:
    """Mixin for adding UUID primary key to models."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
        doc="Unique identifier for the record",
    )


class BaseModel(Base, UUIDMixin, TimestampMixin):
    """
    Base model class with common fields.

    All application models should inherit from this class to get:
    - UUID primary key (id)
    - Created timestamp (created_at)
    - Updated timestamp (updated_at)

    Example:
        class User(BaseModel):
            __tablename__ = "users"

            email: Mapped[str] = mapped_column(String(255), unique=True)
    """

    __abstract__ = True

    def __repr__(self) -> str:
        """String representation of the model."""
        class_name = self.__class__.__name__
        return f"<{class_name}(id={self.id})>"
