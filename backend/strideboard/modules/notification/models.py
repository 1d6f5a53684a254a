"""
Notification models.

A notification is either a pending workspace invite or an informational alert.
"""
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from strideboard.core.models import BaseModel


class NotificationType(str, Enum):
    """Notification type enumeration."""
    INVITE = "INVITE"
    UPDATE = "UPDATE"


class Notification(BaseModel):
    """Inbox entry addressed to one recipient."""

    __tablename__ = "notifications"

    recipient_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the recipient user"
    )

    type: Mapped[NotificationType] = mapped_column(
        SAEnum(NotificationType, native_enum=False, length=20),
        nullable=False,
    )

    workspace_id: Mapped[UUID] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Workspace the notification is about"
    )

    project_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Project name for work item alerts"
    )

    reference_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="Workspace id for invites, work item id for alerts"
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    subtitle: Mapped[str] = mapped_column(String(500), nullable=False)

    is_unread: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # at most one outstanding invite per (recipient, workspace)
    __table_args__ = (
        Index(
            "uq_notification_pending_invite",
            "recipient_id",
            "workspace_id",
            unique=True,
            sqlite_where=text("type = 'INVITE'"),
            postgresql_where=text("type = 'INVITE'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type={self.type}, recipient_id={self.recipient_id})>"
