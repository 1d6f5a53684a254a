"""
Workspace models.

This module defines the database models for workspaces and memberships.
"""
from enum import Enum
from uuid import UUID

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from strideboard.core.models import BaseModel


class WorkspaceRole(str, Enum):
    """Workspace role enumeration."""
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"

    @property
    def display_name(self) -> str:
        """Human-readable role name."""
        return self.value.title()


class Workspace(BaseModel):
    """Top-level multi-tenant container owned by one user."""

    __tablename__ = "workspaces"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Workspace name"
    )

    slug: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="URL slug (unique)"
    )

    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="ID of the workspace owner"
    )

    def __repr__(self) -> str:
        """String representation of the Workspace model."""
        return f"<Workspace(id={self.id}, slug='{self.slug}', owner_id={self.owner_id})>"


class Membership(BaseModel):
    """(user, workspace, role) binding."""

    __tablename__ = "memberships"

    workspace_id: Mapped[UUID] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the workspace"
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user"
    )

    role: Mapped[WorkspaceRole] = mapped_column(
        SAEnum(WorkspaceRole, native_enum=False, length=20),
        nullable=False,
        default=WorkspaceRole.MEMBER,
        comment="Role of the user in the workspace"
    )

    __table_args__ = (
        UniqueConstraint("workspace_id", "user_id", name="uq_membership_workspace_user"),
    )

    def __repr__(self) -> str:
        """String representation of the Membership model."""
        return f"<Membership(workspace_id={self.workspace_id}, user_id={self.user_id}, role={self.role})>"
