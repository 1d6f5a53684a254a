"""
Project models.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from strideboard.core.models import BaseModel


class Project(BaseModel):
    """Container of work items within a workspace."""

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Project name"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Project description"
    )

    workspace_id: Mapped[UUID] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the owning workspace"
    )

    creator_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="ID of the user who created the project"
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}', workspace_id={self.workspace_id})>"
