"""
Work item models.

This module defines the task/bug/epic entity placed on project boards.
"""
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from strideboard.core.models import BaseModel


class WorkItemStatus(str, Enum):
    """Board column of a work item."""
    BACKLOG = "BACKLOG"
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class WorkItemPriority(str, Enum):
    """Work item priority."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class WorkItemType(str, Enum):
    """Work item kind."""
    TASK = "TASK"
    BUG = "BUG"
    EPIC = "EPIC"


class WorkItem(BaseModel):
    """A task, bug or epic ordered on its project's board by `position`."""

    __tablename__ = "work_items"

    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Work item title"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Work item description"
    )

    status: Mapped[WorkItemStatus] = mapped_column(
        SAEnum(WorkItemStatus, native_enum=False, length=20),
        nullable=False,
        default=WorkItemStatus.BACKLOG,
    )

    priority: Mapped[WorkItemPriority] = mapped_column(
        SAEnum(WorkItemPriority, native_enum=False, length=20),
        nullable=False,
        default=WorkItemPriority.MEDIUM,
    )

    type: Mapped[WorkItemType] = mapped_column(
        SAEnum(WorkItemType, native_enum=False, length=20),
        nullable=False,
        default=WorkItemType.TASK,
    )

    position: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Fractional sort key within the project"
    )

    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the owning project"
    )

    creator_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="ID of the user who created the work item"
    )

    assignee_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="ID of the assigned user"
    )

    __table_args__ = (
        UniqueConstraint("project_id", "position", name="uq_work_item_project_position"),
    )

    def __repr__(self) -> str:
        return f"<WorkItem(id={self.id}, project_id={self.project_id}, position={self.position})>"
