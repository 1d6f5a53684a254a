"""
Work item schemas.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import WorkItemPriority, WorkItemStatus, WorkItemType


class WorkItemCreate(BaseModel):
    """Schema for creating a work item."""

    title: str = Field(..., max_length=500, description="Work item title")
    description: Optional[str] = None
    status: WorkItemStatus = WorkItemStatus.BACKLOG
    priority: WorkItemPriority = WorkItemPriority.MEDIUM
    type: WorkItemType = WorkItemType.TASK
    assignee_id: Optional[UUID] = None


class WorkItemUpdate(BaseModel):
    """
    Schema for updating a work item.

    Omitted fields are left unchanged. A blank title is ignored and an explicit
    ``"assignee_id": null`` unassigns the item.
    """

    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    status: Optional[WorkItemStatus] = None
    priority: Optional[WorkItemPriority] = None
    type: Optional[WorkItemType] = None
    assignee_id: Optional[UUID] = None


class WorkItemMove(BaseModel):
    """Drag-and-drop placement between two neighbours of the same project."""

    before_id: Optional[UUID] = Field(None, description="Item that ends up directly above")
    after_id: Optional[UUID] = Field(None, description="Item that ends up directly below")
    status: Optional[WorkItemStatus] = Field(None, description="New board column")


class WorkItemResponse(BaseModel):
    """Schema for work item response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    status: WorkItemStatus
    priority: WorkItemPriority
    type: WorkItemType
    position: float
    project_id: UUID
    creator_id: Optional[UUID] = None
    assignee_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime
