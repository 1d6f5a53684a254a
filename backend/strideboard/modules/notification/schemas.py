"""
Notification schemas.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class InboxItem(BaseModel):
    """A notification as shown in the caller's inbox."""

    id: UUID
    type: str = Field(..., description="'invite' or 'update'")
    workspace_id: UUID
    workspace_name: str
    project_name: Optional[str] = None
    title: str
    subtitle: str
    reference_id: Optional[str] = Field(
        None,
        description="Workspace id for invites, work item id for assignment updates"
    )
    is_unread: bool
    created_at: datetime


class UnreadStatus(BaseModel):
    has_unread: bool
