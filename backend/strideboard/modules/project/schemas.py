"""
Project schemas.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    name: str = Field(..., max_length=255, description="Project name")
    description: Optional[str] = Field(None, description="Project description")


class ProjectUpdate(BaseModel):
    """
    Schema for updating a project.

    A blank name is ignored; ``description`` may be set to null to clear it.
    """

    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class ProjectResponse(BaseModel):
    """Schema for project response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    workspace_id: UUID
    creator_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class CreatorCheck(BaseModel):
    is_creator: bool
