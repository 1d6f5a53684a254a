"""
Workspace schemas.

This module defines Pydantic models for workspace and membership requests and
responses.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import WorkspaceRole


class WorkspaceCreate(BaseModel):
    """Schema for creating a workspace."""

    name: str = Field(..., min_length=1, max_length=255, description="Workspace name")
    slug: Optional[str] = Field(None, max_length=255, description="URL slug, derived from the name when omitted")
    member_emails: List[str] = Field(default_factory=list, description="Addresses to invite right away")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Workspace name cannot be blank")
        return v


class WorkspaceUpdate(BaseModel):
    """Schema for renaming a workspace."""

    name: str = Field(..., max_length=255, description="New workspace name")


class WorkspaceResponse(BaseModel):
    """Schema for workspace response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class WorkspaceOwnerResponse(BaseModel):
    owner_id: UUID


class MemberResponse(BaseModel):
    """A workspace member with their role."""

    user_id: UUID
    email: str
    display_name: str
    role: WorkspaceRole


class InviteRequest(BaseModel):
    """Schema for inviting users by e-mail."""

    emails: List[str] = Field(..., min_length=1, description="Addresses to invite")


class InviteResponse(BaseModel):
    invited: int = Field(..., description="Number of invites created")


class RoleChange(BaseModel):
    """Schema for changing a member's role. Accepts any letter case."""

    role: str = Field(..., description="ADMIN, MEMBER or VIEWER")
