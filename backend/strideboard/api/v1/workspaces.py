"""
Workspace management API routes.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from strideboard.core.database import get_db_session
from strideboard.modules.auth.dependencies import get_current_user
from strideboard.modules.auth.models import User
from strideboard.modules.auth.schemas import UserSummary
from strideboard.modules.workspace.schemas import (
    InviteRequest,
    InviteResponse,
    MemberResponse,
    RoleChange,
    WorkspaceCreate,
    WorkspaceOwnerResponse,
    WorkspaceResponse,
    WorkspaceUpdate,
)
from strideboard.modules.workspace.service import WorkspaceService

router = APIRouter()


@router.get("", response_model=List[WorkspaceResponse])
async def list_workspaces(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """List the caller's workspaces."""
    workspaces = await WorkspaceService(session).list_user_workspaces(current_user)
    return [WorkspaceResponse.model_validate(ws) for ws in workspaces]


@router.post("", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED)
async def create_workspace(
    workspace_data: WorkspaceCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Create a new workspace owned by the caller."""
    workspace = await WorkspaceService(session).create_workspace(workspace_data, current_user)
    return WorkspaceResponse.model_validate(workspace)


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
async def get_workspace(
    workspace_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    workspace = await WorkspaceService(session).get_workspace(workspace_id, current_user)
    return WorkspaceResponse.model_validate(workspace)


@router.patch("/{workspace_id}", response_model=WorkspaceResponse)
async def rename_workspace(
    workspace_id: UUID,
    workspace_data: WorkspaceUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Rename a workspace (admins only)."""
    workspace = await WorkspaceService(session).rename_workspace(
        workspace_id, workspace_data.name, current_user
    )
    return WorkspaceResponse.model_validate(workspace)


@router.delete("/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workspace(
    workspace_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Delete a workspace with all its projects and work items (admins only)."""
    await WorkspaceService(session).delete_workspace(workspace_id, current_user)


@router.get("/{workspace_id}/owner", response_model=WorkspaceOwnerResponse)
async def get_workspace_owner(
    workspace_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    owner_id = await WorkspaceService(session).get_owner_id(workspace_id, current_user)
    return WorkspaceOwnerResponse(owner_id=owner_id)


@router.get("/{workspace_id}/members", response_model=List[MemberResponse])
async def list_members(
    workspace_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """List workspace members with their roles."""
    return await WorkspaceService(session).list_members(workspace_id, current_user)


@router.get("/{workspace_id}/members/me", response_model=MemberResponse)
async def get_my_membership(
    workspace_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    return await WorkspaceService(session).get_my_membership(workspace_id, current_user)


@router.post("/{workspace_id}/invites", response_model=InviteResponse)
async def invite_members(
    workspace_id: UUID,
    invite_data: InviteRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Invite users by e-mail (admins only)."""
    invited = await WorkspaceService(session).invite_members(
        workspace_id, invite_data.emails, current_user
    )
    return InviteResponse(invited=invited)


@router.patch("/{workspace_id}/members/{user_id}", response_model=MemberResponse)
async def change_member_role(
    workspace_id: UUID,
    user_id: UUID,
    role_data: RoleChange,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Change a member's role (admins only; never the owner)."""
    membership = await WorkspaceService(session).change_member_role(
        workspace_id, user_id, role_data.role, current_user
    )
    member = await session.get(User, membership.user_id)
    return MemberResponse(
        user_id=member.id,
        email=member.email,
        display_name=member.display_name,
        role=membership.role,
    )


@router.delete("/{workspace_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    workspace_id: UUID,
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Remove a member (admins only; never the owner)."""
    await WorkspaceService(session).remove_member(workspace_id, user_id, current_user)


@router.post("/{workspace_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_workspace(
    workspace_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Leave a workspace. The owner cannot leave."""
    await WorkspaceService(session).leave_workspace(workspace_id, current_user)


@router.get("/{workspace_id}/users/search", response_model=List[UserSummary])
async def search_candidates(
    workspace_id: UUID,
    query: str = Query("", description="Part of an e-mail address"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Users matching the query who are not members yet."""
    users = await WorkspaceService(session).search_candidates(workspace_id, query, current_user)
    return [UserSummary.model_validate(user) for user in users]
