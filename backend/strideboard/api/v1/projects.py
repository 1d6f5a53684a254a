"""
Project API routes, nested under a workspace.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from strideboard.core.database import get_db_session
from strideboard.modules.auth.dependencies import get_current_user
from strideboard.modules.auth.models import User
from strideboard.modules.project.schemas import (
    CreatorCheck,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)
from strideboard.modules.project.service import ProjectService

router = APIRouter()


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    workspace_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    projects = await ProjectService(session).list_projects(workspace_id, current_user)
    return [ProjectResponse.model_validate(project) for project in projects]


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    workspace_id: UUID,
    project_data: ProjectCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Create a project (admins and members)."""
    project = await ProjectService(session).create_project(workspace_id, project_data, current_user)
    return ProjectResponse.model_validate(project)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    workspace_id: UUID,
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    project = await ProjectService(session).get_project(workspace_id, project_id, current_user)
    return ProjectResponse.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    workspace_id: UUID,
    project_id: UUID,
    project_data: ProjectUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Rename or re-describe a project (admins or the creator)."""
    project = await ProjectService(session).update_project(
        workspace_id, project_id, project_data, current_user
    )
    return ProjectResponse.model_validate(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    workspace_id: UUID,
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """Delete a project and its work items (admins or the creator)."""
    await ProjectService(session).delete_project(workspace_id, project_id, current_user)


@router.get("/{project_id}/is-creator", response_model=CreatorCheck)
async def is_creator(
    workspace_id: UUID,
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    result = await ProjectService(session).is_creator(workspace_id, project_id, current_user)
    return CreatorCheck(is_creator=result)
