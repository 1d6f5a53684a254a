"""
Project service.

This module provides business logic for projects inside a workspace.
"""
from typing import List
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from strideboard.core.exceptions import BadRequestException
from strideboard.core.hierarchy import HierarchyValidator
from strideboard.core.rbac import MembershipAuthority
from strideboard.modules.auth.models import User
from strideboard.modules.work_item.models import WorkItem

from .models import Project
from .schemas import ProjectCreate, ProjectUpdate

logger = get_logger(__name__)


class ProjectService:
    """Service class for project operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.authority = MembershipAuthority(db)
        self.hierarchy = HierarchyValidator(db)

    async def list_projects(self, workspace_id: UUID, user: User) -> List[Project]:
        """
        List the projects of a workspace.

        Args:
            workspace_id: Workspace ID
            user: Caller (any member)

        Returns:
            Projects ordered by creation time
        """
        await self.authority.require_member(user.id, workspace_id)
        result = await self.db.execute(
            select(Project)
            .where(Project.workspace_id == workspace_id)
            .order_by(Project.created_at, Project.id)
        )
        return list(result.scalars().all())

    async def get_project(self, workspace_id: UUID, project_id: UUID, user: User) -> Project:
        await self.authority.require_member(user.id, workspace_id)
        return await self.hierarchy.require_project(project_id, workspace_id)

    async def create_project(self, workspace_id: UUID, project_data: ProjectCreate, user: User) -> Project:
        """
        Create a project (ADMIN or MEMBER).

        Raises:
            AuthorizationException: If the caller is a viewer or not a member
            BadRequestException: If the name is blank
        """
        await self.authority.require_contributor(user.id, workspace_id)

        name = (project_data.name or "").strip()
        if not name:
            raise BadRequestException("Project name cannot be empty")

        project = Project(
            name=name,
            description=project_data.description,
            workspace_id=workspace_id,
            creator_id=user.id,
        )
        self.db.add(project)
        await self.db.commit()

        logger.info(
            "Project created",
            project_id=str(project.id),
            workspace_id=str(workspace_id),
            user_id=str(user.id)
        )
        return project

    async def update_project(
        self,
        workspace_id: UUID,
        project_id: UUID,
        project_data: ProjectUpdate,
        user: User
    ) -> Project:
        """Rename or re-describe a project (ADMIN or creator)."""
        await self.authority.require_member(user.id, workspace_id)
        project = await self.hierarchy.require_project(project_id, workspace_id)
        await self.authority.require_project_editor(user.id, project)

        if project_data.name is not None and project_data.name.strip():
            project.name = project_data.name.strip()
        if "description" in project_data.model_fields_set:
            project.description = project_data.description

        await self.db.commit()

        logger.info("Project updated", project_id=str(project_id), user_id=str(user.id))
        return project

    async def delete_project(self, workspace_id: UUID, project_id: UUID, user: User) -> None:
        """Delete a project and its work items (ADMIN or creator)."""
        await self.authority.require_member(user.id, workspace_id)
        project = await self.hierarchy.require_project(project_id, workspace_id, for_update=True)
        await self.authority.require_project_editor(user.id, project)

        await self.db.execute(delete(WorkItem).where(WorkItem.project_id == project_id))
        await self.db.delete(project)
        await self.db.commit()

        logger.info("Project deleted", project_id=str(project_id), user_id=str(user.id))

    async def is_creator(self, workspace_id: UUID, project_id: UUID, user: User) -> bool:
        project = await self.get_project(workspace_id, project_id, user)
        return project.creator_id is not None and project.creator_id == user.id
