"""
Containment checks for nested resource paths.

A request path such as ``/workspaces/{w}/projects/{p}/work-items/{i}`` is only
well formed when ``i`` really lives in ``p`` and ``p`` really lives in ``w``.
A mismatch is a malformed request (BadHierarchy), not a permission problem.
"""
from typing import Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from strideboard.core.exceptions import BadHierarchyException, ResourceNotFoundException
from strideboard.modules.project.models import Project
from strideboard.modules.work_item.models import WorkItem


class HierarchyValidator:
    """Resolves path entities and verifies their parent links."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_project(self, project_id: UUID, for_update: bool = False):
        stmt = select(Project).where(Project.id == project_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_work_item(self, work_item_id: UUID):
        result = await self.db.execute(
            select(WorkItem).where(WorkItem.id == work_item_id)
        )
        return result.scalar_one_or_none()

    async def project_belongs_to_workspace(self, project_id: UUID, workspace_id: UUID) -> bool:
        """True iff the project exists and its workspace is ``workspace_id``."""
        project = await self._get_project(project_id)
        return project is not None and project.workspace_id == workspace_id

    async def work_item_belongs_to(
        self,
        work_item_id: UUID,
        project_id: UUID,
        workspace_id: UUID
    ) -> bool:
        """True iff the work item sits in ``project_id`` which sits in ``workspace_id``."""
        work_item = await self._get_work_item(work_item_id)
        if work_item is None or work_item.project_id != project_id:
            return False
        return await self.project_belongs_to_workspace(project_id, workspace_id)

    async def require_project(
        self,
        project_id: UUID,
        workspace_id: UUID,
        for_update: bool = False
    ) -> Project:
        """
        Resolve a project addressed through a workspace path.

        Args:
            project_id: Project ID from the path
            workspace_id: Workspace ID from the path
            for_update: Lock the project row (serializes work item ordering)

        Returns:
            The project

        Raises:
            ResourceNotFoundException: If the project does not exist
            BadHierarchyException: If the project belongs to another workspace
        """
        project = await self._get_project(project_id, for_update=for_update)
        if project is None:
            raise ResourceNotFoundException("Project", project_id)
        if project.workspace_id != workspace_id:
            raise BadHierarchyException(
                "Project does not belong to this workspace",
                details={"project_id": str(project_id), "workspace_id": str(workspace_id)}
            )
        return project

    async def resolve_work_item(
        self,
        work_item_id: UUID,
        project_id: UUID,
        workspace_id: UUID
    ) -> Tuple[WorkItem, Project]:
        """
        Resolve a work item addressed through a workspace/project path,
        together with its project.

        Raises:
            ResourceNotFoundException: If the work item or project does not exist
            BadHierarchyException: If any parent link does not match the path
        """
        work_item = await self._get_work_item(work_item_id)
        if work_item is None:
            raise ResourceNotFoundException("WorkItem", work_item_id)
        if work_item.project_id != project_id:
            raise BadHierarchyException(
                "Work item does not belong to this project",
                details={"work_item_id": str(work_item_id), "project_id": str(project_id)}
            )
        project = await self.require_project(project_id, workspace_id)
        return work_item, project

    async def require_work_item(
        self,
        work_item_id: UUID,
        project_id: UUID,
        workspace_id: UUID
    ) -> WorkItem:
        """Resolve a work item addressed through a workspace/project path."""
        work_item, _ = await self.resolve_work_item(work_item_id, project_id, workspace_id)
        return work_item
