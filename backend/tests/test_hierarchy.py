"""
Tests for path containment checks.
"""
from uuid import uuid4

import pytest
import pytest_asyncio

from strideboard.core.exceptions import BadHierarchyException, ResourceNotFoundException
from strideboard.core.hierarchy import HierarchyValidator
from strideboard.modules.project.schemas import ProjectCreate
from strideboard.modules.project.service import ProjectService
from strideboard.modules.work_item.schemas import WorkItemCreate
from strideboard.modules.work_item.service import WorkItemService
from strideboard.modules.workspace.schemas import WorkspaceCreate
from strideboard.modules.workspace.service import WorkspaceService


@pytest_asyncio.fixture
async def other_workspace(db_session, alice):
    return await WorkspaceService(db_session).create_workspace(
        WorkspaceCreate(name="Elsewhere"), alice
    )


@pytest_asyncio.fixture
async def work_item(db_session, workspace, project, alice, publisher):
    return await WorkItemService(db_session, publisher=publisher).create_work_item(
        workspace.id, project.id, WorkItemCreate(title="Write tests"), alice
    )


class TestHierarchyValidator:
    """Containment predicates and guards."""

    @pytest.mark.asyncio
    async def test_project_belongs_to_workspace(self, db_session, workspace, other_workspace, project):
        validator = HierarchyValidator(db_session)

        assert await validator.project_belongs_to_workspace(project.id, workspace.id) is True
        assert await validator.project_belongs_to_workspace(project.id, other_workspace.id) is False
        assert await validator.project_belongs_to_workspace(uuid4(), workspace.id) is False

    @pytest.mark.asyncio
    async def test_work_item_belongs_to(self, db_session, workspace, other_workspace, project, work_item, alice):
        other_project = await ProjectService(db_session).create_project(
            workspace.id, ProjectCreate(name="Other"), alice
        )
        validator = HierarchyValidator(db_session)

        assert await validator.work_item_belongs_to(work_item.id, project.id, workspace.id) is True
        assert await validator.work_item_belongs_to(work_item.id, other_project.id, workspace.id) is False
        assert await validator.work_item_belongs_to(work_item.id, project.id, other_workspace.id) is False
        assert await validator.work_item_belongs_to(uuid4(), project.id, workspace.id) is False

    @pytest.mark.asyncio
    async def test_require_project_mismatch_is_bad_hierarchy(self, db_session, other_workspace, project):
        validator = HierarchyValidator(db_session)

        with pytest.raises(BadHierarchyException) as exc_info:
            await validator.require_project(project.id, other_workspace.id)

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "BAD_HIERARCHY"

    @pytest.mark.asyncio
    async def test_require_project_missing_is_not_found(self, db_session, workspace):
        validator = HierarchyValidator(db_session)

        with pytest.raises(ResourceNotFoundException):
            await validator.require_project(uuid4(), workspace.id)

    @pytest.mark.asyncio
    async def test_require_work_item_wrong_project(self, db_session, workspace, project, work_item, alice):
        other_project = await ProjectService(db_session).create_project(
            workspace.id, ProjectCreate(name="Other"), alice
        )
        validator = HierarchyValidator(db_session)

        with pytest.raises(BadHierarchyException):
            await validator.require_work_item(work_item.id, other_project.id, workspace.id)

        resolved = await validator.require_work_item(work_item.id, project.id, workspace.id)
        assert resolved.id == work_item.id

    @pytest.mark.asyncio
    async def test_resolve_work_item_returns_project(
        self, db_session, workspace, other_workspace, project, work_item
    ):
        validator = HierarchyValidator(db_session)

        resolved, parent = await validator.resolve_work_item(work_item.id, project.id, workspace.id)
        assert resolved.id == work_item.id
        assert parent.id == project.id
        assert parent.workspace_id == workspace.id

        with pytest.raises(BadHierarchyException):
            await validator.resolve_work_item(work_item.id, project.id, other_workspace.id)
        with pytest.raises(ResourceNotFoundException):
            await validator.resolve_work_item(uuid4(), project.id, workspace.id)
