"""
Tests for work item CRUD, assignment notifications and change events.
"""
import pytest
from conftest import add_member
from sqlalchemy import func, select

from strideboard.core.exceptions import (
    AuthorizationException,
    BadHierarchyException,
    BadRequestException,
)
from strideboard.modules.notification.models import Notification, NotificationType
from strideboard.modules.project.schemas import ProjectCreate
from strideboard.modules.project.service import ProjectService
from strideboard.modules.work_item.events import ChangeKind, WorkItemEventPublisher
from strideboard.modules.work_item.models import WorkItem, WorkItemPriority, WorkItemStatus
from strideboard.modules.work_item.schemas import WorkItemCreate, WorkItemUpdate
from strideboard.modules.work_item.service import WorkItemService
from strideboard.modules.workspace.models import WorkspaceRole
from strideboard.modules.workspace.schemas import WorkspaceCreate
from strideboard.modules.workspace.service import WorkspaceService


async def assignment_count(db_session, user):
    result = await db_session.execute(
        select(func.count(Notification.id)).where(
            Notification.recipient_id == user.id,
            Notification.type == NotificationType.UPDATE,
        )
    )
    return result.scalar_one()


class FailingPublisher(WorkItemEventPublisher):
    async def publish(self, event):
        raise RuntimeError("broker unavailable")


class TestCreateWorkItem:
    """Creation rules."""

    @pytest.mark.asyncio
    async def test_create_defaults(self, db_session, workspace, project, alice, publisher):
        item = await WorkItemService(db_session, publisher=publisher).create_work_item(
            workspace.id, project.id, WorkItemCreate(title="  Fix login  "), alice
        )

        assert item.title == "Fix login"
        assert item.status == WorkItemStatus.BACKLOG
        assert item.priority == WorkItemPriority.MEDIUM
        assert item.creator_id == alice.id
        assert item.assignee_id is None

    @pytest.mark.asyncio
    async def test_viewer_cannot_create(self, db_session, workspace, project, bob, publisher):
        await add_member(db_session, workspace, bob, WorkspaceRole.VIEWER)

        with pytest.raises(AuthorizationException):
            await WorkItemService(db_session, publisher=publisher).create_work_item(
                workspace.id, project.id, WorkItemCreate(title="Sneaky"), bob
            )

        result = await db_session.execute(select(func.count(WorkItem.id)))
        assert result.scalar_one() == 0
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_project_from_other_workspace_is_bad_hierarchy(self, db_session, workspace, alice, publisher):
        elsewhere = await WorkspaceService(db_session).create_workspace(
            WorkspaceCreate(name="Elsewhere"), alice
        )
        foreign_project = await ProjectService(db_session).create_project(
            elsewhere.id, ProjectCreate(name="Foreign"), alice
        )

        with pytest.raises(BadHierarchyException):
            await WorkItemService(db_session, publisher=publisher).create_work_item(
                workspace.id, foreign_project.id, WorkItemCreate(title="Lost"), alice
            )

    @pytest.mark.asyncio
    async def test_blank_title(self, db_session, workspace, project, alice, publisher):
        with pytest.raises(BadRequestException):
            await WorkItemService(db_session, publisher=publisher).create_work_item(
                workspace.id, project.id, WorkItemCreate(title="   "), alice
            )

    @pytest.mark.asyncio
    async def test_assignee_must_be_member(self, db_session, workspace, project, alice, carol, publisher):
        with pytest.raises(BadRequestException):
            await WorkItemService(db_session, publisher=publisher).create_work_item(
                workspace.id, project.id, WorkItemCreate(title="Task", assignee_id=carol.id), alice
            )


class TestAssignmentNotifications:
    """Assignees other than the actor are notified."""

    @pytest.mark.asyncio
    async def test_assigning_someone_else_notifies(self, db_session, workspace, project, alice, bob, publisher):
        await add_member(db_session, workspace, bob, WorkspaceRole.MEMBER)

        item = await WorkItemService(db_session, publisher=publisher).create_work_item(
            workspace.id, project.id, WorkItemCreate(title="Fix login", assignee_id=bob.id), alice
        )

        result = await db_session.execute(
            select(Notification).where(Notification.recipient_id == bob.id)
        )
        notification = result.scalar_one()
        assert notification.type == NotificationType.UPDATE
        assert notification.title == "New Task Assigned"
        assert notification.subtitle == "You have been assigned to: Fix login"
        assert notification.reference_id == str(item.id)

    @pytest.mark.asyncio
    async def test_self_assignment_does_not_notify(self, db_session, workspace, project, alice, publisher):
        await WorkItemService(db_session, publisher=publisher).create_work_item(
            workspace.id, project.id, WorkItemCreate(title="Mine", assignee_id=alice.id), alice
        )

        assert await assignment_count(db_session, alice) == 0

    @pytest.mark.asyncio
    async def test_update_notifies_only_on_change(self, db_session, workspace, project, alice, bob, publisher):
        await add_member(db_session, workspace, bob, WorkspaceRole.MEMBER)
        service = WorkItemService(db_session, publisher=publisher)
        item = await service.create_work_item(
            workspace.id, project.id, WorkItemCreate(title="Task"), alice
        )

        await service.update_work_item(
            workspace.id, project.id, item.id, WorkItemUpdate(assignee_id=bob.id), alice
        )
        await service.update_work_item(
            workspace.id, project.id, item.id,
            WorkItemUpdate(assignee_id=bob.id, priority=WorkItemPriority.HIGH), alice
        )

        assert await assignment_count(db_session, bob) == 1

    @pytest.mark.asyncio
    async def test_explicit_null_unassigns(self, db_session, workspace, project, alice, bob, publisher):
        await add_member(db_session, workspace, bob, WorkspaceRole.MEMBER)
        service = WorkItemService(db_session, publisher=publisher)
        item = await service.create_work_item(
            workspace.id, project.id, WorkItemCreate(title="Task", assignee_id=bob.id), alice
        )

        kept = await service.update_work_item(
            workspace.id, project.id, item.id, WorkItemUpdate(title="Renamed"), alice
        )
        assert kept.assignee_id == bob.id

        cleared = await service.update_work_item(
            workspace.id, project.id, item.id, WorkItemUpdate.model_validate({"assignee_id": None}), alice
        )
        assert cleared.assignee_id is None
        assert cleared.title == "Renamed"


class TestUpdateAndDelete:
    """Updates, deletes and the events they publish."""

    @pytest.mark.asyncio
    async def test_events_follow_mutations(self, db_session, workspace, project, alice, publisher):
        service = WorkItemService(db_session, publisher=publisher)
        item = await service.create_work_item(
            workspace.id, project.id, WorkItemCreate(title="Task"), alice
        )
        await service.update_work_item(
            workspace.id, project.id, item.id, WorkItemUpdate(status=WorkItemStatus.DONE), alice
        )
        await service.delete_work_item(workspace.id, project.id, item.id, alice)

        assert publisher.kinds() == [ChangeKind.CREATED, ChangeKind.UPDATED, ChangeKind.DELETED]
        created, updated, deleted = publisher.events
        assert created.workspace_id == workspace.id
        assert created.project_id == project.id
        assert created.work_item["title"] == "Task"
        assert updated.work_item["status"] == "DONE"
        assert deleted.work_item is None
        assert deleted.to_payload()["work_item_id"] == str(item.id)

    @pytest.mark.asyncio
    async def test_blank_title_update_is_ignored(self, db_session, workspace, project, alice, publisher):
        service = WorkItemService(db_session, publisher=publisher)
        item = await service.create_work_item(
            workspace.id, project.id, WorkItemCreate(title="Task", description="Keep"), alice
        )

        updated = await service.update_work_item(
            workspace.id, project.id, item.id, WorkItemUpdate(title="  "), alice
        )

        assert updated.title == "Task"
        assert updated.description == "Keep"

    @pytest.mark.asyncio
    async def test_viewer_cannot_update_or_delete(self, db_session, workspace, project, alice, bob, publisher):
        await add_member(db_session, workspace, bob, WorkspaceRole.VIEWER)
        service = WorkItemService(db_session, publisher=publisher)
        item = await service.create_work_item(
            workspace.id, project.id, WorkItemCreate(title="Task"), alice
        )

        with pytest.raises(AuthorizationException):
            await service.update_work_item(
                workspace.id, project.id, item.id, WorkItemUpdate(title="Mine"), bob
            )
        with pytest.raises(AuthorizationException):
            await service.delete_work_item(workspace.id, project.id, item.id, bob)

        # viewers can still read
        assert [i.id for i in await service.list_work_items(workspace.id, project.id, bob)] == [item.id]
        assert publisher.kinds() == [ChangeKind.CREATED]

    @pytest.mark.asyncio
    async def test_wrong_project_in_path(self, db_session, workspace, project, alice, publisher):
        service = WorkItemService(db_session, publisher=publisher)
        other = await ProjectService(db_session).create_project(
            workspace.id, ProjectCreate(name="Other"), alice
        )
        item = await service.create_work_item(
            workspace.id, project.id, WorkItemCreate(title="Task"), alice
        )

        with pytest.raises(BadHierarchyException):
            await service.get_work_item(workspace.id, other.id, item.id, alice)
        with pytest.raises(BadHierarchyException):
            await service.delete_work_item(workspace.id, other.id, item.id, alice)

    @pytest.mark.asyncio
    async def test_publish_failure_does_not_undo_mutation(self, db_session, workspace, project, alice):
        service = WorkItemService(db_session, publisher=FailingPublisher())

        item = await service.create_work_item(
            workspace.id, project.id, WorkItemCreate(title="Durable"), alice
        )

        result = await db_session.execute(select(WorkItem.title).where(WorkItem.id == item.id))
        assert result.scalar_one() == "Durable"
