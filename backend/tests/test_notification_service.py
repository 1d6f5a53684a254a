"""
Tests for the invite workflow and the notification inbox.
"""
from uuid import uuid4

import pytest
from conftest import add_member, create_user
from sqlalchemy import func, select

from strideboard.core.exceptions import (
    AuthorizationException,
    BadRequestException,
    ResourceNotFoundException,
)
from strideboard.core.rbac import MembershipAuthority
from strideboard.modules.notification.models import Notification, NotificationType
from strideboard.modules.notification.service import NotificationService
from strideboard.modules.workspace.models import WorkspaceRole
from strideboard.modules.workspace.service import WorkspaceService


async def count_invites(db_session, user, workspace):
    result = await db_session.execute(
        select(func.count(Notification.id)).where(
            Notification.recipient_id == user.id,
            Notification.workspace_id == workspace.id,
            Notification.type == NotificationType.INVITE,
        )
    )
    return result.scalar_one()


async def pending_invite(db_session, user, workspace):
    result = await db_session.execute(
        select(Notification).where(
            Notification.recipient_id == user.id,
            Notification.workspace_id == workspace.id,
            Notification.type == NotificationType.INVITE,
        )
    )
    return result.scalar_one()


class TestInvite:
    """Invite creation and its skip rules."""

    @pytest.mark.asyncio
    async def test_invite_creates_pending_notification(self, db_session, workspace, alice, bob):
        created = await WorkspaceService(db_session).invite_members(
            workspace.id, ["bob@example.com"], alice
        )

        assert created == 1
        invite = await pending_invite(db_session, bob, workspace)
        assert invite.is_unread is True
        assert invite.reference_id == str(workspace.id)
        assert invite.subtitle == "You have been invited to join My Team"

    @pytest.mark.asyncio
    async def test_duplicate_invite_is_idempotent(self, db_session, workspace, alice, bob):
        service = WorkspaceService(db_session)

        assert await service.invite_members(workspace.id, ["bob@example.com"], alice) == 1
        assert await service.invite_members(workspace.id, ["  BOB@example.com "], alice) == 0
        assert await count_invites(db_session, bob, workspace) == 1

    @pytest.mark.asyncio
    async def test_skip_rules(self, db_session, workspace, alice, bob, carol):
        await add_member(db_session, workspace, carol, WorkspaceRole.VIEWER)

        created = await WorkspaceService(db_session).invite_members(
            workspace.id,
            ["ALICE@example.com", "nobody@example.com", "carol@example.com", "", "bob@example.com"],
            alice
        )

        assert created == 1
        assert await count_invites(db_session, alice, workspace) == 0
        assert await count_invites(db_session, carol, workspace) == 0

    @pytest.mark.asyncio
    async def test_only_admin_can_invite(self, db_session, workspace, bob, carol):
        await add_member(db_session, workspace, bob, WorkspaceRole.MEMBER)

        with pytest.raises(AuthorizationException):
            await WorkspaceService(db_session).invite_members(
                workspace.id, ["carol@example.com"], bob
            )


class TestInviteLifecycle:
    """Accept, reject and mark-read."""

    @pytest.mark.asyncio
    async def test_invite_scenario_from_unknown_address_to_membership(self, db_session, workspace, alice):
        assert workspace.slug == "my-team"
        service = WorkspaceService(db_session)

        # no account yet: silently skipped
        assert await service.invite_members(workspace.id, ["dave@example.com"], alice) == 0

        dave = await create_user(db_session, "dave@example.com", "Dave")
        assert await service.invite_members(workspace.id, ["dave@example.com"], alice) == 1
        invite = await pending_invite(db_session, dave, workspace)

        membership = await NotificationService(db_session).accept_invite(invite.id, dave)

        assert membership is not None
        assert membership.role == WorkspaceRole.MEMBER
        assert await MembershipAuthority(db_session).role_of(dave.id, workspace.id) == WorkspaceRole.MEMBER
        assert await count_invites(db_session, dave, workspace) == 0

    @pytest.mark.asyncio
    async def test_accepted_invite_is_gone(self, db_session, workspace, alice, bob):
        await WorkspaceService(db_session).invite_members(workspace.id, ["bob@example.com"], alice)
        invite = await pending_invite(db_session, bob, workspace)
        service = NotificationService(db_session)

        await service.accept_invite(invite.id, bob)

        with pytest.raises(ResourceNotFoundException):
            await service.accept_invite(invite.id, bob)

    @pytest.mark.asyncio
    async def test_accept_when_already_member_only_consumes(self, db_session, workspace, alice, bob):
        await WorkspaceService(db_session).invite_members(workspace.id, ["bob@example.com"], alice)
        invite = await pending_invite(db_session, bob, workspace)
        await add_member(db_session, workspace, bob, WorkspaceRole.VIEWER)

        membership = await NotificationService(db_session).accept_invite(invite.id, bob)

        assert membership is None
        assert await MembershipAuthority(db_session).role_of(bob.id, workspace.id) == WorkspaceRole.VIEWER
        assert await count_invites(db_session, bob, workspace) == 0

    @pytest.mark.asyncio
    async def test_reject_removes_invite_without_membership(self, db_session, workspace, alice, bob):
        await WorkspaceService(db_session).invite_members(workspace.id, ["bob@example.com"], alice)
        invite = await pending_invite(db_session, bob, workspace)

        await NotificationService(db_session).reject_invite(invite.id, bob)

        assert await count_invites(db_session, bob, workspace) == 0
        assert await MembershipAuthority(db_session).role_of(bob.id, workspace.id) is None

    @pytest.mark.asyncio
    async def test_other_users_cannot_act_on_invite(self, db_session, workspace, alice, bob, carol):
        await WorkspaceService(db_session).invite_members(workspace.id, ["bob@example.com"], alice)
        invite = await pending_invite(db_session, bob, workspace)
        service = NotificationService(db_session)

        with pytest.raises(AuthorizationException):
            await service.accept_invite(invite.id, carol)
        with pytest.raises(AuthorizationException):
            await service.reject_invite(invite.id, carol)
        with pytest.raises(AuthorizationException):
            await service.mark_read(invite.id, carol)

        assert await count_invites(db_session, bob, workspace) == 1

    @pytest.mark.asyncio
    async def test_unknown_notification_is_not_found(self, db_session, bob):
        with pytest.raises(ResourceNotFoundException):
            await NotificationService(db_session).mark_read(uuid4(), bob)

    @pytest.mark.asyncio
    async def test_only_invites_can_be_accepted(self, db_session, workspace, project, alice, bob):
        service = NotificationService(db_session)
        alert = await service.notify_assignment(
            assignee_id=bob.id,
            workspace_id=workspace.id,
            project_name=project.name,
            work_item_id=uuid4(),
            work_item_title="Fix login",
        )
        await db_session.commit()

        with pytest.raises(BadRequestException):
            await service.accept_invite(alert.id, bob)


class TestInbox:
    """Inbox rendering and unread state."""

    @pytest.mark.asyncio
    async def test_inbox_lists_and_marks_read(self, db_session, workspace, alice, bob):
        await WorkspaceService(db_session).invite_members(workspace.id, ["bob@example.com"], alice)
        service = NotificationService(db_session)

        assert await service.has_unread(bob) is True
        inbox = await service.list_inbox(bob)

        assert len(inbox) == 1
        item = inbox[0]
        assert item.type == "invite"
        assert item.workspace_name == "My Team"
        assert item.title == "Workspace Invitation"

        await service.mark_read(item.id, bob)

        assert await service.has_unread(bob) is False
        assert (await service.list_inbox(bob))[0].is_unread is False

    @pytest.mark.asyncio
    async def test_inbox_is_per_recipient(self, db_session, workspace, alice, bob):
        await WorkspaceService(db_session).invite_members(workspace.id, ["bob@example.com"], alice)

        assert await NotificationService(db_session).list_inbox(alice) == []
        assert await NotificationService(db_session).has_unread(alice) is False
