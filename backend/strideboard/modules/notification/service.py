"""
Notification service.

Invites move through ``absent -> pending -> accepted | rejected``. A pending
invite is a notification of type INVITE; accepting it turns it into a MEMBER
membership, rejecting it simply removes it. Assignment alerts are UPDATE
notifications and are never de-duplicated.
"""
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from strideboard.core.exceptions import (
    AuthorizationException,
    BadRequestException,
    ResourceNotFoundException,
)
from strideboard.core.metrics import record_invites
from strideboard.modules.auth.models import User
from strideboard.modules.workspace.models import Membership, Workspace, WorkspaceRole

from .models import Notification, NotificationType
from .schemas import InboxItem

logger = get_logger(__name__)

INVITE_TITLE = "Workspace Invitation"
ASSIGNMENT_TITLE = "New Task Assigned"


class NotificationService:
    """Service class for invites and inbox operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _is_member(self, user_id: UUID, workspace_id: UUID) -> bool:
        result = await self.db.execute(
            select(exists().where(
                Membership.user_id == user_id,
                Membership.workspace_id == workspace_id
            ))
        )
        return bool(result.scalar())

    async def has_pending_invite(self, user_id: UUID, workspace_id: UUID) -> bool:
        """Whether an INVITE for (user, workspace) is outstanding."""
        result = await self.db.execute(
            select(exists().where(
                Notification.recipient_id == user_id,
                Notification.workspace_id == workspace_id,
                Notification.type == NotificationType.INVITE
            ))
        )
        return bool(result.scalar())

    async def create_invites(
        self,
        emails: Iterable[str],
        workspace: Workspace,
        sender: User
    ) -> int:
        """
        Create pending invites for a list of addresses.

        Runs inside the caller's transaction and does not commit. Addresses are
        skipped when they are the sender's own, belong to no account, belong to
        an existing member, or already have a pending invite.

        Args:
            emails: Candidate e-mail addresses
            workspace: Target workspace
            sender: Inviting user

        Returns:
            Number of invites created
        """
        created = 0
        seen = set()
        sender_email = sender.email.strip().lower()

        for raw_email in emails:
            email = (raw_email or "").strip().lower()
            if not email or email in seen:
                continue
            seen.add(email)

            if email == sender_email:
                logger.debug("Invite skipped: sender", workspace_id=str(workspace.id))
                continue

            result = await self.db.execute(select(User).where(User.email == email))
            invitee = result.scalar_one_or_none()
            if invitee is None:
                logger.debug("Invite skipped: no account", email=email, workspace_id=str(workspace.id))
                continue

            if await self._is_member(invitee.id, workspace.id):
                logger.debug("Invite skipped: already a member", user_id=str(invitee.id))
                continue

            if await self.has_pending_invite(invitee.id, workspace.id):
                logger.debug("Invite skipped: already pending", user_id=str(invitee.id))
                continue

            invite = Notification(
                recipient_id=invitee.id,
                type=NotificationType.INVITE,
                workspace_id=workspace.id,
                reference_id=str(workspace.id),
                title=INVITE_TITLE,
                subtitle=f"You have been invited to join {workspace.name}",
                is_unread=True,
            )
            try:
                async with self.db.begin_nested():
                    self.db.add(invite)
            except IntegrityError:
                # a concurrent request created the same pending invite
                logger.debug("Invite skipped: concurrent duplicate", user_id=str(invitee.id))
                continue

            created += 1

        record_invites(created)
        logger.info(
            "Invites created",
            workspace_id=str(workspace.id),
            sender_id=str(sender.id),
            created=created
        )
        return created

    async def notify_assignment(
        self,
        assignee_id: UUID,
        workspace_id: UUID,
        project_name: str,
        work_item_id: UUID,
        work_item_title: str
    ) -> Notification:
        """Queue an UPDATE notification telling a user they were assigned. Does not commit."""
        notification = Notification(
            recipient_id=assignee_id,
            type=NotificationType.UPDATE,
            workspace_id=workspace_id,
            project_name=project_name,
            reference_id=str(work_item_id),
            title=ASSIGNMENT_TITLE,
            subtitle=f"You have been assigned to: {work_item_title}",
            is_unread=True,
        )
        self.db.add(notification)
        logger.debug("Assignment notification queued", assignee_id=str(assignee_id))
        return notification

    async def get_owned_notification(self, notification_id: UUID, user: User) -> Notification:
        """
        Load a notification on behalf of its recipient.

        Raises:
            ResourceNotFoundException: If the notification does not exist
            AuthorizationException: If it is addressed to someone else
        """
        result = await self.db.execute(
            select(Notification).where(Notification.id == notification_id)
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise ResourceNotFoundException("Notification", notification_id)
        if notification.recipient_id != user.id:
            logger.info(
                "Notification access denied",
                notification_id=str(notification_id),
                user_id=str(user.id)
            )
            raise AuthorizationException("This notification belongs to another user")
        return notification

    async def list_inbox(self, user: User) -> List[InboxItem]:
        """
        The caller's notifications, newest first.

        Args:
            user: Recipient

        Returns:
            Inbox items with the workspace name resolved
        """
        result = await self.db.execute(
            select(Notification, Workspace.name)
            .join(Workspace, Workspace.id == Notification.workspace_id)
            .where(Notification.recipient_id == user.id)
            .order_by(Notification.created_at.desc(), Notification.id)
        )
        return [
            InboxItem(
                id=notification.id,
                type=notification.type.value.lower(),
                workspace_id=notification.workspace_id,
                workspace_name=workspace_name,
                project_name=notification.project_name,
                title=notification.title,
                subtitle=notification.subtitle,
                reference_id=notification.reference_id,
                is_unread=notification.is_unread,
                created_at=notification.created_at,
            )
            for notification, workspace_name in result.all()
        ]

    async def has_unread(self, user: User) -> bool:
        result = await self.db.execute(
            select(exists().where(
                Notification.recipient_id == user.id,
                Notification.is_unread.is_(True)
            ))
        )
        return bool(result.scalar())

    async def mark_read(self, notification_id: UUID, user: User) -> Notification:
        """Flag a notification as read without deleting it."""
        notification = await self.get_owned_notification(notification_id, user)
        notification.is_unread = False
        await self.db.commit()

        logger.info("Notification marked read", notification_id=str(notification_id))
        return notification

    async def accept_invite(self, notification_id: UUID, user: User) -> Optional[Membership]:
        """
        Accept a pending invite.

        Creates a MEMBER membership for the recipient unless one already
        exists, and consumes the notification.

        Returns:
            The created membership, or None when the user was already a member

        Raises:
            BadRequestException: If the notification is not an invite
        """
        notification = await self.get_owned_notification(notification_id, user)
        if notification.type != NotificationType.INVITE:
            raise BadRequestException("Only invite notifications can be accepted")

        workspace_id = notification.workspace_id
        membership = None
        if not await self._is_member(user.id, workspace_id):
            membership = Membership(
                workspace_id=workspace_id,
                user_id=user.id,
                role=WorkspaceRole.MEMBER,
            )
            self.db.add(membership)

        await self.db.delete(notification)
        await self.db.commit()

        logger.info(
            "Invite accepted",
            workspace_id=str(workspace_id),
            user_id=str(user.id),
            membership_created=membership is not None
        )
        return membership

    async def reject_invite(self, notification_id: UUID, user: User) -> None:
        """Discard a notification without side effects."""
        notification = await self.get_owned_notification(notification_id, user)
        await self.db.delete(notification)
        await self.db.commit()

        logger.info("Notification rejected", notification_id=str(notification_id), user_id=str(user.id))
