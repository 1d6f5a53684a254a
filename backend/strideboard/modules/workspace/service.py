"""
Workspace service.

This module provides business logic for workspace and membership management.
"""
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from strideboard.core.exceptions import (
    AuthorizationException,
    BadRequestException,
    ConflictException,
    ResourceNotFoundException,
)
from strideboard.core.rbac import MembershipAuthority
from strideboard.modules.auth.models import User
from strideboard.modules.auth.service import AuthService
from strideboard.modules.notification.models import Notification
from strideboard.modules.notification.service import NotificationService
from strideboard.modules.project.models import Project
from strideboard.modules.work_item.models import WorkItem

from .models import Membership, Workspace, WorkspaceRole
from .schemas import MemberResponse, WorkspaceCreate

logger = get_logger(__name__)


def derive_slug(name: str, slug: Optional[str] = None) -> str:
    """Use the supplied slug when non-empty, else lower-case the name and hyphenate spaces."""
    if slug and slug.strip():
        return slug.strip()
    return name.lower().replace(" ", "-")


def parse_role(value: str) -> WorkspaceRole:
    """
    Parse a role name in any letter case.

    Raises:
        BadRequestException: If the value is not a known role
    """
    try:
        return WorkspaceRole((value or "").strip().upper())
    except ValueError:
        raise BadRequestException(
            f"Invalid role '{value}'",
            details={"allowed": [role.value for role in WorkspaceRole]}
        )


class WorkspaceService:
    """Service class for workspace operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.authority = MembershipAuthority(db)
        self.notifications = NotificationService(db)

    async def _get_workspace(self, workspace_id: UUID, for_update: bool = False) -> Workspace:
        stmt = select(Workspace).where(Workspace.id == workspace_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        workspace = result.scalar_one_or_none()
        if workspace is None:
            raise ResourceNotFoundException("Workspace", workspace_id)
        return workspace

    async def _slug_taken(self, slug: str) -> bool:
        result = await self.db.execute(select(Workspace.id).where(Workspace.slug == slug))
        return result.first() is not None

    async def create_workspace(self, workspace_data: WorkspaceCreate, owner: User) -> Workspace:
        """
        Create a workspace owned by the caller.

        The owner receives an ADMIN membership and any ``member_emails`` are
        invited in the same transaction.

        Args:
            workspace_data: Workspace creation data
            owner: Owner user

        Returns:
            Created workspace

        Raises:
            ConflictException: If the slug is already used
        """
        slug = derive_slug(workspace_data.name, workspace_data.slug)
        if await self._slug_taken(slug):
            raise ConflictException(
                f"Workspace slug '{slug}' is already taken",
                details={"field": "slug", "slug": slug}
            )

        workspace = Workspace(name=workspace_data.name, slug=slug, owner_id=owner.id)
        self.db.add(workspace)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException(
                f"Workspace slug '{slug}' is already taken",
                details={"field": "slug", "slug": slug}
            )

        self.db.add(Membership(
            workspace_id=workspace.id,
            user_id=owner.id,
            role=WorkspaceRole.ADMIN,
        ))
        await self.db.flush()

        invited = 0
        if workspace_data.member_emails:
            invited = await self.notifications.create_invites(
                workspace_data.member_emails, workspace, owner
            )

        await self.db.commit()

        logger.info(
            "Workspace created",
            workspace_id=str(workspace.id),
            owner_id=str(owner.id),
            slug=slug,
            invited=invited
        )
        return workspace

    async def list_user_workspaces(self, user: User) -> List[Workspace]:
        """Workspaces the user belongs to, ordered by name."""
        result = await self.db.execute(
            select(Workspace)
            .join(Membership, Membership.workspace_id == Workspace.id)
            .where(Membership.user_id == user.id)
            .order_by(Workspace.name, Workspace.id)
        )
        return list(result.scalars().all())

    async def get_workspace(self, workspace_id: UUID, user: User) -> Workspace:
        """Get a workspace the caller is a member of."""
        await self.authority.require_member(user.id, workspace_id)
        return await self._get_workspace(workspace_id)

    async def get_owner_id(self, workspace_id: UUID, user: User) -> UUID:
        await self.authority.require_member(user.id, workspace_id)
        return (await self._get_workspace(workspace_id)).owner_id

    async def get_my_membership(self, workspace_id: UUID, user: User) -> MemberResponse:
        """The caller's own membership in the workspace."""
        role = await self.authority.require_member(user.id, workspace_id)
        return MemberResponse(
            user_id=user.id,
            email=user.email,
            display_name=user.display_name,
            role=role,
        )

    async def rename_workspace(self, workspace_id: UUID, name: str, user: User) -> Workspace:
        """
        Rename a workspace (ADMIN only).

        Raises:
            BadRequestException: If the name is blank
        """
        await self.authority.require_admin(user.id, workspace_id)
        name = (name or "").strip()
        if not name:
            raise BadRequestException("Workspace name cannot be empty")

        workspace = await self._get_workspace(workspace_id)
        workspace.name = name
        await self.db.commit()

        logger.info("Workspace renamed", workspace_id=str(workspace_id), user_id=str(user.id))
        return workspace

    async def delete_workspace(self, workspace_id: UUID, user: User) -> None:
        """
        Delete a workspace and everything it contains (ADMIN only).

        Work items, projects, notifications and memberships are removed in the
        same transaction as the workspace itself.
        """
        await self.authority.require_admin(user.id, workspace_id)
        workspace = await self._get_workspace(workspace_id, for_update=True)

        project_ids = select(Project.id).where(Project.workspace_id == workspace_id)
        await self.db.execute(delete(WorkItem).where(WorkItem.project_id.in_(project_ids)))
        await self.db.execute(delete(Project).where(Project.workspace_id == workspace_id))
        await self.db.execute(delete(Notification).where(Notification.workspace_id == workspace_id))
        await self.db.execute(delete(Membership).where(Membership.workspace_id == workspace_id))
        await self.db.delete(workspace)
        await self.db.commit()

        logger.info("Workspace deleted", workspace_id=str(workspace_id), user_id=str(user.id))

    async def list_members(self, workspace_id: UUID, user: User) -> List[MemberResponse]:
        """Members of the workspace with their roles."""
        await self.authority.require_member(user.id, workspace_id)
        result = await self.db.execute(
            select(Membership.role, User)
            .join(User, User.id == Membership.user_id)
            .where(Membership.workspace_id == workspace_id)
            .order_by(User.email)
        )
        return [
            MemberResponse(
                user_id=member.id,
                email=member.email,
                display_name=member.display_name,
                role=role,
            )
            for role, member in result.all()
        ]

    async def invite_members(self, workspace_id: UUID, emails: List[str], user: User) -> int:
        """Invite users by e-mail (ADMIN only). Returns the number of invites created."""
        await self.authority.require_admin(user.id, workspace_id)
        workspace = await self._get_workspace(workspace_id)

        created = await self.notifications.create_invites(emails, workspace, user)
        await self.db.commit()
        return created

    async def _require_target_membership(
        self,
        workspace_id: UUID,
        target_user_id: UUID,
        user: User,
        role: Optional[str] = None
    ) -> Tuple[Membership, Optional[WorkspaceRole]]:
        await self.authority.require_admin(user.id, workspace_id)
        await self.authority.protect_owner(target_user_id, workspace_id, user.id)
        if target_user_id == user.id:
            raise BadRequestException("Use leave to change your own membership")
        new_role = parse_role(role) if role is not None else None

        membership = await self.authority.get_membership(target_user_id, workspace_id, for_update=True)
        if membership is None:
            raise ResourceNotFoundException("Membership", target_user_id)
        return membership, new_role

    async def remove_member(self, workspace_id: UUID, target_user_id: UUID, user: User) -> None:
        """
        Remove a member (ADMIN only).

        Raises:
            AuthorizationException: If the caller is not an admin, or the target is the owner
            BadRequestException: If the caller targets themself
            ResourceNotFoundException: If the target is not a member
        """
        membership, _ = await self._require_target_membership(workspace_id, target_user_id, user)
        await self.db.delete(membership)
        await self.db.commit()

        logger.info(
            "Member removed",
            workspace_id=str(workspace_id),
            target_user_id=str(target_user_id),
            user_id=str(user.id)
        )

    async def change_member_role(
        self,
        workspace_id: UUID,
        target_user_id: UUID,
        role: str,
        user: User
    ) -> Membership:
        """
        Change a member's role (ADMIN only).

        Raises:
            AuthorizationException: If the caller is not an admin, or the target is the owner
            BadRequestException: If the caller targets themself or the role is unknown
            ResourceNotFoundException: If the target is not a member
        """
        membership, new_role = await self._require_target_membership(
            workspace_id, target_user_id, user, role=role
        )
        membership.role = new_role
        await self.db.commit()

        logger.info(
            "Member role changed",
            workspace_id=str(workspace_id),
            target_user_id=str(target_user_id),
            role=new_role.value
        )
        return membership

    async def leave_workspace(self, workspace_id: UUID, user: User) -> None:
        """
        Leave a workspace.

        Raises:
            AuthorizationException: If the caller is not a member or owns the workspace
        """
        await self.authority.require_member(user.id, workspace_id, for_update=True)
        owner_id = await self.authority.get_owner_id(workspace_id)
        if owner_id == user.id:
            raise AuthorizationException("The workspace owner cannot leave the workspace")

        await self.db.execute(
            delete(Membership).where(
                Membership.workspace_id == workspace_id,
                Membership.user_id == user.id
            )
        )
        await self.db.commit()

        logger.info("Member left workspace", workspace_id=str(workspace_id), user_id=str(user.id))

    async def search_candidates(self, workspace_id: UUID, query: str, user: User) -> List[User]:
        """Users matching ``query`` who are not yet members of the workspace."""
        await self.authority.require_member(user.id, workspace_id)
        result = await self.db.execute(
            select(Membership.user_id).where(Membership.workspace_id == workspace_id)
        )
        member_ids = list(result.scalars().all())
        return await AuthService(self.db).search_users(query, exclude_user_ids=member_ids)
