"""
Role-Based Access Control (RBAC) utilities.

The membership authority is the single place that turns a (user, workspace)
pair into a role and decides whether that role may perform an action. Entity
services call it before touching any other state.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from strideboard.core.exceptions import AuthorizationException
from strideboard.core.metrics import record_authorization_denial
from strideboard.modules.project.models import Project
from strideboard.modules.workspace.models import Membership, Workspace, WorkspaceRole

logger = get_logger(__name__)


def can_manage_workspace(role: Optional[WorkspaceRole]) -> bool:
    """Only admins manage workspace settings and membership."""
    return role == WorkspaceRole.ADMIN


def can_mutate_project_content(role: Optional[WorkspaceRole]) -> bool:
    """Admins and members may create projects and work items; viewers are read-only."""
    return role in (WorkspaceRole.ADMIN, WorkspaceRole.MEMBER)


def can_edit_project(user_id: UUID, project: Project, role: Optional[WorkspaceRole]) -> bool:
    """A project may be edited by an admin or by whoever created it."""
    if role is None:
        return False
    if role == WorkspaceRole.ADMIN:
        return True
    return project.creator_id is not None and project.creator_id == user_id


class MembershipAuthority:
    """
    Resolves workspace roles and enforces permission checks.

    Every ``require_*`` method raises ``AuthorizationException`` when the check
    fails. A missing membership is treated exactly like an insufficient role,
    so non-members cannot probe which workspaces exist.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_membership(
        self,
        user_id: UUID,
        workspace_id: UUID,
        for_update: bool = False
    ) -> Optional[Membership]:
        """
        Load the membership row binding a user to a workspace.

        Args:
            user_id: User ID
            workspace_id: Workspace ID
            for_update: Lock the row for the rest of the transaction

        Returns:
            Membership if the user belongs to the workspace, None otherwise
        """
        stmt = select(Membership).where(
            Membership.user_id == user_id,
            Membership.workspace_id == workspace_id
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def role_of(
        self,
        user_id: UUID,
        workspace_id: UUID,
        for_update: bool = False
    ) -> Optional[WorkspaceRole]:
        """Return the user's role in the workspace, or None for non-members."""
        membership = await self.get_membership(user_id, workspace_id, for_update=for_update)
        return membership.role if membership else None

    async def is_member(self, user_id: UUID, workspace_id: UUID) -> bool:
        """Check whether a membership row exists."""
        return await self.role_of(user_id, workspace_id) is not None

    def _deny(self, reason: str, user_id: UUID, workspace_id: UUID, message: str) -> AuthorizationException:
        record_authorization_denial(reason)
        logger.info(
            "Authorization denied",
            reason=reason,
            user_id=str(user_id),
            workspace_id=str(workspace_id)
        )
        return AuthorizationException(message)

    async def require_member(
        self,
        user_id: UUID,
        workspace_id: UUID,
        for_update: bool = False
    ) -> WorkspaceRole:
        """
        Require any membership in the workspace.

        Returns:
            The caller's role

        Raises:
            AuthorizationException: If the user is not a member
        """
        role = await self.role_of(user_id, workspace_id, for_update=for_update)
        if role is None:
            raise self._deny(
                "not_a_member", user_id, workspace_id,
                "You are not a member of this workspace"
            )
        return role

    async def require_admin(self, user_id: UUID, workspace_id: UUID) -> WorkspaceRole:
        """Require the ADMIN role in the workspace."""
        role = await self.require_member(user_id, workspace_id)
        if not can_manage_workspace(role):
            raise self._deny(
                "not_admin", user_id, workspace_id,
                "Only workspace admins can perform this action"
            )
        return role

    async def require_contributor(self, user_id: UUID, workspace_id: UUID) -> WorkspaceRole:
        """Require a role that may change project content (ADMIN or MEMBER)."""
        role = await self.require_member(user_id, workspace_id)
        if not can_mutate_project_content(role):
            raise self._deny(
                "read_only_role", user_id, workspace_id,
                "Viewers cannot modify workspace content"
            )
        return role

    async def require_project_editor(self, user_id: UUID, project: Project) -> WorkspaceRole:
        """Require ADMIN or authorship of the project."""
        role = await self.require_member(user_id, project.workspace_id)
        if not can_edit_project(user_id, project, role):
            raise self._deny(
                "not_project_editor", user_id, project.workspace_id,
                "Only workspace admins or the project creator can modify this project"
            )
        return role

    async def get_owner_id(self, workspace_id: UUID, for_update: bool = False) -> Optional[UUID]:
        """Return the workspace owner's user ID."""
        stmt = select(Workspace.owner_id).where(Workspace.id == workspace_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def protect_owner(self, target_user_id: UUID, workspace_id: UUID, acting_user_id: UUID) -> None:
        """
        Refuse membership changes that target the workspace owner.

        Raises:
            AuthorizationException: If the target owns the workspace
        """
        owner_id = await self.get_owner_id(workspace_id)
        if owner_id is not None and owner_id == target_user_id:
            raise self._deny(
                "owner_protected", acting_user_id, workspace_id,
                "The workspace owner's membership cannot be changed"
            )
