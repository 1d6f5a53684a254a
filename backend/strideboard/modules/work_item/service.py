"""
Work item service.

Every operation runs the same pipeline: membership check, path containment
check, the mutation, assignment notifications, commit, then the change event.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from strideboard.core.config import settings
from strideboard.core.exceptions import BadRequestException, ConflictException
from strideboard.core.hierarchy import HierarchyValidator
from strideboard.core.rbac import MembershipAuthority
from strideboard.modules.auth.models import User
from strideboard.modules.notification.service import NotificationService
from strideboard.modules.project.models import Project

from .events import ChangeKind, WorkItemChanged, WorkItemEventPublisher, get_event_publisher
from .models import WorkItem
from .positions import PositionAllocator
from .schemas import WorkItemCreate, WorkItemMove, WorkItemResponse, WorkItemUpdate

logger = get_logger(__name__)


class WorkItemService:
    """Service class for work item operations."""

    def __init__(self, db: AsyncSession, publisher: Optional[WorkItemEventPublisher] = None):
        self.db = db
        self.publisher = publisher or get_event_publisher()
        self.authority = MembershipAuthority(db)
        self.hierarchy = HierarchyValidator(db)
        self.positions = PositionAllocator(db)
        self.notifications = NotificationService(db)

    async def _publish(self, kind: ChangeKind, project: Project, work_item_id: UUID,
                       work_item: Optional[WorkItem] = None) -> None:
        event = WorkItemChanged(
            kind=kind,
            work_item_id=work_item_id,
            project_id=project.id,
            workspace_id=project.workspace_id,
            work_item=(
                WorkItemResponse.model_validate(work_item).model_dump(mode="json")
                if work_item is not None else None
            ),
        )
        try:
            await self.publisher.publish(event)
        except Exception:
            # the mutation is already committed; delivery failures only get logged
            logger.exception(
                "Work item event delivery failed",
                kind=kind.value,
                work_item_id=str(work_item_id)
            )

    async def _require_assignable(self, assignee_id: UUID, workspace_id: UUID) -> None:
        if not await self.authority.is_member(assignee_id, workspace_id):
            raise BadRequestException(
                "Assignee must be a member of the workspace",
                details={"assignee_id": str(assignee_id)}
            )

    async def _notify_assignee(self, work_item: WorkItem, project: Project, actor: User) -> None:
        if work_item.assignee_id is None or work_item.assignee_id == actor.id:
            return
        await self.notifications.notify_assignment(
            assignee_id=work_item.assignee_id,
            workspace_id=project.workspace_id,
            project_name=project.name,
            work_item_id=work_item.id,
            work_item_title=work_item.title,
        )

    async def list_work_items(self, workspace_id: UUID, project_id: UUID, user: User) -> List[WorkItem]:
        """
        List a project's work items in board order.

        Args:
            workspace_id: Workspace ID from the path
            project_id: Project ID from the path
            user: Caller (any member)

        Returns:
            Work items ordered by position
        """
        await self.authority.require_member(user.id, workspace_id)
        await self.hierarchy.require_project(project_id, workspace_id)

        result = await self.db.execute(
            select(WorkItem)
            .where(WorkItem.project_id == project_id)
            .order_by(WorkItem.position.asc())
        )
        return list(result.scalars().all())

    async def get_work_item(
        self,
        workspace_id: UUID,
        project_id: UUID,
        work_item_id: UUID,
        user: User
    ) -> WorkItem:
        await self.authority.require_member(user.id, workspace_id)
        return await self.hierarchy.require_work_item(work_item_id, project_id, workspace_id)

    async def create_work_item(
        self,
        workspace_id: UUID,
        project_id: UUID,
        work_item_data: WorkItemCreate,
        user: User
    ) -> WorkItem:
        """
        Create a work item at the tail of the project board.

        The position is allocated under the project row lock inside a
        savepoint; a uniqueness violation on (project, position) is retried.

        Raises:
            AuthorizationException: If the caller is a viewer or not a member
            BadHierarchyException: If the project belongs to another workspace
            BadRequestException: If the title is blank or the assignee is not a member
            ConflictException: If no free position could be allocated
        """
        await self.authority.require_contributor(user.id, workspace_id)
        project = await self.hierarchy.require_project(project_id, workspace_id)

        title = (work_item_data.title or "").strip()
        if not title:
            raise BadRequestException("Work item title cannot be empty")
        if work_item_data.assignee_id is not None:
            await self._require_assignable(work_item_data.assignee_id, workspace_id)

        work_item = None
        for attempt in range(1, settings.position_max_retries + 1):
            candidate = None
            try:
                async with self.db.begin_nested():
                    await self.positions.lock_project(project_id)
                    candidate = WorkItem(
                        title=title,
                        description=work_item_data.description,
                        status=work_item_data.status,
                        priority=work_item_data.priority,
                        type=work_item_data.type,
                        position=await self.positions.next_position(project_id),
                        project_id=project_id,
                        creator_id=user.id,
                        assignee_id=work_item_data.assignee_id,
                    )
                    self.db.add(candidate)
            except IntegrityError:
                logger.warning(
                    "Work item position collision, retrying",
                    project_id=str(project_id),
                    attempt=attempt
                )
                continue
            work_item = candidate
            break

        if work_item is None:
            raise ConflictException(
                "Could not allocate a position for the work item",
                details={"project_id": str(project_id)}
            )

        await self._notify_assignee(work_item, project, user)
        await self.db.commit()

        logger.info(
            "Work item created",
            work_item_id=str(work_item.id),
            project_id=str(project_id),
            position=work_item.position,
            user_id=str(user.id)
        )
        await self._publish(ChangeKind.CREATED, project, work_item.id, work_item)
        return work_item

    async def update_work_item(
        self,
        workspace_id: UUID,
        project_id: UUID,
        work_item_id: UUID,
        work_item_data: WorkItemUpdate,
        user: User
    ) -> WorkItem:
        """
        Update a work item (ADMIN or MEMBER).

        Raises:
            AuthorizationException: If the caller is a viewer or not a member
            BadHierarchyException: If the path does not match the item's parents
            BadRequestException: If the new assignee is not a member
        """
        await self.authority.require_contributor(user.id, workspace_id)
        work_item, project = await self.hierarchy.resolve_work_item(
            work_item_id, project_id, workspace_id
        )

        fields = work_item_data.model_fields_set
        if work_item_data.title is not None and work_item_data.title.strip():
            work_item.title = work_item_data.title.strip()
        if "description" in fields:
            work_item.description = work_item_data.description
        if work_item_data.status is not None:
            work_item.status = work_item_data.status
        if work_item_data.priority is not None:
            work_item.priority = work_item_data.priority
        if work_item_data.type is not None:
            work_item.type = work_item_data.type

        assignee_changed = False
        if "assignee_id" in fields and work_item_data.assignee_id != work_item.assignee_id:
            if work_item_data.assignee_id is not None:
                await self._require_assignable(work_item_data.assignee_id, workspace_id)
            work_item.assignee_id = work_item_data.assignee_id
            assignee_changed = True

        if assignee_changed:
            await self._notify_assignee(work_item, project, user)
        await self.db.commit()

        logger.info(
            "Work item updated",
            work_item_id=str(work_item_id),
            assignee_changed=assignee_changed,
            user_id=str(user.id)
        )
        await self._publish(ChangeKind.UPDATED, project, work_item.id, work_item)
        return work_item

    async def move_work_item(
        self,
        workspace_id: UUID,
        project_id: UUID,
        work_item_id: UUID,
        move: WorkItemMove,
        user: User
    ) -> WorkItem:
        """
        Place a work item between two neighbours, optionally changing its column.

        Raises:
            AuthorizationException: If the caller is a viewer or not a member
            BadHierarchyException: If the item or a neighbour is outside the project
            BadRequestException: If a neighbour is the item itself, or the neighbours
                are out of order or not adjacent
        """
        await self.authority.require_contributor(user.id, workspace_id)
        work_item, project = await self.hierarchy.resolve_work_item(
            work_item_id, project_id, workspace_id
        )
        await self.positions.lock_project(project_id)

        neighbours = {}
        for label, neighbour_id in (("before", move.before_id), ("after", move.after_id)):
            if neighbour_id is None:
                continue
            if neighbour_id == work_item_id:
                raise BadRequestException(f"A work item cannot be placed {label} itself")
            neighbours[label] = await self.hierarchy.require_work_item(
                neighbour_id, project_id, workspace_id
            )
        if len(neighbours) == 2:
            before, after = neighbours["before"], neighbours["after"]
            if before.position >= after.position:
                raise BadRequestException("'before' must be positioned above 'after'")
            following = await self.positions.adjacent_position(
                project_id, before.position, below=True, exclude=work_item_id
            )
            if following != after.position:
                # the caller's board view is stale
                raise BadRequestException(
                    "'before' and 'after' are not adjacent on the board",
                    details={"before_id": str(before.id), "after_id": str(after.id)}
                )

        new_position = await self.positions.position_between(
            project_id, move.before_id, move.after_id, moving_id=work_item_id
        )
        work_item.position = new_position
        if move.status is not None:
            work_item.status = move.status

        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException(
                "Target position is already taken",
                details={"position": new_position}
            )
        await self.db.commit()

        logger.info(
            "Work item moved",
            work_item_id=str(work_item_id),
            position=new_position,
            user_id=str(user.id)
        )
        await self._publish(ChangeKind.UPDATED, project, work_item.id, work_item)
        return work_item

    async def delete_work_item(
        self,
        workspace_id: UUID,
        project_id: UUID,
        work_item_id: UUID,
        user: User
    ) -> None:
        """Delete a work item (ADMIN or MEMBER)."""
        await self.authority.require_contributor(user.id, workspace_id)
        work_item, project = await self.hierarchy.resolve_work_item(
            work_item_id, project_id, workspace_id
        )

        await self.db.delete(work_item)
        await self.db.commit()

        logger.info("Work item deleted", work_item_id=str(work_item_id), user_id=str(user.id))
        await self._publish(ChangeKind.DELETED, project, work_item_id)
