"""
Fractional ordering keys for work items on a project board.

New items are appended at ``max(position) + gap``. Moving an item between two
neighbours averages their keys; once two neighbours get closer than the
configured minimum gap, the whole project is renumbered to ``gap, 2*gap, ...``
in its current order.

Callers must hold the project row lock (``lock_project``) for the duration of
the read-max-then-write sequence.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from strideboard.core.config import settings
from strideboard.core.exceptions import ConflictException
from strideboard.core.metrics import record_position_rebalance
from strideboard.modules.project.models import Project

from .models import WorkItem

logger = get_logger(__name__)


def midpoint(before: float, after: float) -> float:
    """Key halfway between two neighbours."""
    return (before + after) / 2.0


def needs_rebalance(before: float, after: float, min_gap: float) -> bool:
    """True when the neighbours are too close to split reliably."""
    if after - before < min_gap:
        return True
    mid = midpoint(before, after)
    # float precision exhausted
    return mid <= before or mid >= after


class PositionAllocator:
    """Computes positions for one project inside the caller's transaction."""

    def __init__(
        self,
        db: AsyncSession,
        gap: Optional[float] = None,
        min_gap: Optional[float] = None
    ):
        self.db = db
        self.gap = gap if gap is not None else settings.position_gap
        self.min_gap = min_gap if min_gap is not None else settings.position_min_gap

    async def lock_project(self, project_id: UUID) -> None:
        """Take the project row lock that serializes ordering changes."""
        await self.db.execute(
            select(Project.id).where(Project.id == project_id).with_for_update()
        )

    async def max_position(self, project_id: UUID) -> Optional[float]:
        """Largest position in the project, or None when it has no work items."""
        result = await self.db.execute(
            select(func.max(WorkItem.position)).where(WorkItem.project_id == project_id)
        )
        return result.scalar_one_or_none()

    async def next_position(self, project_id: UUID) -> float:
        """
        Position for a work item appended at the tail.

        Args:
            project_id: Project ID

        Returns:
            ``max + gap``, or ``gap`` for an empty project
        """
        current_max = await self.max_position(project_id)
        if current_max is None:
            return self.gap
        return current_max + self.gap

    async def ordered_ids(self, project_id: UUID, exclude: Optional[UUID] = None) -> List[UUID]:
        """Work item IDs of the project in board order."""
        stmt = (
            select(WorkItem.id)
            .where(WorkItem.project_id == project_id)
            .order_by(WorkItem.position.asc())
        )
        if exclude is not None:
            stmt = stmt.where(WorkItem.id != exclude)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def rebalance(self, project_id: UUID) -> int:
        """
        Renumber every work item of the project to ``gap * (i + 1)``.

        Positions are first moved to negative placeholders so that no
        intermediate state collides on the (project, position) unique key.

        Returns:
            Number of renumbered work items
        """
        ids = await self.ordered_ids(project_id)

        for index, item_id in enumerate(ids):
            await self.db.execute(
                update(WorkItem)
                .where(WorkItem.id == item_id)
                .values(position=-float(index + 1))
            )
        for index, item_id in enumerate(ids):
            await self.db.execute(
                update(WorkItem)
                .where(WorkItem.id == item_id)
                .values(position=self.gap * (index + 1))
            )

        await self.db.flush()
        record_position_rebalance()
        logger.warning(
            "Work item positions rebalanced",
            project_id=str(project_id),
            work_items=len(ids)
        )
        return len(ids)

    async def _position_of(self, work_item_id: UUID) -> float:
        result = await self.db.execute(
            select(WorkItem.position).where(WorkItem.id == work_item_id)
        )
        return result.scalar_one()

    async def adjacent_position(
        self,
        project_id: UUID,
        position: float,
        below: bool,
        exclude: Optional[UUID] = None
    ) -> Optional[float]:
        """Position of the nearest item below (or above) ``position``, or None."""
        if below:
            stmt = select(func.min(WorkItem.position)).where(WorkItem.position > position)
        else:
            stmt = select(func.max(WorkItem.position)).where(WorkItem.position < position)
        stmt = stmt.where(WorkItem.project_id == project_id)
        if exclude is not None:
            stmt = stmt.where(WorkItem.id != exclude)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def position_between(
        self,
        project_id: UUID,
        before_id: Optional[UUID],
        after_id: Optional[UUID],
        moving_id: Optional[UUID] = None
    ) -> float:
        """
        Position that places an item between two neighbours.

        ``before_id`` is the item that should end up directly above, ``after_id``
        the one directly below. When only one is given the other side is its
        current neighbour on the board; with neither the item goes to the tail.
        Rebalances the project first when the neighbours are too close.

        Args:
            project_id: Project ID
            before_id: Neighbour above, or None
            after_id: Neighbour below, or None
            moving_id: The item being moved, ignored when finding the tail

        Returns:
            The new position
        """
        for attempt in range(2):
            before = await self._position_of(before_id) if before_id else None
            after = await self._position_of(after_id) if after_id else None

            if before is None and after is None:
                ids = await self.ordered_ids(project_id, exclude=moving_id)
                if not ids:
                    return self.gap
                return await self._position_of(ids[-1]) + self.gap
            if after is None:
                after = await self.adjacent_position(project_id, before, below=True, exclude=moving_id)
                if after is None:
                    return before + self.gap
            if before is None:
                before = await self.adjacent_position(project_id, after, below=False, exclude=moving_id)
                if before is None:
                    before = 0.0

            if not needs_rebalance(before, after, self.min_gap):
                return midpoint(before, after)
            if attempt == 0:
                await self.rebalance(project_id)

        raise ConflictException("Unable to find a position between the given neighbours")
