"""
Work item change events.

Services hand a ``WorkItemChanged`` to a publisher once the mutation has been
committed. Delivery (websockets, a broker, ...) is the publisher's concern; the
default publisher only writes a structured log line.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from structlog import get_logger

from strideboard.core.metrics import record_work_item_event
from strideboard.core.models import utcnow

logger = get_logger(__name__)


class ChangeKind(str, Enum):
    """Kind of work item change."""
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


@dataclass
class WorkItemChanged:
    """A committed work item mutation."""

    kind: ChangeKind
    work_item_id: UUID
    project_id: UUID
    workspace_id: UUID
    work_item: Optional[Dict[str, Any]] = None
    occurred_at: datetime = field(default_factory=utcnow)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-friendly representation for transports."""
        return {
            "kind": self.kind.value,
            "work_item_id": str(self.work_item_id),
            "project_id": str(self.project_id),
            "workspace_id": str(self.workspace_id),
            "work_item": self.work_item,
            "occurred_at": self.occurred_at.isoformat(),
        }


class WorkItemEventPublisher:
    """Base publisher. Subclasses deliver events to a realtime transport."""

    async def publish(self, event: WorkItemChanged) -> None:
        raise NotImplementedError


class LoggingEventPublisher(WorkItemEventPublisher):
    """Publisher that records events in the application log."""

    async def publish(self, event: WorkItemChanged) -> None:
        record_work_item_event(event.kind.value)
        logger.info(
            "Work item changed",
            kind=event.kind.value,
            work_item_id=str(event.work_item_id),
            project_id=str(event.project_id),
            workspace_id=str(event.workspace_id)
        )


_default_publisher = LoggingEventPublisher()


def get_event_publisher() -> WorkItemEventPublisher:
    """FastAPI dependency returning the active publisher."""
    return _default_publisher
