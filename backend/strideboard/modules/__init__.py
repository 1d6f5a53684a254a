"""
Application modules package.

This package contains all the feature modules of the application.
"""

# Import all models to ensure they are registered with SQLAlchemy
from strideboard.modules.auth.models import User
from strideboard.modules.notification.models import Notification, NotificationType
from strideboard.modules.project.models import Project
from strideboard.modules.work_item.models import (
    WorkItem,
    WorkItemPriority,
    WorkItemStatus,
    WorkItemType,
)
from strideboard.modules.workspace.models import Membership, Workspace, WorkspaceRole

__all__ = [
    "User",
    "Workspace",
    "Membership",
    "WorkspaceRole",
    "Project",
    "WorkItem",
    "WorkItemStatus",
    "WorkItemPriority",
    "WorkItemType",
    "Notification",
    "NotificationType",
]
