"""
Work item module.

Tasks, bugs and epics with board ordering and change events.
"""

from .models import WorkItem, WorkItemPriority, WorkItemStatus, WorkItemType

__all__ = ["WorkItem", "WorkItemStatus", "WorkItemPriority", "WorkItemType"]
