"""
Notification module.

Workspace invites and assignment alerts.
"""

from .models import Notification, NotificationType

__all__ = ["Notification", "NotificationType"]
